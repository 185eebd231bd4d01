"""Temporally diverse segment sampling

Responsibilities:
  - Partition segment indices into contiguous buckets
  - Draw one index per bucket, avoiding a repeat of the previous mix
  - Partition a duration into contiguous time buckets for direct mixing
"""

import logging
import random
from typing import List, Optional, Tuple

from ..config import MAX_PICK_ATTEMPTS

logger = logging.getLogger(__name__)


def build_buckets(total: int, count: int) -> List[range]:
    """
    Split ``[0, total)`` into ``count`` contiguous index ranges.

    Bucket ``i`` is ``[floor(i*total/count), floor((i+1)*total/count))``.
    A bucket that would be empty is widened to one index, so buckets
    overlap when ``total < count``.
    """
    buckets = []
    for i in range(count):
        start = i * total // count
        end = (i + 1) * total // count
        if end <= start:
            end = start + 1
        buckets.append(range(start, min(end, total)))
    return buckets


def build_time_buckets(total_seconds: float, count: int) -> List[Tuple[float, float]]:
    """Split a duration into ``count`` equal (start, length) windows."""
    buckets = []
    for i in range(count):
        start = (total_seconds * i) / count
        end = (total_seconds * (i + 1)) / count
        buckets.append((start, max(0.0, end - start)))
    return buckets


class DiverseSampler:
    """
    Picks one segment index per bucket for every mix.

    Attributes:
        rng (random.Random): Random source
        max_attempts (int): Draws tried before a repeat is accepted
    """
    def __init__(self, rng: random.Random, max_attempts: int = MAX_PICK_ATTEMPTS):
        self.rng = rng
        self.max_attempts = max_attempts

    def _draw(self, buckets: List[range]) -> Tuple[int, ...]:
        return tuple(self.rng.choice(bucket) for bucket in buckets)

    def pick(self, total: int, count: int, previous: Optional[Tuple[int, ...]] = None) -> Tuple[int, ...]:
        """
        Draw an ordered selection of ``count`` indices out of ``total``.

        Args:
            total: Number of available segments
            count: Segments per mix
            previous: Selection of the previous mix, if any

        Returns:
            One index per bucket, in bucket order. Differs from ``previous``
            unless every attempt repeated it.
        """
        if total < 1 or count < 1:
            raise ValueError(f"Cannot pick {count} of {total} segments")

        buckets = build_buckets(total, count)
        for _ in range(self.max_attempts):
            indices = self._draw(buckets)
            if indices != previous:
                return indices

        logger.debug("No new combination after %d attempts; accepting a repeat", self.max_attempts)
        return self._draw(buckets)
