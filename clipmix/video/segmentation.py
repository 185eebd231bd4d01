"""
Video Segmentation Module

Responsibilities:
  - Draw randomized segment lengths on a 0.1s grid
  - Plan a sequence of segments covering a source from the start
  - Cut every planned segment into its own file

A trailing remainder shorter than the minimum length is discarded rather
than emitted.
"""

import logging
import math
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from ..runner import ToolRunner
from .command_builders import build_cut_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Segment:
    """A clip cut from a source video.

    Attributes:
        path: File holding the clip
        start_seconds: Offset of the clip in its source
        length_seconds: Requested clip length
        sequence_index: Zero-based position in cut order
    """
    path: Path
    start_seconds: float
    length_seconds: float
    sequence_index: int


def next_segment_length(rng: random.Random, min_time: int, max_time: int) -> float:
    """Draw a segment length in [min_time, max_time], rounded to 0.1s."""
    if min_time >= max_time:
        return float(min_time)

    value = min_time + (max_time - min_time) * rng.random()
    rounded = round(value * 10.0) / 10.0
    return min(max(rounded, float(min_time)), float(max_time))


def plan_segments(
    total: float,
    min_time: int,
    max_time: int,
    rng: random.Random
) -> List[Tuple[float, float]]:
    """
    Partition ``[0, total)`` into randomized (start, length) pairs.

    Args:
        total: Source duration in seconds
        min_time: Minimum segment length in seconds
        max_time: Maximum segment length in seconds
        rng: Random source

    Returns:
        Ordered (start, length) pairs; their lengths sum to at most ``total``
    """
    plan = []
    current = 0.0
    while current < total:
        length = next_segment_length(rng, min_time, max_time)
        if current + length > total:
            length = float(math.floor(total - current))
        if length < min_time:
            break
        plan.append((current, length))
        current += length
    return plan


def split_video(
    runner: ToolRunner,
    input_file: Path,
    total: float,
    min_time: int,
    max_time: int,
    output_dir: Path,
    timestamp: str,
    rng: random.Random,
    prefix: str = "",
    fast_split: bool = True,
    log_line: Optional[Callable[[str], None]] = None
) -> List[Segment]:
    """
    Cut a source into randomized-length segment files.

    Segment files are named ``<prefix>scene_<n>_<timestamp>.mp4``.

    Returns:
        The segments in cut order

    Raises:
        Cancelled: If the run is cancelled between or during cuts
        ToolFailure: If ffmpeg fails on a cut
    """
    log_line = log_line or logger.info
    output_dir.mkdir(parents=True, exist_ok=True)

    segments = []
    for index, (start, length) in enumerate(plan_segments(total, min_time, max_time, rng)):
        runner.context.wait_until_runnable()
        output_file = output_dir / f"{prefix}scene_{index + 1}_{timestamp}.mp4"
        log_line(f"  -> Scene {index + 1}: start {math.floor(start)}s, duration {length:.1f}s")
        runner.run(build_cut_command(input_file, start, length, output_file, fast_split))
        segments.append(Segment(output_file, start, length, index))

    logger.info("Cut %d segments from %s", len(segments), input_file.name)
    return segments
