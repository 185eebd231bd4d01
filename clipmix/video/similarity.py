"""Near-duplicate segment detection

Responsibilities:
  - Fingerprint a segment from one 32x32 grayscale thumbnail frame
  - Compare fingerprints by the fraction of equal bits
  - Greedily drop segments similar to one already kept

The pass is single and order dependent: a kept segment is never
re-evaluated. Cost is quadratic in the segment count.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Dict, List, Optional

import cv2
import numpy as np

from ..config import FINGERPRINT_SIZE
from ..exceptions import FingerprintError, ToolFailure
from ..runner import ToolRunner
from .command_builders import build_thumbnail_command
from .segmentation import Segment

logger = logging.getLogger(__name__)

Fingerprint = np.ndarray


def fingerprint_from_pixels(pixels: np.ndarray) -> Fingerprint:
    """Threshold luminance values at their own mean into a flat bit vector."""
    values = np.asarray(pixels, dtype=np.float64).ravel()
    if values.size == 0:
        raise FingerprintError("Empty thumbnail frame", module="similarity")
    return values >= values.mean()


def extract_fingerprint(runner: ToolRunner, segment_path: Path) -> Fingerprint:
    """
    Fingerprint a segment from its first frame.

    Raises:
        ToolFailure: If ffmpeg cannot extract the frame
        FingerprintError: If the extracted frame cannot be decoded
    """
    fd, name = tempfile.mkstemp(prefix="frame_", suffix=".png")
    os.close(fd)
    frame_file = Path(name)
    try:
        runner.run(build_thumbnail_command(segment_path, frame_file))
        image = cv2.imread(str(frame_file), cv2.IMREAD_GRAYSCALE)
        if image is None:
            raise FingerprintError(f"Could not decode thumbnail of {segment_path.name}", module="similarity")
        if image.shape != (FINGERPRINT_SIZE, FINGERPRINT_SIZE):
            image = cv2.resize(image, (FINGERPRINT_SIZE, FINGERPRINT_SIZE), interpolation=cv2.INTER_LINEAR)
        return fingerprint_from_pixels(image)
    finally:
        frame_file.unlink(missing_ok=True)


def similarity(a: Fingerprint, b: Fingerprint) -> float:
    """Fraction of equal bits; fingerprints of different length score 0."""
    if a.shape != b.shape or a.size == 0:
        return 0.0
    return float(np.count_nonzero(a == b)) / a.size


def filter_similar_segments(
    segments: List[Segment],
    threshold: float,
    runner: ToolRunner,
    fingerprint: Optional[Callable[[Path], Fingerprint]] = None,
    log_line: Optional[Callable[[str], None]] = None
) -> List[Segment]:
    """
    Drop segments whose fingerprint is too close to a kept one.

    Dropped segment files are deleted. Segments that cannot be
    fingerprinted are kept.

    Args:
        segments: Segments in cut order
        threshold: Similarity at or above which a segment is a duplicate
        runner: Runner used for thumbnail extraction and cancellation checks
        fingerprint: Override for the fingerprint function
        log_line: Callback for user-facing messages

    Returns:
        The kept segments, in their original order

    Raises:
        Cancelled: If the run is cancelled
    """
    log_line = log_line or logger.info
    if fingerprint is None:
        def fingerprint(path: Path) -> Fingerprint:
            return extract_fingerprint(runner, path)

    kept: List[Segment] = []
    hashes: Dict[Path, Fingerprint] = {}

    for segment in segments:
        runner.context.raise_if_cancelled()
        try:
            current = fingerprint(segment.path)
        except (ToolFailure, FingerprintError, OSError) as e:
            logger.warning("Fingerprint failed for %s: %s", segment.path.name, e)
            log_line(f"Skip hash {segment.path.name}: {e}")
            kept.append(segment)
            continue

        is_similar = any(
            similarity(current, hashes[other.path]) >= threshold
            for other in kept
            if other.path in hashes
        )

        if is_similar:
            log_line(f"Delete similar segment: {segment.path.name}")
            try:
                segment.path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Could not delete %s: %s", segment.path, e)
        else:
            hashes[segment.path] = current
            kept.append(segment)

    logger.info("Kept %d of %d segments after similarity filtering", len(kept), len(segments))
    return kept
