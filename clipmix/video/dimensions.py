"""Frame dimension normalization

Common codecs need even frame dimensions; sources with an odd width or
height are re-encoded once before segmenting.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from ..config import SAFE_SUFFIX
from ..ffprobe import ProbeSession, has_even_dimensions
from ..runner import ToolRunner
from .command_builders import build_normalize_command

logger = logging.getLogger(__name__)


def ensure_even_dimensions(
    runner: ToolRunner,
    session: ProbeSession,
    input_file: Path,
    work_dir: Path,
    log_line: Optional[Callable[[str], None]] = None
) -> Path:
    """
    Return a path to a copy of the source with even frame dimensions.

    Args:
        runner: Runner for ffmpeg
        session: Probe session of the run
        input_file: Source video
        work_dir: Directory for the re-encoded copy

    Returns:
        ``input_file`` itself when already even, else the re-encoded copy

    Raises:
        ProbeError: If the dimensions cannot be read
        ToolFailure: If the re-encode fails
    """
    if has_even_dimensions(session, input_file):
        return input_file

    log_line = log_line or logger.info
    work_dir.mkdir(parents=True, exist_ok=True)
    safe_file = work_dir / f"{input_file.stem}{SAFE_SUFFIX}{input_file.suffix}"
    log_line(f"Re-encoding {input_file.name}...")
    runner.run(build_normalize_command(input_file, safe_file))
    return safe_file
