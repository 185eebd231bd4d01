"""Low-level ffprobe command execution

Responsibilities:
- Build ffprobe queries for format and stream entries
- Run them through the supervised ToolRunner
- Parse the plain-text output into typed values
"""

import logging
from pathlib import Path
from typing import Tuple

from ..config import FFPROBE
from ..exceptions import ProbeError, ToolFailure
from ..runner import ToolRunner

logger = logging.getLogger(__name__)

DURATION_ARGS = (
    "-show_entries", "format=duration",
    "-of", "default=noprint_wrappers=1:nokey=1",
)

DIMENSION_ARGS = (
    "-select_streams", "v:0",
    "-show_entries", "stream=width,height",
    "-of", "csv=s=x:p=0",
)


def build_probe_command(path: Path, args: tuple) -> list:
    """Build an ffprobe command for the given query arguments."""
    return [FFPROBE, "-v", "error", *args, str(path)]


def ffprobe_query(runner: ToolRunner, path: Path, args: tuple) -> str:
    """
    Run ffprobe and return its stripped text output.

    Raises:
        ProbeError: If ffprobe fails or prints nothing
    """
    try:
        output = runner.run(build_probe_command(path, args))
    except ToolFailure as e:
        raise ProbeError(f"ffprobe failed for {path.name}: {e.stderr}") from e
    value = (output or "").strip()
    if not value:
        raise ProbeError(f"No output from ffprobe for {path.name}")
    return value


def parse_duration(value: str) -> float:
    """Parse a duration in seconds; must be a non-negative real number."""
    try:
        duration = float(value.splitlines()[0].strip())
    except (ValueError, IndexError) as e:
        raise ProbeError(f"Could not read video duration: {value!r}", "duration") from e
    if duration != duration or duration < 0:
        raise ProbeError(f"Invalid duration value: {value!r}", "duration")
    return duration


def parse_dimensions(value: str) -> Tuple[int, int]:
    """Parse a ``WIDTHxHEIGHT`` pair."""
    parts = value.splitlines()[0].strip().split("x") if value else []
    if len(parts) != 2:
        raise ProbeError(f"Could not read video dimensions: {value!r}", "dimensions")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError as e:
        raise ProbeError(f"Could not read video dimensions: {value!r}", "dimensions") from e
