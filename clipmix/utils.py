"""Utility functions for the clipmix pipeline"""

import logging
import os
import shutil
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Generator, List, Set

from .config import FFMPEG, FFPROBE, SAFE_SUFFIX, SUPPORTED_EXTENSIONS, TIMESTAMP_FORMAT, TOOLS_DIR
from .exceptions import DependencyError

logger = logging.getLogger(__name__)


def get_timestamp(fmt: str = TIMESTAMP_FORMAT) -> str:
    """Get current timestamp, YYYYMMDD_HHMM by default"""
    return datetime.now().strftime(fmt)


def base_name(path: Path) -> str:
    """Output name stem of a source, ignoring the even-dimension suffix"""
    return path.stem.replace(SAFE_SUFFIX, "")


def unique_name(name: str, taken: Set[str]) -> str:
    """Claim ``name`` for this run, numbering it when another source already has it"""
    candidate = name
    counter = 2
    while candidate in taken:
        candidate = f"{name}_{counter}"
        counter += 1
    taken.add(candidate)
    return candidate


def discover_videos(input_dir: Path) -> List[Path]:
    """List supported video files directly inside ``input_dir``, sorted by name"""
    return sorted(
        p for p in input_dir.iterdir()
        if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS
    )


def resolve_tool(tool: str) -> str:
    """
    Locate an external binary.

    Checks an explicit path, then the bundled tools directory, then PATH.

    Raises:
        DependencyError: If the tool cannot be found
    """
    candidate = Path(tool)
    if candidate.is_absolute() and candidate.is_file():
        return str(candidate)

    for name in (tool, tool + ".exe"):
        bundled = TOOLS_DIR / name
        if bundled.is_file():
            return str(bundled)

    found = shutil.which(tool)
    if found:
        return found
    raise DependencyError(f"Cannot find {tool}. Place it in {TOOLS_DIR} or on PATH.", module="utils")


def resolve_tools() -> Dict[str, str]:
    """Map the configured ffmpeg/ffprobe names to the binaries that will run."""
    return {tool: resolve_tool(tool) for tool in (FFMPEG, FFPROBE)}


def check_dependencies() -> bool:
    """Check for required dependencies"""
    try:
        tools = resolve_tools()
    except DependencyError as e:
        logger.error("Required dependency not found: %s", e.message)
        return False
    for tool, path in tools.items():
        logger.debug("Using %s at %s", tool, path)
    return True


def move_processed(source: Path, processed_dir: Path) -> Path:
    """Move a finished source into the processed folder, replacing any previous copy"""
    destination = processed_dir / source.name
    try:
        os.replace(source, destination)
    except OSError:
        # Cross-device moves cannot be renamed atomically
        shutil.copy2(source, destination)
        source.unlink()
    return destination


@contextmanager
def scoped_directory(path: Path) -> Generator[Path, None, None]:
    """Create a working directory and remove it on exit, success or failure"""
    path.mkdir(parents=True, exist_ok=True)
    try:
        yield path
    finally:
        if path.exists():
            shutil.rmtree(path, ignore_errors=True)
            logger.debug("Removed working directory %s", path)
