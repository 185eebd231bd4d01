"""High-level media property extraction"""

import logging
from pathlib import Path
from typing import Tuple

from .session import ProbeSession

logger = logging.getLogger(__name__)


def get_duration(session: ProbeSession, path: Path) -> float:
    """Get container duration in seconds"""
    return session.get(path, "duration")


def get_dimensions(session: ProbeSession, path: Path) -> Tuple[int, int]:
    """Get width and height of the first video stream"""
    return session.get(path, "dimensions")


def has_even_dimensions(session: ProbeSession, path: Path) -> bool:
    """Check whether both frame dimensions are even"""
    width, height = get_dimensions(session, path)
    return width % 2 == 0 and height % 2 == 0
