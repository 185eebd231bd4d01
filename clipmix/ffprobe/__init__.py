"""FFProbe utilities for media file analysis

This package provides utilities for:
- Executing ffprobe queries through the supervised runner
- Caching probe results for the duration of a run
- Extracting duration and frame dimensions
"""

from .exec import ffprobe_query, parse_dimensions, parse_duration
from .session import ProbeSession
from .media import get_dimensions, get_duration, has_even_dimensions

__all__ = [
    'ffprobe_query',
    'parse_duration',
    'parse_dimensions',
    'ProbeSession',
    'get_duration',
    'get_dimensions',
    'has_even_dimensions',
]
