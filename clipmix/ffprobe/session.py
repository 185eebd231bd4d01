"""FFProbe session management

Responsibilities:
- Provide a run-scoped cache for ffprobe queries
- Guarantee each file property is probed at most once per run
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Tuple

from ..runner import ToolRunner
from .exec import (
    DIMENSION_ARGS, DURATION_ARGS, ffprobe_query,
    parse_dimensions, parse_duration
)

logger = logging.getLogger(__name__)

_QUERIES: Dict[str, Tuple[tuple, Callable[[str], Any]]] = {
    "duration": (DURATION_ARGS, parse_duration),
    "dimensions": (DIMENSION_ARGS, parse_dimensions),
}


class ProbeSession:
    """Caches ffprobe results for the lifetime of one pipeline run"""
    def __init__(self, runner: ToolRunner):
        self.runner = runner
        self._cache: Dict[Tuple[Path, str], Any] = {}

    def get(self, path: Path, property_name: str) -> Any:
        """Get a property, caching the result"""
        if property_name not in _QUERIES:
            raise ValueError(f"Unknown probe property: {property_name}")
        cache_key = (Path(path), property_name)
        if cache_key not in self._cache:
            args, parse = _QUERIES[property_name]
            self._cache[cache_key] = parse(ffprobe_query(self.runner, Path(path), args))
            logger.debug("Probed %s of %s: %s", property_name, path, self._cache[cache_key])
        return self._cache[cache_key]

    def remember(self, path: Path, property_name: str, value: Any) -> None:
        """Seed the cache with a value known without probing."""
        self._cache[(Path(path), property_name)] = value

    def forget_under(self, directory: Path) -> None:
        """Drop cached results for files inside a working directory that is going away."""
        directory = Path(directory)
        stale = [key for key in self._cache if directory in key[0].parents]
        for key in stale:
            del self._cache[key]
        if stale:
            logger.debug("Evicted %d probe results under %s", len(stale), directory)
