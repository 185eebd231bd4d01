"""Handles joining of segments into a mix video.

Two strategies are supported:
  - Cut join: concat demuxer with stream copy, re-encoding once on failure
  - Crossfade join: a single chained xfade/acrossfade filter graph
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from ..config import FADE_RATIO, MAX_FADE, MIN_FADE
from ..exceptions import ToolFailure
from ..ffprobe import ProbeSession, get_duration
from ..runner import ToolRunner
from .command_builders import (
    build_concat_copy_command, build_concat_reencode_command,
    build_crossfade_command
)

logger = logging.getLogger(__name__)


def format_number(value: float) -> str:
    """Render a filter argument without float noise or trailing zeros"""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"


def calc_fade_duration(prev: float, next_: float) -> float:
    """Fade length for a pair of clips: 20% of the shorter one, within bounds."""
    value = min(prev, next_) * FADE_RATIO
    value = min(MAX_FADE, value)
    value = max(MIN_FADE, value)
    return round(value, 2)


def build_crossfade_filter(durations: Sequence[float]) -> Tuple[str, str, str]:
    """
    Build a chained crossfade filter graph.

    Args:
        durations: Clip lengths in join order; at least two

    Returns:
        (filter graph, final video label, final audio label)
    """
    if len(durations) < 2:
        raise ValueError("Crossfade needs at least two segments")

    fades = [calc_fade_duration(durations[i - 1], durations[i]) for i in range(1, len(durations))]

    filters = [
        f"[0:v][1:v]xfade=transition=fade:duration={format_number(fades[0])}"
        f":offset={format_number(durations[0] - fades[0])}[v1]",
        f"[0:a][1:a]acrossfade=d={format_number(fades[0])}[a1]",
    ]
    current_len = durations[0] + durations[1] - fades[0]

    for i in range(2, len(durations)):
        fade = fades[i - 1]
        offset = current_len - fade
        filters.append(
            f"[v{i - 1}][{i}:v]xfade=transition=fade:duration={format_number(fade)}"
            f":offset={format_number(offset)}[v{i}]"
        )
        filters.append(f"[a{i - 1}][{i}:a]acrossfade=d={format_number(fade)}[a{i}]")
        current_len = current_len + durations[i] - fade

    last = len(durations) - 1
    return ";".join(filters), f"[v{last}]", f"[a{last}]"


def escape_concat_path(path: Path) -> str:
    """Quote a path for a concat demuxer list entry"""
    safe = Path(path).absolute().as_posix().replace("'", "'\\''")
    return f"file '{safe}'"


def write_concat_list(segments: Sequence[Path], concat_file: Path) -> None:
    with open(concat_file, "w", encoding="utf-8") as f:
        for segment in segments:
            f.write(escape_concat_path(segment) + "\n")


def concat_cut(
    runner: ToolRunner,
    segments: Sequence[Path],
    output_file: Path,
    log_line: Optional[Callable[[str], None]] = None
) -> None:
    """
    Join segments with hard cuts.

    Raises:
        ToolFailure: If both the stream-copy and the re-encode join fail
    """
    log_line = log_line or logger.info
    concat_file = output_file.with_name(f".{output_file.stem}_concat.txt")
    try:
        write_concat_list(segments, concat_file)
        try:
            runner.run(build_concat_copy_command(concat_file, output_file))
        except ToolFailure as e:
            log_line(f"Concat copy failed, re-encoding: {e.stderr}")
            runner.run(build_concat_reencode_command(concat_file, output_file))
    finally:
        concat_file.unlink(missing_ok=True)


def concat_crossfade(
    runner: ToolRunner,
    session: ProbeSession,
    segments: Sequence[Path],
    output_file: Path
) -> None:
    """Join segments with crossfades in a single ffmpeg invocation."""
    durations = [get_duration(session, segment) for segment in segments]
    filter_graph, video_label, audio_label = build_crossfade_filter(durations)
    logger.debug("Crossfade graph: %s", filter_graph)
    runner.run(build_crossfade_command(segments, filter_graph, video_label, audio_label, output_file))


def concatenate_segments(
    runner: ToolRunner,
    session: ProbeSession,
    segments: List[Path],
    output_file: Path,
    crossfade: bool = False,
    log_line: Optional[Callable[[str], None]] = None
) -> None:
    """
    Concatenate segments into a mix video.

    A crossfade request with a single segment falls back to the cut join.
    """
    if not segments:
        raise ValueError("No segments to concatenate")
    output_file.parent.mkdir(parents=True, exist_ok=True)

    if crossfade and len(segments) > 1:
        concat_crossfade(runner, session, segments, output_file)
    else:
        concat_cut(runner, segments, output_file, log_line)
    logger.info("Wrote %s from %d segments", output_file.name, len(segments))
