"""Helper functions for building ffmpeg commands

Single-input templates are assembled with ffmpeg-python; the crossfade
join takes a prebuilt filter graph with explicit stream labels.
"""

import logging
from pathlib import Path
from typing import List, Sequence

import ffmpeg

from ..config import (
    AUDIO_BITRATE, AUDIO_CODEC, CRF, FFMPEG, FINGERPRINT_SIZE,
    PIX_FMT, PRESET, VIDEO_CODEC
)

log = logging.getLogger(__name__)

GLOBAL_ARGS = ["-hide_banner", "-loglevel", "error", "-y"]

REENCODE_ARGS = {
    "c:v": VIDEO_CODEC,
    "preset": PRESET,
    "crf": CRF,
    "c:a": AUDIO_CODEC,
    "b:a": AUDIO_BITRATE,
}

EVEN_SCALE_FILTER = "scale=trunc(iw/2)*2:trunc(ih/2)*2"


def format_seconds(value: float) -> str:
    """Format a timestamp for ffmpeg with millisecond precision"""
    return f"{value:.3f}"


def format_length(value: float) -> str:
    """Format a clip length for ffmpeg; lengths are drawn on a 0.1s grid"""
    return f"{value:.1f}"


def _compile(stream) -> List[str]:
    return [FFMPEG, *GLOBAL_ARGS, *stream.get_args()]


def build_copy_cut_command(input_file: Path, start: float, duration: float, output_file: Path) -> List[str]:
    """Build a stream-copy cut (input seeking, keyframe accurate)"""
    stream = ffmpeg.input(
        str(input_file), ss=format_seconds(start), t=format_length(duration)
    ).output(str(output_file), c="copy")
    return _compile(stream)


def build_reencode_cut_command(input_file: Path, start: float, duration: float, output_file: Path) -> List[str]:
    """Build a frame-accurate cut that re-encodes the clip"""
    stream = ffmpeg.input(str(input_file)).output(
        str(output_file), ss=format_seconds(start), t=format_length(duration), **REENCODE_ARGS
    )
    return _compile(stream)


def build_cut_command(
    input_file: Path,
    start: float,
    duration: float,
    output_file: Path,
    fast_split: bool = True
) -> List[str]:
    """Build a cut command for the selected split strategy"""
    if fast_split:
        return build_copy_cut_command(input_file, start, duration, output_file)
    return build_reencode_cut_command(input_file, start, duration, output_file)


def build_normalize_command(input_file: Path, output_file: Path) -> List[str]:
    """Build a re-encode that rounds frame dimensions down to even values"""
    stream = ffmpeg.input(str(input_file)).output(
        str(output_file), vf=EVEN_SCALE_FILTER, **REENCODE_ARGS
    )
    return _compile(stream)


def build_thumbnail_command(input_file: Path, output_file: Path) -> List[str]:
    """Build a command extracting one grayscale thumbnail frame"""
    size = FINGERPRINT_SIZE
    stream = ffmpeg.input(str(input_file)).output(
        str(output_file),
        vf=f"scale={size}:{size}:flags=bilinear,format=gray",
        **{"frames:v": 1}
    )
    return _compile(stream)


def build_concat_copy_command(concat_file: Path, output_file: Path) -> List[str]:
    """Build a concat-demuxer join without re-encoding"""
    stream = ffmpeg.input(str(concat_file), format="concat", safe=0).output(str(output_file), c="copy")
    return _compile(stream)


def build_concat_reencode_command(concat_file: Path, output_file: Path) -> List[str]:
    """Build a concat-demuxer join that re-encodes heterogeneous segments"""
    stream = ffmpeg.input(str(concat_file), format="concat", safe=0).output(
        str(output_file), **REENCODE_ARGS
    )
    return _compile(stream)


def build_crossfade_command(
    segments: Sequence[Path],
    filter_graph: str,
    video_label: str,
    audio_label: str,
    output_file: Path
) -> List[str]:
    """Build a single-pass crossfade join over a chained filter graph"""
    cmd = [FFMPEG, *GLOBAL_ARGS]
    for segment in segments:
        cmd.extend(["-i", str(segment)])
    cmd.extend([
        "-filter_complex", filter_graph,
        "-map", video_label,
        "-map", audio_label,
        "-c:v", VIDEO_CODEC,
        "-preset", PRESET,
        "-crf", str(CRF),
        "-c:a", AUDIO_CODEC,
        "-b:a", AUDIO_BITRATE,
        "-pix_fmt", PIX_FMT,
        "-movflags", "+faststart",
        str(output_file)
    ])
    return cmd
