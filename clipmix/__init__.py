"""
clipmix - bulk video segmentation and re-mixing

This package provides a batch pipeline that:
- Splits source videos into randomized-length segments
- Optionally drops visually near-duplicate segments
- Samples segments across the timeline into new "mix" videos
- Joins mixes with a hard cut or a crossfade
- Supports cooperative pause, cancellation and progress reporting

All media work is delegated to the ffmpeg/ffprobe binaries, one process
at a time.
"""

__version__ = "0.1.0"
