"""Configuration settings for the clipmix pipeline

This module centralizes the static configuration:
- External tool locations and log directory
- Re-encode parameters shared by every ffmpeg template
- Segmentation, sampling and crossfade constants
- Polling interval used while supervising subprocesses

User-configurable values can be overridden with environment variables.
Per-run parameters live in clipmix.options.
"""

import os
from pathlib import Path

# External tools; resolved against tools/ and PATH when not absolute
FFMPEG = os.environ.get("CLIPMIX_FFMPEG", "ffmpeg")
FFPROBE = os.environ.get("CLIPMIX_FFPROBE", "ffprobe")
TOOLS_DIR = Path(__file__).resolve().parent.parent / "tools"

# LOG_DIR: user definable with default of "$HOME/clipmix_logs"
LOG_DIR = Path(os.environ.get("CLIPMIX_LOG_DIR", str(Path.home() / "clipmix_logs")))

# Logging configuration
LOG_LEVEL = os.environ.get("CLIPMIX_LOG_LEVEL", "INFO")

# Subprocess supervision
POLL_INTERVAL = float(os.environ.get("CLIPMIX_POLL_INTERVAL", "0.2"))  # seconds

# Re-encode settings
VIDEO_CODEC = "libx264"
PRESET = "fast"
CRF = 23
AUDIO_CODEC = "aac"
AUDIO_BITRATE = "128k"
PIX_FMT = "yuv420p"

# Input discovery
SUPPORTED_EXTENSIONS = (".mp4", ".mov", ".mkv", ".avi")
SAFE_SUFFIX = "_safe"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M"

# Temporary folders created under the output directory
SEGMENTS_SUBDIR = "_segments"
DIRECT_SUBDIR = "_direct"
NORMALIZED_SUBDIR = "_normalized"

# Sampling
MAX_PICK_ATTEMPTS = 30

# Similarity fingerprint (32x32 grayscale thumbnail)
FINGERPRINT_SIZE = 32

# Crossfade bounds (seconds)
MIN_FADE = 0.05
MAX_FADE = 0.5
FADE_RATIO = 0.2
