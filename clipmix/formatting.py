"""Terminal rendering of pipeline messages with rich

Pipeline messages are plain strings; their console style is chosen from
their wording so the pipeline never has to know about the terminal.
"""

from datetime import timedelta
from typing import Optional

from rich.console import Console
from rich.text import Text

console = Console()

# kind -> (marker, marker style, message style)
MESSAGE_STYLES = {
    "done": ("✓", "bold green", "bold"),
    "warning": ("⚠", "bold yellow", "bold"),
    "error": ("✗", "bold red", "bold"),
    "progress": ("ℹ", "bold blue", "blue"),
}

WARNING_PREFIXES = (
    "Skip hash", "Delete similar segment", "Concat copy failed",
    "Processing limit", "Paused for manual delete", "Cancelling",
)


def classify(message: str) -> str:
    """Pick the display kind of a pipeline message; unknown wording stays plain."""
    if message.startswith("Error"):
        return "error"
    if message.startswith(WARNING_PREFIXES):
        return "warning"
    if message.startswith(("Done:", "All done!", "Completed video")):
        return "done"
    return "plain"


def print_message(message: str, kind: Optional[str] = None) -> None:
    """Print a pipeline message with the marker of its kind."""
    kind = kind or classify(message)
    if kind not in MESSAGE_STYLES:
        console.print(message)
        return
    marker, marker_style, style = MESSAGE_STYLES[kind]
    console.print(Text(f"{marker} ", style=marker_style) + Text(message, style=style))


def print_banner(version: str) -> None:
    console.rule(f"[bold blue]clipmix v{version}")


def format_remaining(remaining: Optional[timedelta]) -> str:
    """Format an ETA as ``~Mm SSs``."""
    if remaining is None:
        return "unknown"
    total = max(0, int(remaining.total_seconds()))
    return f"~{total // 60}m {total % 60:02d}s"
