"""Test doubles shared by the pipeline tests"""

from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from clipmix.config import FFPROBE
from clipmix.context import RunContext
from clipmix.observer import PipelineObserver


class FakeRunner:
    """Stands in for ToolRunner: answers ffprobe queries and touches ffmpeg outputs."""

    def __init__(
        self,
        context: Optional[RunContext] = None,
        durations: Optional[Dict[str, float]] = None,
        default_duration: float = 60.0,
        dimensions: Tuple[int, int] = (1920, 1080),
    ):
        self.context = context or RunContext(poll_interval=0.01)
        self.durations = durations or {}
        self.default_duration = default_duration
        self.dimensions = dimensions
        self.commands: List[List[str]] = []
        self.hooks: List[Callable[[List[str]], None]] = []

    def run(self, cmd: List[str]) -> str:
        self.context.wait_until_runnable()
        self.commands.append(cmd)
        for hook in self.hooks:
            hook(cmd)
        self.context.raise_if_cancelled()

        target = Path(cmd[-1])
        if cmd[0] == FFPROBE:
            if "format=duration" in cmd:
                return f"{self.durations.get(target.name, self.default_duration)}\n"
            return "%dx%d\n" % self.dimensions
        target.touch()
        return ""

    def ffmpeg_commands(self) -> List[List[str]]:
        return [cmd for cmd in self.commands if cmd[0] != FFPROBE]

    def cut_commands(self) -> List[List[str]]:
        return [cmd for cmd in self.ffmpeg_commands() if "-t" in cmd]


class RecordingObserver(PipelineObserver):
    """Observer that records everything it is told."""

    def __init__(self, allowed: Optional[int] = None):
        self.lines: List[str] = []
        self.snapshots = []
        self.registered: List[Path] = []
        self.allowed = allowed
        self.pauses: List[Path] = []

    def can_process(self, path: Path) -> bool:
        return self.allowed is None or len(self.registered) < self.allowed

    def register_processed(self, path: Path) -> None:
        self.registered.append(path)

    def log_line(self, message: str) -> None:
        self.lines.append(message)

    def update_progress(self, snapshot) -> None:
        self.snapshots.append(snapshot)

    def manual_pause(self, folder: Path, context: RunContext) -> None:
        self.pauses.append(folder)
