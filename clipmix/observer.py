"""Progress reporting and collaborator hooks.

The pipeline reports to a PipelineObserver instead of raw callbacks. The
observer also answers the processing-limit gate and blocks for manual
review. Front-ends subclass it; tests substitute a recording observer.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Callable, Optional

from .context import RunContext
from .formatting import console, format_remaining, print_message

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressSnapshot:
    """Observational progress of a run.

    Attributes:
        total_inputs: Input files discovered
        processed_inputs: Input files finished successfully
        total_outputs: Expected outputs (0 while unknown in split-only mode)
        generated_outputs: Output files written so far
        estimated_remaining: ETA, or None while unknown
    """
    total_inputs: int
    processed_inputs: int
    total_outputs: int
    generated_outputs: int
    estimated_remaining: Optional[timedelta] = None

    def describe(self) -> str:
        parts = [f"Input videos: {self.processed_inputs}/{self.total_inputs}"]
        if self.total_outputs > 0:
            parts.append(f"Output files: {self.generated_outputs}/{self.total_outputs}")
        elif self.generated_outputs > 0:
            parts.append(f"Output files: {self.generated_outputs} generated")
        if self.estimated_remaining is not None:
            parts.append(f"Est. remaining: {format_remaining(self.estimated_remaining)}")
        return " | ".join(parts)


class PipelineObserver:
    """Default collaborator: no limits, no manual review, messages to logging."""

    def can_process(self, path: Path) -> bool:
        return True

    def register_processed(self, path: Path) -> None:
        pass

    def log_line(self, message: str) -> None:
        logger.info(message)

    def update_progress(self, snapshot: ProgressSnapshot) -> None:
        pass

    def manual_pause(self, folder: Path, context: RunContext) -> None:
        """Block until the user has reviewed ``folder``; returns immediately by default."""
        context.raise_if_cancelled()


class ReviewGate:
    """
    Blocking manual-review wait released from another thread.

    Usable as the body of PipelineObserver.manual_pause; ``resume()`` is
    called by whatever drives the review (UI button, test).
    """
    def __init__(self) -> None:
        self._resume = threading.Event()
        self._waiting = threading.Event()
        self.folder: Optional[Path] = None

    def wait(self, folder: Path, context: RunContext) -> None:
        """Block until resume() is called or the run is cancelled."""
        context.raise_if_cancelled()
        self.folder = folder
        self._resume.clear()
        self._waiting.set()
        try:
            context.wait_for(self._resume)
        finally:
            self._waiting.clear()

    def is_waiting(self) -> bool:
        return self._waiting.is_set()

    def wait_until_waiting(self, timeout: Optional[float] = None) -> bool:
        """Block until a review wait has started."""
        return self._waiting.wait(timeout)

    def resume(self) -> None:
        self._resume.set()


class ConsoleObserver(PipelineObserver):
    """
    Observer printing to the terminal with rich.

    The manual review waits on a ReviewGate released by a stdin reader
    thread, so cancelling the run also ends the review.
    """
    def __init__(self, prompt: Optional[Callable[[], object]] = None) -> None:
        self.gate = ReviewGate()
        self._prompt = prompt or (lambda: console.input("Press Enter to resume..."))
        self._reader: Optional[threading.Thread] = None

    def log_line(self, message: str) -> None:
        logger.debug(message)
        print_message(message)

    def update_progress(self, snapshot: ProgressSnapshot) -> None:
        if snapshot.total_inputs:
            print_message(snapshot.describe(), "progress")

    def _read_resume(self) -> None:
        self.gate.wait_until_waiting()
        self._prompt()
        self.gate.resume()

    def manual_pause(self, folder: Path, context: RunContext) -> None:
        context.raise_if_cancelled()
        print_message(f"Paused for manual delete. Review segments in {folder}", "warning")
        # A reader left over from a cancelled review still owns stdin
        if self._reader is None or not self._reader.is_alive():
            self._reader = threading.Thread(target=self._read_resume, name="clipmix-review", daemon=True)
            self._reader.start()
        self.gate.wait(folder, context)
