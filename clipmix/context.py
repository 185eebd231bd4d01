"""Run-scoped pause gate and cancellation signal.

A RunContext is created per run and passed through every pipeline call.
The pause gate and the cancel signal are the only state shared between
the worker and whoever controls the run (CLI, UI, tests).
"""

import logging
import threading

from .config import POLL_INTERVAL
from .exceptions import Cancelled

logger = logging.getLogger(__name__)


class RunContext:
    """Cooperative pause/cancel signals for one pipeline run."""

    def __init__(self, poll_interval: float = POLL_INTERVAL) -> None:
        self.poll_interval = poll_interval
        self._runnable = threading.Event()
        self._runnable.set()
        self._cancelled = threading.Event()

    def pause(self) -> None:
        """Close the pause gate; the worker suspends at its next checkpoint."""
        self._runnable.clear()
        logger.info("Run paused")

    def resume(self) -> None:
        """Reopen the pause gate."""
        self._runnable.set()
        logger.info("Run resumed")

    def cancel(self) -> None:
        """Request cancellation of the run."""
        self._cancelled.set()
        logger.info("Cancellation requested")

    def is_paused(self) -> bool:
        return not self._runnable.is_set()

    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def raise_if_cancelled(self) -> None:
        if self._cancelled.is_set():
            raise Cancelled()

    def wait_until_runnable(self) -> None:
        """Block while the pause gate is closed.

        Raises:
            Cancelled: If cancellation is requested before or while waiting
        """
        while not self._runnable.wait(self.poll_interval):
            self.raise_if_cancelled()
        self.raise_if_cancelled()

    def wait_for(self, event: threading.Event) -> None:
        """Block until ``event`` is set, independently of the pause gate.

        Raises:
            Cancelled: If cancellation is requested before the event fires
        """
        while not event.wait(self.poll_interval):
            self.raise_if_cancelled()
        self.raise_if_cancelled()
