"""Supervised execution of ffmpeg/ffprobe.

Responsibilities:
  - Spawn the external tool and capture stdout/stderr fully
  - Poll for completion on a short interval so pause and cancel are seen promptly
  - Suspend the child process while the pause gate is closed
  - Kill the process tree on cancellation
  - Translate non-zero exits into ToolFailure
"""

import logging
import subprocess
from typing import Dict, List, Optional, Tuple

import psutil

from .context import RunContext
from .exceptions import Cancelled, DependencyError, ToolFailure

logger = logging.getLogger(__name__)


def _set_suspended(process: subprocess.Popen, suspended: bool) -> bool:
    """Suspend or resume a child process; returns False if it already exited."""
    try:
        proc = psutil.Process(process.pid)
        if suspended:
            proc.suspend()
        else:
            proc.resume()
        return True
    except psutil.NoSuchProcess:
        return False


def _kill_tree(process: subprocess.Popen) -> None:
    """Forcibly terminate a child process and everything it spawned."""
    try:
        parent = psutil.Process(process.pid)
        for child in parent.children(recursive=True):
            try:
                child.kill()
            except psutil.NoSuchProcess:
                pass
        parent.kill()
    except psutil.NoSuchProcess:
        pass
    # Reap the process and close its pipes
    process.communicate()


class ToolRunner:
    """
    Runs external commands under a RunContext.

    Attributes:
        context (RunContext): Pause gate and cancel signal of the run
        poll_interval (float): Seconds between completion checks
        tools (dict): Resolved binary for each configured tool name
    """
    def __init__(
        self,
        context: RunContext,
        poll_interval: Optional[float] = None,
        tools: Optional[Dict[str, str]] = None
    ):
        self.context = context
        self.tools = dict(tools or {})
        self.poll_interval = poll_interval if poll_interval is not None else context.poll_interval

    def run(self, cmd: List[str]) -> str:
        """
        Run a command to completion.

        Args:
            cmd: Command list, binary first

        Returns:
            Captured stdout, or stderr when stdout is blank

        Raises:
            Cancelled: If the run was cancelled before or during execution
            ToolFailure: If the command exits non-zero with error output
            DependencyError: If the binary cannot be started
        """
        self.context.wait_until_runnable()
        cmd = [self.tools.get(cmd[0], cmd[0]), *cmd[1:]]
        logger.debug("Running command: %s", " ".join(cmd))
        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            raise DependencyError(f"Cannot start {cmd[0]}: {e}", module="runner") from e

        stdout, stderr = self._supervise(process)
        stdout = stdout or ""
        stderr = stderr or ""

        # An interrupted tool exits non-zero; report that as a cancellation
        self.context.raise_if_cancelled()

        if process.returncode != 0:
            if stderr.strip():
                logger.error("Command failed: %s", " ".join(cmd))
                logger.error("Error output: %s", stderr.strip())
                raise ToolFailure(stderr.strip(), process.returncode)
            logger.warning("%s exited with code %d and no error output", cmd[0], process.returncode)

        if stderr:
            logger.debug("Command stderr: %s", stderr)
        return stdout if stdout.strip() else stderr

    def _supervise(self, process: subprocess.Popen) -> Tuple[str, str]:
        while True:
            try:
                return process.communicate(timeout=self.poll_interval)
            except subprocess.TimeoutExpired:
                pass

            if self.context.is_cancelled():
                logger.info("Killing %s (pid %d)", process.args[0], process.pid)
                _kill_tree(process)
                raise Cancelled(module="runner")

            if self.context.is_paused():
                self._hold(process)

    def _hold(self, process: subprocess.Popen) -> None:
        """Keep the child suspended until the pause gate reopens."""
        suspended = _set_suspended(process, True)
        try:
            self.context.wait_until_runnable()
        except Cancelled:
            _kill_tree(process)
            raise
        if suspended:
            _set_suspended(process, False)
