"""
Process management for the orchestration module.

This module owns the lifecycle of a launched command: starting it, signalling
it when the user asks the tool to stop, and reaping its exit status. An
attached process is never handled here; it is only observed.
"""

import logging
import signal
import subprocess
from typing import IO, List, Optional, Union

from ..validation import TargetNotFoundError
from .shared_state import RunState, TimeoutConstants

logger = logging.getLogger(__name__)


def exit_status_from_returncode(returncode: int) -> int:
    """
    Map a Popen return code to a shell-style exit status.

    A child killed by signal N has a negative return code; shells report
    that as ``128 + N``.
    """
    if returncode < 0:
        return 128 + (-returncode)
    return returncode


class ProcessManager:
    """
    Lifecycle management for the one child process a session may own.
    """

    def __init__(self, state: RunState):
        self.state = state

    @property
    def process(self) -> Optional[subprocess.Popen]:
        return self.state.owned_process

    def launch(
        self, command: List[str], stdout: Optional[Union[int, IO]] = None
    ) -> subprocess.Popen:
        """
        Start the command as an owned child.

        Args:
            command: Program and arguments; no shell is involved.
            stdout: Where the child's stdout goes; inherited when None.

        Returns:
            The started subprocess.Popen object

        Raises:
            TargetNotFoundError: If the program cannot be found or executed.
        """
        try:
            process = subprocess.Popen(command, stdout=stdout)
        except (FileNotFoundError, PermissionError) as e:
            raise TargetNotFoundError(f"Cannot launch command {command[0]!r}: {e}") from e

        self.state.owned_process = process
        logger.info(f"Launched command as PID {process.pid}: {' '.join(command)}")
        if self.state.stop_requested:
            # A stop signal arrived while the command was starting.
            self.escalate(self.state.signal_count)
        return process

    def is_running(self) -> bool:
        """Whether the owned child is still running (reaps it if it has exited)."""
        return self.process is not None and self.process.poll() is None

    def _send(self, signum: int) -> None:
        process = self.process
        if process is None:
            return
        try:
            process.send_signal(signum)
            logger.debug(f"Sent {signal.Signals(signum).name} to PID {process.pid}")
        except ProcessLookupError:
            # Already gone; the drain step will pick up its status.
            pass

    def terminate(self) -> None:
        """Ask the owned child to exit (SIGTERM)."""
        self._send(signal.SIGTERM)

    def kill(self) -> None:
        """Force the owned child to exit (SIGKILL)."""
        self._send(signal.SIGKILL)

    def escalate(self, level: int) -> None:
        """
        Signal the owned child according to how many stop requests arrived.

        Level 1 asks for a graceful exit; level 2 and above kill it.
        """
        if level <= 1:
            self.terminate()
        else:
            self.kill()

    def wait(self) -> Optional[int]:
        """
        Reap the owned child and return its shell-style exit status.

        Returns:
            The exit status, or None when no child was launched.
        """
        if self.process is None:
            return None
        returncode = self.process.wait()
        status = exit_status_from_returncode(returncode)
        logger.info(f"Launched command (PID {self.process.pid}) exited with status {status}")
        return status

    def shutdown(self) -> None:
        """Terminate and reap the child after an unexpected failure, killing it if it lingers."""
        if not self.is_running():
            return
        logger.warning(f"Terminating launched command (PID {self.process.pid})")
        self.terminate()
        try:
            self.process.wait(timeout=TimeoutConstants.CHILD_TERMINATE_TIMEOUT)
        except subprocess.TimeoutExpired:
            self.kill()
            self.process.wait()
