"""
Shared run state for the orchestration module.

RunState is the one object that both the sampling loop and the signal
handler touch. Python runs signal handlers on the main thread between
bytecodes, so the handler and the loop never execute at the same time. Each
field is written by exactly one side with a single assignment, and no lock is
needed (taking one inside a handler could deadlock against the loop).
"""

import subprocess
from dataclasses import dataclass
from typing import Optional


@dataclass
class RunState:
    """
    Runtime state shared by the sampling loop and the signal handler.

    Attributes:
        stop_requested: Set when the loop should stop after the current tick.
        signal_count: Number of stop signals received; drives escalation.
        last_signal: Number of the most recent stop signal, if any.
        owned_process: The launched child, or None in attach mode.
    """

    stop_requested: bool = False
    signal_count: int = 0
    last_signal: Optional[int] = None
    owned_process: Optional[subprocess.Popen] = None

    def record_signal(self, signum: int) -> int:
        """Count a stop signal, request a stop, and return the escalation level."""
        self.signal_count += 1
        self.last_signal = signum
        self.stop_requested = True
        return self.signal_count

    def request_stop(self) -> None:
        """Ask the loop to stop without counting it as a signal."""
        self.stop_requested = True


class TimeoutConstants:
    """
    Centralized timing configuration.
    """

    # Longest uninterrupted sleep; bounds how quickly a stop request is seen.
    SLEEP_CHUNK = 0.05

    # Signal count at which the tool exits immediately without draining.
    FORCE_EXIT_SIGNAL_COUNT = 3

    # Grace period for a launched child after an unexpected failure.
    CHILD_TERMINATE_TIMEOUT = 3.0
