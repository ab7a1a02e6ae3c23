"""
Orchestration module for the memmark package.

- RunState: state shared between the sampling loop and signal handling
- SignalHandler: SIGINT/SIGTERM escalation
- ProcessManager: lifecycle of a launched command
- SamplingLoop: the per-session tick state machine
"""

from .process_manager import ProcessManager, exit_status_from_returncode
from .sampling_loop import SamplingLoop
from .shared_state import RunState, TimeoutConstants
from .signal_handler import SignalHandler

__all__ = [
    "RunState",
    "TimeoutConstants",
    "SignalHandler",
    "ProcessManager",
    "exit_status_from_returncode",
    "SamplingLoop",
]
