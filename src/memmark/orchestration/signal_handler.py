"""
Signal handling for the orchestration module.

SIGINT and SIGTERM are coalesced into an escalation level rather than queued.
The first one stops sampling and, in launch mode, asks the launched command
to terminate. The second kills the launched command. The third makes the tool
exit immediately. An attached process is never signalled.
"""

import logging
import os
import signal
from typing import Any, Callable, Optional

from .process_manager import ProcessManager
from .shared_state import RunState, TimeoutConstants

logger = logging.getLogger(__name__)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SignalHandler:
    """
    Manages signal registration and escalation for one sampling session.
    """

    def __init__(
        self,
        state: RunState,
        process_manager: Optional[ProcessManager] = None,
        exit_func: Callable[[int], Any] = os._exit,
    ):
        """
        Args:
            state: Run state shared with the sampling loop.
            process_manager: Manager of the launched command, if any.
            exit_func: Called with the exit status on the final escalation.
        """
        self.state = state
        self.process_manager = process_manager
        self._exit_func = exit_func
        self._original_handlers = {}
        self._signal_handlers_set = False

    def setup_signal_handlers(self) -> None:
        """Install the handler for SIGINT and SIGTERM, remembering the originals."""
        try:
            for signum in HANDLED_SIGNALS:
                self._original_handlers[signum] = signal.signal(signum, self.handle_signal)
            self._signal_handlers_set = True
            logger.debug("Signal handlers set up")
        except (ValueError, OSError) as e:
            # signal.signal only works from the main thread.
            logger.warning(f"Failed to set up signal handlers: {e}")

    def cleanup_signal_handlers(self) -> None:
        """Restore original signal handlers."""
        if not self._signal_handlers_set:
            return

        try:
            for signum, handler in self._original_handlers.items():
                if handler is not None:
                    signal.signal(signum, handler)
            logger.debug("Signal handlers restored")
        except (ValueError, OSError) as e:
            logger.warning(f"Failed to restore signal handlers: {e}")
        finally:
            self._original_handlers = {}
            self._signal_handlers_set = False

    def _owns_child(self) -> bool:
        return self.process_manager is not None and self.process_manager.process is not None

    def handle_signal(self, signum: int, frame: Any) -> None:
        """
        Record a stop signal and act on its escalation level.

        Args:
            signum: Signal number that was received
            frame: Current stack frame (unused)
        """
        level = self.state.record_signal(signum)
        name = signal.Signals(signum).name

        if level >= TimeoutConstants.FORCE_EXIT_SIGNAL_COUNT:
            logger.error(f"{name} received {level} times; exiting immediately")
            self._exit_func(128 + signum)
            return

        if not self._owns_child():
            if level == 1:
                logger.warning(f"{name} received; stopping after the current sample")
            else:
                logger.warning(f"{name} received again; send once more to exit immediately")
            return

        pid = self.process_manager.process.pid
        if level == 1:
            logger.warning(f"{name} received; asking launched command (PID {pid}) to terminate")
        else:
            logger.warning(f"{name} received again; killing launched command (PID {pid})")
        self.process_manager.escalate(level)
