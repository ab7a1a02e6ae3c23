"""
The sampling loop: a small state machine driving one session.

    IDLE -> RUNNING -> DRAINING -> STOPPED

While RUNNING the loop checks its stop conditions, takes one sample, writes
it, and sleeps until the next tick. It leaves RUNNING when a stop is
requested, the root process exits, or the deadline passes. If the root exits
at the same check as the deadline, the root exit is reported. DRAINING reaps
the launched command in launch mode; an attached process is left alone.
"""

import logging
import time
from typing import Callable, Optional

from ..models.runtime import LoopState, SamplingSession, StopReason
from ..monitoring.sampler import Sampler
from ..storage.base import RowSink
from ..system.processes import is_pid_alive
from .process_manager import ProcessManager
from .shared_state import RunState, TimeoutConstants

logger = logging.getLogger(__name__)


class SamplingLoop:
    """
    Runs ticks against one session until a stop condition holds.

    Attributes:
        loop_state: Current lifecycle state.
        stop_reason: Why the loop left RUNNING, once it has.
        child_exit_code: Exit status of the launched command, set while
            draining in launch mode.
    """

    def __init__(
        self,
        session: SamplingSession,
        sampler: Sampler,
        sink: RowSink,
        state: RunState,
        process_manager: Optional[ProcessManager] = None,
        liveness: Callable[[int], bool] = is_pid_alive,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session = session
        self.sampler = sampler
        self.sink = sink
        self.state = state
        self.process_manager = process_manager
        self._liveness = liveness
        self._clock = clock
        self._wall_clock = wall_clock
        self._sleep = sleep

        self.loop_state = LoopState.IDLE
        self.stop_reason: Optional[StopReason] = None
        self.child_exit_code: Optional[int] = None

    def _root_alive(self) -> bool:
        if self.process_manager is not None and self.process_manager.process is not None:
            return self.process_manager.is_running()
        return self._liveness(self.session.root_pid)

    def _check_stop_conditions(self) -> Optional[StopReason]:
        if self.state.stop_requested:
            return StopReason.STOP_REQUESTED
        deadline_reached = self.session.deadline_reached(self._clock())
        if not self._root_alive():
            return StopReason.ROOT_EXITED
        if deadline_reached:
            return StopReason.DEADLINE_REACHED
        return None

    def _sleep_until_next_tick(self) -> None:
        """Sleep ``min(interval, time remaining)`` in chunks, waking early on a stop request."""
        sleep_for = self.session.interval_seconds
        remaining = self.session.time_remaining(self._clock())
        if remaining is not None:
            sleep_for = min(sleep_for, remaining)

        wake_at = self._clock() + sleep_for
        while not self.state.stop_requested:
            left = wake_at - self._clock()
            if left <= 0:
                break
            self._sleep(min(TimeoutConstants.SLEEP_CHUNK, left))

    def _tick(self) -> bool:
        """Take and write one sample. Returns False when the tree is gone."""
        sample = self.sampler.take_sample(self.session)
        if sample is None:
            return False
        self.sink.write(sample)
        self.session.tick_count += 1
        self.session.last_unix_ms = sample.unix_ms
        return True

    def _drain(self) -> None:
        self.loop_state = LoopState.DRAINING
        logger.debug(f"Draining after {self.stop_reason.value}")
        if self.process_manager is not None and self.process_manager.process is not None:
            self.child_exit_code = self.process_manager.wait()
        self.loop_state = LoopState.STOPPED

    def run(self) -> StopReason:
        """
        Run the session to completion.

        Returns:
            The reason the loop stopped.

        Raises:
            RuntimeError: If the loop has already been run.
        """
        if self.loop_state is not LoopState.IDLE:
            raise RuntimeError(f"Sampling loop cannot start from state {self.loop_state.value}")

        self.session.start_monotonic = self._clock()
        self.session.start_unix_ms = int(self._wall_clock() * 1000)
        self.loop_state = LoopState.RUNNING
        logger.info(
            f"Sampling PID {self.session.root_pid} every {self.session.interval_seconds:g}s"
            + (
                f" for {self.session.duration_seconds:g}s"
                if self.session.duration_seconds is not None
                else ""
            )
        )

        while self.loop_state is LoopState.RUNNING:
            reason = self._check_stop_conditions()
            if reason is None and not self._tick():
                reason = StopReason.ROOT_EXITED
            if reason is not None:
                self.stop_reason = reason
                break
            self._sleep_until_next_tick()

        self._drain()
        logger.info(
            f"Sampling stopped ({self.stop_reason.value}) after {self.session.tick_count} sample(s)"
        )
        return self.stop_reason
