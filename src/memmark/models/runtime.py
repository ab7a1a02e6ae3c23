"""
Runtime data models.

This module contains the data structures that live for one tick (the process
set and the emitted sample) and for the whole run (the sampling session), plus
the enums describing the sampling loop's lifecycle.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

# A snapshot of one process tree: unique pids, rebuilt every tick.
ProcessSet = FrozenSet[int]

# Aggregate columns, in output order. Each is independently optional.
METRIC_FIELDS: Tuple[str, ...] = (
    "rss_kib",
    "vsz_kib",
    "swap_kib",
    "pss_kib",
    "phys_footprint_kib",
    "mapped_regions",
)

CSV_COLUMNS: Tuple[str, ...] = (
    "timestamp",
    "unix_ms",
    "root_pid",
    "pid_count",
) + METRIC_FIELDS


class LoopState(Enum):
    """Lifecycle states of the sampling loop."""

    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class StopReason(Enum):
    """Why the sampling loop left the running state."""

    ROOT_EXITED = "root_exited"
    DEADLINE_REACHED = "deadline_reached"
    STOP_REQUESTED = "stop_requested"


@dataclass(frozen=True)
class MetricSample:
    """
    One aggregated row for a single tick.

    The metric fields are ``None`` when the corresponding collector was not
    enabled, is unsupported on this platform, or could not measure anything.
    ``0`` is a real measurement and is kept distinct from ``None`` all the way
    to the output.
    """

    timestamp: str
    unix_ms: int
    root_pid: int
    pid_count: int
    rss_kib: Optional[int] = None
    vsz_kib: Optional[int] = None
    swap_kib: Optional[int] = None
    pss_kib: Optional[int] = None
    phys_footprint_kib: Optional[int] = None
    mapped_regions: Optional[int] = None

    def to_row(self) -> List[str]:
        """Render the sample as CSV fields, absent metrics as empty strings."""
        row = [self.timestamp, str(self.unix_ms), str(self.root_pid), str(self.pid_count)]
        for name in METRIC_FIELDS:
            value = getattr(self, name)
            row.append("" if value is None else str(value))
        return row


@dataclass
class SamplingSession:
    """
    Process-wide run state, created once at startup and mutated only by the
    sampling loop.

    Attributes:
        root_pid: Pid at the root of the observed tree.
        owned: True when this session launched the root (launch mode), False
            when it attached to an existing process.
        interval_seconds: Time between ticks.
        duration_seconds: Optional wall-clock budget measured from loop start.
        collector_names: Names of the enabled metric collectors.
        tick_count: Number of samples emitted so far.
        start_monotonic: ``time.monotonic()`` at loop start; base of the deadline.
        start_unix_ms: Epoch milliseconds at loop start.
        last_unix_ms: ``unix_ms`` of the last emitted sample.
    """

    root_pid: int
    owned: bool
    interval_seconds: float
    duration_seconds: Optional[float] = None
    collector_names: List[str] = field(default_factory=list)
    tick_count: int = 0
    start_monotonic: float = 0.0
    start_unix_ms: int = 0
    last_unix_ms: int = 0

    @property
    def deadline(self) -> Optional[float]:
        """Monotonic time at which sampling must stop, or None."""
        if self.duration_seconds is None:
            return None
        return self.start_monotonic + self.duration_seconds

    def time_remaining(self, now: float) -> Optional[float]:
        """Seconds left until the deadline (never negative), or None without one."""
        deadline = self.deadline
        if deadline is None:
            return None
        return max(0.0, deadline - now)

    def deadline_reached(self, now: float) -> bool:
        deadline = self.deadline
        return deadline is not None and now >= deadline
