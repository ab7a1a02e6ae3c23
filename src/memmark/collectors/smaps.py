"""
PSS/swap collector using the 'psutil' library.

Reads `psutil.Process.memory_full_info()`, which on Linux walks
`/proc/<pid>/smaps`. That read is O(mapped regions) per process and is
repeated every tick, so the collector only runs when explicitly enabled.
"""

import logging

import psutil

from ..models.runtime import ProcessSet
from .base import AbstractMetricCollector, CollectorResult

logger = logging.getLogger(__name__)


class SmapsCollector(AbstractMetricCollector):
    """
    Sums PSS (Proportional Set Size) and swap usage across processes.

    Reports both fields as absent when no process in the set could be read,
    for example when every process belongs to another user.
    """

    METRIC_FIELDS = ("pss_kib", "swap_kib")
    name = "smaps"

    @classmethod
    def is_supported(cls, platform_name: str) -> bool:
        return platform_name == "linux"

    def collect(self, pids: ProcessSet) -> CollectorResult:
        pss_bytes = 0
        swap_bytes = 0
        measured = 0
        for pid in pids:
            try:
                mem_full_info = psutil.Process(pid).memory_full_info()
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                logger.debug(f"Skipping PID {pid} for PSS/swap")
                continue
            pss_bytes += getattr(mem_full_info, "pss", 0)
            swap_bytes += getattr(mem_full_info, "swap", 0)
            measured += 1

        if not measured:
            return self.absent()
        return {"pss_kib": pss_bytes // 1024, "swap_kib": swap_bytes // 1024}
