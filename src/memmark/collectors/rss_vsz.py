"""
RSS/VSZ collector using the 'psutil' library.

This is the foundational collector and runs on every platform. It sums the
resident and virtual sizes reported by `psutil.Process.memory_info()`.
"""

import logging

import psutil

from ..models.runtime import ProcessSet
from .base import AbstractMetricCollector, CollectorResult

logger = logging.getLogger(__name__)


class RssVszCollector(AbstractMetricCollector):
    """
    Sums RSS (Resident Set Size) and VSZ (Virtual Set Size) across processes.

    Unlike the optional collectors, this one always reports numbers: when no
    process could be read the totals are 0, so the tick still produces a row.
    """

    METRIC_FIELDS = ("rss_kib", "vsz_kib")
    name = "rss_vsz"

    def collect(self, pids: ProcessSet) -> CollectorResult:
        rss_bytes = 0
        vms_bytes = 0
        for pid in pids:
            try:
                mem_info = psutil.Process(pid).memory_info()
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                # Exited since enumeration, or not ours to read.
                logger.debug(f"Skipping PID {pid} for RSS/VSZ")
                continue
            rss_bytes += mem_info.rss
            vms_bytes += mem_info.vms

        return {"rss_kib": rss_bytes // 1024, "vsz_kib": vms_bytes // 1024}
