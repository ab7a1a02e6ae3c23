"""
One-tick sampling: discover the tree, run the collectors, merge one row.

The Sampler is the only place where collector results meet. It guarantees
that every collector sees the same process set, that all of them finish
before the row is built, and that a failing collector costs only its own
columns.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from ..collectors.base import AbstractMetricCollector, CollectorResult
from ..models.runtime import METRIC_FIELDS, MetricSample, ProcessSet, SamplingSession
from ..system.processes import discover_tree
from ..validation import ErrorSeverity, handle_error

logger = logging.getLogger(__name__)


def format_timestamp(unix_ms: int) -> str:
    """Format epoch milliseconds as an ISO-8601 UTC timestamp with second precision."""
    return datetime.fromtimestamp(unix_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class Sampler:
    """
    Takes one aggregated sample of a process tree.

    With more than one collector, collectors run concurrently on a small
    thread pool; they are read-only and independent of each other.

    Attributes:
        collectors: The collectors evaluated on every tick, in order.
        executor: Thread pool for concurrent collection, or None when a single
            collector runs inline.
    """

    def __init__(
        self,
        collectors: Sequence[AbstractMetricCollector],
        max_workers: int = 4,
        discover: Callable[[int], ProcessSet] = discover_tree,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the sampler.

        Args:
            collectors: Collectors selected for this session.
            max_workers: Upper bound on collectors running at the same time.
            discover: Tree discovery function (root pid -> process set).
            clock: Wall-clock source in epoch seconds.
        """
        self.collectors: List[AbstractMetricCollector] = list(collectors)
        self._discover = discover
        self._clock = clock
        self.executor: Optional[ThreadPoolExecutor] = None
        if len(self.collectors) > 1:
            self.executor = ThreadPoolExecutor(
                max_workers=max(1, min(max_workers, len(self.collectors))),
                thread_name_prefix="MetricCollector",
            )

    def __enter__(self) -> "Sampler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Shut down the collector thread pool."""
        if self.executor is not None:
            self.executor.shutdown(wait=True)
            self.executor = None

    def _run_collector(
        self, collector: AbstractMetricCollector, pids: ProcessSet
    ) -> CollectorResult:
        try:
            return collector.collect(pids)
        except Exception as e:
            handle_error(
                error=e,
                context=f"collector '{collector.name}'",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
            return collector.absent()

    def collect_metrics(self, pids: ProcessSet) -> Dict[str, Optional[int]]:
        """
        Run every collector once against ``pids`` and merge the results.

        Returns:
            A value for every known metric field; None where no collector
            produced one.
        """
        if self.executor is None:
            results = [self._run_collector(c, pids) for c in self.collectors]
        else:
            futures = [
                self.executor.submit(self._run_collector, c, pids) for c in self.collectors
            ]
            results = [future.result() for future in futures]

        merged: Dict[str, Optional[int]] = dict.fromkeys(METRIC_FIELDS)
        for result in results:
            for field_name, value in result.items():
                if field_name in merged and value is not None:
                    merged[field_name] = value
        return merged

    def take_sample(self, session: SamplingSession) -> Optional[MetricSample]:
        """
        Take one sample of the tree rooted at ``session.root_pid``.

        Returns:
            The merged sample, or None when the tree is empty (the root is
            gone). ``pid_count`` is the size of the discovered set, whether or
            not every process in it could be measured.
        """
        pids = self._discover(session.root_pid)
        if not pids:
            logger.info(f"Process tree rooted at PID {session.root_pid} is gone")
            return None

        metrics = self.collect_metrics(pids)

        # One timestamp per row, clamped so unix_ms never goes backwards.
        unix_ms = max(int(self._clock() * 1000), session.last_unix_ms)

        return MetricSample(
            timestamp=format_timestamp(unix_ms),
            unix_ms=unix_ms,
            root_pid=session.root_pid,
            pid_count=len(pids),
            **metrics,
        )
