"""
Defines the base class for metric collectors.

A collector measures one family of memory metrics (for example RSS and VSZ,
or PSS and swap) for a set of processes and returns the per-field sums. Every
collector satisfies the same contract, so the sampler can run whichever ones
were selected at startup without knowing what they measure.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from ..models.runtime import ProcessSet

logger = logging.getLogger(__name__)

# Field name -> summed value, or None when the value could not be measured.
CollectorResult = Dict[str, Optional[int]]


class AbstractMetricCollector(ABC):
    """
    Abstract base class for metric collectors.

    Subclasses declare the fields they produce in ``METRIC_FIELDS`` and
    implement ``collect``. A collector must never raise for a single
    process that exited or denied access between enumeration and read; it
    skips that process and carries on.

    Attributes:
        METRIC_FIELDS: Output fields, in the order the collector reports them.
        name: Short identifier used in logs and in the session summary.
    """

    METRIC_FIELDS: Tuple[str, ...] = ()
    name: str = "abstract"

    def __init__(self, **kwargs):
        self.collector_kwargs = kwargs
        logger.debug(f"Initializing {self.__class__.__name__} with extra_args: {kwargs}")

    @classmethod
    def is_supported(cls, platform_name: str) -> bool:
        """
        Whether this collector can run on the given platform.

        Args:
            platform_name: Lower-cased OS name, e.g. "linux" or "darwin".
        """
        return True

    def get_metric_fields(self) -> List[str]:
        """Returns the list of metric field names this collector provides."""
        return list(self.METRIC_FIELDS)

    def absent(self) -> CollectorResult:
        """A result with every field marked as not measured."""
        return {field_name: None for field_name in self.METRIC_FIELDS}

    @abstractmethod
    def collect(self, pids: ProcessSet) -> CollectorResult:
        """
        Measure every process in ``pids`` and return the summed fields.

        Args:
            pids: The processes to measure. Any of them may have exited.

        Returns:
            A mapping from each name in ``METRIC_FIELDS`` to its sum, or to
            None when the value is unavailable.
        """
        pass
