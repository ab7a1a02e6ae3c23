"""
Abstract base class for sample sinks.

A sink receives finished samples in emission order and persists or streams
them. Samples are immutable once handed to a sink; a sink never revises a row
it has already written.
"""

from abc import ABC, abstractmethod

from ..models.runtime import MetricSample


class RowSink(ABC):
    """Abstract base class for sample sink implementations."""

    def __enter__(self) -> "RowSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @abstractmethod
    def write(self, sample: MetricSample) -> None:
        """
        Persist one sample.

        Args:
            sample: The finished sample for one tick
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Flush and release any underlying resources."""
        pass
