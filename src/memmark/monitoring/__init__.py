"""
Sampling for the memmark package.

This module provides the Sampler, which turns one process tree into one
aggregated MetricSample per tick.
"""

from .sampler import Sampler, format_timestamp

__all__ = [
    "Sampler",
    "format_timestamp",
]
