"""
Metric collectors for process-tree memory sampling.

Each collector measures one family of memory metrics for a set of pids and
returns the sums, or None for values it could not measure:

- RssVszCollector: resident and virtual size via psutil (all platforms, always on)
- SmapsCollector: proportional set size and swap via psutil (Linux, opt-in)
- MappedRegionsCollector: mapped-region count from /proc/<pid>/maps (Linux)
- VmmapCollector: physical footprint and regions via `vmmap -summary` (macOS)

CollectorFactory selects the collectors for the current platform once, at
startup.
"""

from .base import AbstractMetricCollector, CollectorResult
from .factory import CollectorFactory
from .maps import MappedRegionsCollector
from .rss_vsz import RssVszCollector
from .smaps import SmapsCollector
from .vmmap import VmmapCollector, parse_size_to_kib

__all__ = [
    "AbstractMetricCollector",
    "CollectorResult",
    "CollectorFactory",
    "MappedRegionsCollector",
    "RssVszCollector",
    "SmapsCollector",
    "VmmapCollector",
    "parse_size_to_kib",
]
