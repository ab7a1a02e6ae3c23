"""
Metric collector factory.

This module provides the CollectorFactory class, which picks the collectors
to run from the detected platform and the configuration flags. Selection
happens once at startup so the sampling path never branches on platform.
"""

import logging
from typing import List, Optional

from ..system.commands import current_platform
from .base import AbstractMetricCollector
from .maps import MappedRegionsCollector
from .rss_vsz import RssVszCollector
from .smaps import SmapsCollector
from .vmmap import VmmapCollector

logger = logging.getLogger(__name__)


class CollectorFactory:
    """
    Creates the set of metric collectors for one sampling session.
    """

    def __init__(
        self,
        enable_smaps: bool = False,
        platform_name: Optional[str] = None,
        vmmap_timeout_seconds: float = 10.0,
    ):
        """
        Initialize the collector factory.

        Args:
            enable_smaps: Whether to run the high-overhead PSS/swap collector.
            platform_name: OS name override; detected when None.
            vmmap_timeout_seconds: Per-process timeout for the vmmap collector.
        """
        self.enable_smaps = enable_smaps
        self.platform_name = platform_name or current_platform()
        self.vmmap_timeout_seconds = vmmap_timeout_seconds

        logger.debug(
            f"CollectorFactory initialized: platform={self.platform_name}, "
            f"enable_smaps={enable_smaps}"
        )

    def create_collectors(self) -> List[AbstractMetricCollector]:
        """
        Create the collectors enabled for this platform and configuration.

        Returns:
            The foundational RSS/VSZ collector first, followed by every
            optional collector that is both enabled and supported.
        """
        collectors: List[AbstractMetricCollector] = [RssVszCollector()]

        if self.enable_smaps:
            if SmapsCollector.is_supported(self.platform_name):
                collectors.append(SmapsCollector())
            else:
                logger.warning(
                    f"PSS/swap collection was requested but is only available on Linux "
                    f"(platform: {self.platform_name}); those columns will be empty."
                )

        if MappedRegionsCollector.is_supported(self.platform_name):
            collectors.append(MappedRegionsCollector())

        if VmmapCollector.is_supported(self.platform_name):
            collectors.append(VmmapCollector(timeout_seconds=self.vmmap_timeout_seconds))
        elif self.platform_name == "darwin":
            logger.info("vmmap not found; physical footprint columns will be empty.")

        logger.info(f"Enabled collectors: {', '.join(c.name for c in collectors)}")
        return collectors
