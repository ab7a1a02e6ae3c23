"""
Physical footprint and region collector using the macOS 'vmmap' tool.

`vmmap -summary <pid>` prints a report that includes a "Physical footprint"
line and region counts. The report format has changed across macOS releases,
so parsing is deliberately loose: sizes are accepted with or without a
binary ``i`` and a ``B`` suffix and normalised to KiB, and anything that does
not parse is skipped rather than treated as zero.
"""

import logging
import re
from typing import Optional

from ..models.runtime import ProcessSet
from ..system.commands import check_vmmap_installed, run_command
from .base import AbstractMetricCollector, CollectorResult

logger = logging.getLogger(__name__)

# KiB per unit prefix. No prefix means the value is already in KiB.
_PREFIX_TO_KIB = {
    "": 1,
    "K": 1,
    "M": 1024,
    "G": 1024 ** 2,
    "T": 1024 ** 3,
}

_SIZE_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*([KMGT]?)(i?B?)$", re.IGNORECASE)
_FOOTPRINT_RE = re.compile(
    r"physical footprint:\s*(\d+(?:\.\d+)?\s*[KMGT]?(?:i?B?))\b", re.IGNORECASE
)
_INTEGER_RE = re.compile(r"\d+")


def parse_size_to_kib(text: str) -> Optional[int]:
    """
    Convert a size such as ``120.5M``, ``12 MB``, ``3GiB`` or ``512K`` to KiB.

    A plain ``B`` suffix means bytes. A bare number is taken as KiB.

    Returns:
        The size in whole KiB, or None if the text is not a size.
    """
    match = _SIZE_RE.match(text.strip())
    if not match:
        return None
    number = float(match.group(1))
    prefix = match.group(2).upper()
    suffix = match.group(3)
    if not prefix and suffix:
        # Only a plain B means bytes; a lone "i" has no unit.
        return int(number / 1024) if suffix.upper() == "B" else None
    return int(number * _PREFIX_TO_KIB[prefix])


def parse_physical_footprint(output: str) -> Optional[int]:
    """Extract the physical footprint, in KiB, from `vmmap -summary` output."""
    for line in output.splitlines():
        match = _FOOTPRINT_RE.search(line)
        if match:
            return parse_size_to_kib(match.group(1))
    return None


def parse_region_count(output: str) -> Optional[int]:
    """Extract the region count: the last integer on the first line mentioning regions."""
    for line in output.splitlines():
        if "regions" not in line.lower():
            continue
        numbers = _INTEGER_RE.findall(line)
        if numbers:
            return int(numbers[-1])
    return None


class VmmapCollector(AbstractMetricCollector):
    """
    Sums physical footprint and mapped-region counts via `vmmap -summary`.

    Each field is reported independently: one that could not be parsed for
    any process is absent while the other may still be present.
    """

    METRIC_FIELDS = ("phys_footprint_kib", "mapped_regions")
    name = "vmmap"

    def __init__(self, timeout_seconds: float = 10.0, **kwargs):
        super().__init__(**kwargs)
        self.timeout_seconds = timeout_seconds

    @classmethod
    def is_supported(cls, platform_name: str) -> bool:
        return platform_name == "darwin" and check_vmmap_installed()

    def collect(self, pids: ProcessSet) -> CollectorResult:
        footprint_total: Optional[int] = None
        regions_total: Optional[int] = None
        for pid in pids:
            return_code, stdout, _ = run_command(
                ["vmmap", "-summary", str(pid)], timeout=self.timeout_seconds
            )
            if return_code != 0 or not stdout:
                logger.debug(f"Skipping PID {pid} for vmmap (exit code {return_code})")
                continue

            footprint = parse_physical_footprint(stdout)
            if footprint is not None:
                footprint_total = (footprint_total or 0) + footprint
            regions = parse_region_count(stdout)
            if regions is not None:
                regions_total = (regions_total or 0) + regions

        return {"phys_footprint_kib": footprint_total, "mapped_regions": regions_total}
