"""
Tests for memory collectors functionality.

This module tests the metric collectors (RSS/VSZ, PSS/swap, mapped regions,
vmmap), the vmmap output parsers, and collector selection per platform.
"""

import os
from unittest.mock import patch

import psutil
import pytest

from memmark.collectors import (
    CollectorFactory,
    MappedRegionsCollector,
    RssVszCollector,
    SmapsCollector,
    VmmapCollector,
    parse_size_to_kib,
)
from memmark.collectors.vmmap import parse_physical_footprint, parse_region_count

KIB = 1024
MIB = 1024 * 1024

VMMAP_SUMMARY = """\
Process:         Python [4242]
Path:            /usr/bin/python3
Physical footprint:         12.5M
Physical footprint (peak):  20.1M
----

ReadOnly portion of Libraries: Total=500.0M resident=200.0M(40%)

                                VIRTUAL RESIDENT    DIRTY  SWAPPED VOLATILE   NONVOL    EMPTY   REGION
REGION TYPE                        SIZE     SIZE     SIZE     SIZE     SIZE     SIZE     SIZE    COUNT (non-coalesced)
===========                     ======= ========    =====  ======= ========   ======    =====  =======
TOTAL                              1.2G   100.0M    20.0M       0K       0K       0K       0K      321

Total number of regions: 321
"""


@pytest.mark.unit
class TestRssVszCollector:
    """Test cases for the always-on RSS/VSZ collector."""

    def test_sums_over_all_processes(self, fake_psutil_process):
        table = {1: (10 * MIB, 20 * MIB, 0, 0), 2: (2 * MIB, 4 * MIB, 0, 0)}
        with patch(
            "memmark.collectors.rss_vsz.psutil.Process",
            side_effect=fake_psutil_process(table),
        ):
            result = RssVszCollector().collect(frozenset({1, 2}))

        assert result == {"rss_kib": 12 * KIB, "vsz_kib": 24 * KIB}

    def test_skips_vanished_and_denied_processes(self, fake_psutil_process):
        table = {
            1: (1 * MIB, 2 * MIB, 0, 0),
            2: psutil.NoSuchProcess,
            3: psutil.AccessDenied,
        }
        with patch(
            "memmark.collectors.rss_vsz.psutil.Process",
            side_effect=fake_psutil_process(table),
        ):
            result = RssVszCollector().collect(frozenset({1, 2, 3}))

        assert result == {"rss_kib": KIB, "vsz_kib": 2 * KIB}

    def test_reports_zero_when_nothing_readable(self, fake_psutil_process):
        """RSS/VSZ are always present; unreadable trees report 0, not absent."""
        with patch(
            "memmark.collectors.rss_vsz.psutil.Process",
            side_effect=fake_psutil_process({}),
        ):
            result = RssVszCollector().collect(frozenset({9}))

        assert result == {"rss_kib": 0, "vsz_kib": 0}

    def test_reads_current_process(self):
        result = RssVszCollector().collect(frozenset({os.getpid()}))
        assert result["rss_kib"] > 0
        assert result["vsz_kib"] >= result["rss_kib"]


@pytest.mark.unit
class TestSmapsCollector:
    """Test cases for the PSS/swap collector."""

    def test_sums_pss_and_swap(self, fake_psutil_process):
        table = {1: (0, 0, 3 * MIB, 1 * MIB), 2: (0, 0, 1 * MIB, 0)}
        with patch(
            "memmark.collectors.smaps.psutil.Process",
            side_effect=fake_psutil_process(table),
        ):
            result = SmapsCollector().collect(frozenset({1, 2}))

        assert result == {"pss_kib": 4 * KIB, "swap_kib": KIB}

    def test_zero_swap_is_kept_as_zero(self, fake_psutil_process):
        with patch(
            "memmark.collectors.smaps.psutil.Process",
            side_effect=fake_psutil_process({1: (0, 0, MIB, 0)}),
        ):
            result = SmapsCollector().collect(frozenset({1}))

        assert result["swap_kib"] == 0

    def test_absent_when_no_process_readable(self, fake_psutil_process):
        with patch(
            "memmark.collectors.smaps.psutil.Process",
            side_effect=fake_psutil_process({1: psutil.AccessDenied}),
        ):
            result = SmapsCollector().collect(frozenset({1}))

        assert result == {"pss_kib": None, "swap_kib": None}

    def test_linux_only(self):
        assert SmapsCollector.is_supported("linux")
        assert not SmapsCollector.is_supported("darwin")


@pytest.mark.unit
class TestMappedRegionsCollector:
    """Test cases for the /proc/<pid>/maps collector."""

    def _write_maps(self, proc_root, pid, lines):
        pid_dir = proc_root / str(pid)
        pid_dir.mkdir(parents=True)
        (pid_dir / "maps").write_text("".join(f"{line}\n" for line in lines))

    def test_counts_lines_across_processes(self, tmp_path):
        self._write_maps(tmp_path, 1, ["a", "b", "c"])
        self._write_maps(tmp_path, 2, ["d", "e"])

        collector = MappedRegionsCollector(proc_root=tmp_path)

        assert collector.collect(frozenset({1, 2})) == {"mapped_regions": 5}

    def test_skips_missing_process(self, tmp_path):
        self._write_maps(tmp_path, 1, ["a"])

        collector = MappedRegionsCollector(proc_root=tmp_path)

        assert collector.collect(frozenset({1, 2})) == {"mapped_regions": 1}

    def test_absent_when_nothing_readable(self, tmp_path):
        collector = MappedRegionsCollector(proc_root=tmp_path)

        assert collector.collect(frozenset({1})) == {"mapped_regions": None}

    def test_empty_maps_file_counts_zero(self, tmp_path):
        self._write_maps(tmp_path, 1, [])

        collector = MappedRegionsCollector(proc_root=tmp_path)

        assert collector.collect(frozenset({1})) == {"mapped_regions": 0}


@pytest.mark.unit
class TestVmmapParsing:
    """Parsing of `vmmap -summary` output."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("512K", 512),
            ("12.5M", 12800),
            ("12 MB", 12288),
            ("3GiB", 3 * 1024 * 1024),
            ("1.5G", int(1.5 * 1024 * 1024)),
            ("2048B", 2),
            ("64", 64),
            ("12.5m", 12800),
            ("12Mi", 12288),
            ("512Ki", 512),
        ],
    )
    def test_parse_size_to_kib(self, text, expected):
        assert parse_size_to_kib(text) == expected

    @pytest.mark.parametrize("text", ["", "n/a", "12X", "M12", "12i"])
    def test_parse_size_rejects_garbage(self, text):
        assert parse_size_to_kib(text) is None

    def test_physical_footprint(self):
        assert parse_physical_footprint(VMMAP_SUMMARY) == 12800

    def test_footprint_with_bare_i_suffix(self):
        assert parse_physical_footprint("Physical footprint:         12Mi\n") == 12288

    def test_footprint_missing(self):
        assert parse_physical_footprint("Process: foo [1]\n") is None

    def test_region_count(self):
        assert parse_region_count(VMMAP_SUMMARY) == 321

    def test_region_count_takes_last_integer_of_first_matching_line(self):
        output = "Writable regions: 12 of 30\nregions: 99\n"
        assert parse_region_count(output) == 30

    def test_region_count_missing(self):
        assert parse_region_count("nothing to see\n") is None


@pytest.mark.unit
class TestVmmapCollector:
    """Test cases for the macOS vmmap collector with the tool mocked."""

    def test_sums_fields_independently(self):
        outputs = {
            "1": (0, "Physical footprint: 1M\nTotal regions: 10\n", ""),
            "2": (0, "Total regions: 5\n", ""),
            "3": (1, "", "vmmap failed"),
        }

        def fake_run(argv, timeout=None):
            return outputs[argv[-1]]

        with patch("memmark.collectors.vmmap.run_command", side_effect=fake_run):
            result = VmmapCollector(timeout_seconds=1.0).collect(frozenset({1, 2, 3}))

        assert result == {"phys_footprint_kib": 1024, "mapped_regions": 15}

    def test_all_absent_when_tool_fails(self):
        with patch("memmark.collectors.vmmap.run_command", return_value=(-1, "", "missing")):
            result = VmmapCollector().collect(frozenset({1}))

        assert result == {"phys_footprint_kib": None, "mapped_regions": None}

    def test_passes_timeout(self):
        with patch(
            "memmark.collectors.vmmap.run_command", return_value=(1, "", "")
        ) as mock_run:
            VmmapCollector(timeout_seconds=2.5).collect(frozenset({7}))

        mock_run.assert_called_once_with(["vmmap", "-summary", "7"], timeout=2.5)

    def test_supported_only_on_darwin_with_tool(self):
        with patch("memmark.collectors.vmmap.check_vmmap_installed", return_value=True):
            assert VmmapCollector.is_supported("darwin")
            assert not VmmapCollector.is_supported("linux")
        with patch("memmark.collectors.vmmap.check_vmmap_installed", return_value=False):
            assert not VmmapCollector.is_supported("darwin")


@pytest.mark.unit
class TestCollectorFactory:
    """Collector selection per platform and configuration."""

    def _names(self, collectors):
        return [c.name for c in collectors]

    def test_linux_defaults(self):
        collectors = CollectorFactory(platform_name="linux").create_collectors()
        assert self._names(collectors) == ["rss_vsz", "maps"]

    def test_linux_with_smaps(self):
        collectors = CollectorFactory(enable_smaps=True, platform_name="linux").create_collectors()
        assert self._names(collectors) == ["rss_vsz", "smaps", "maps"]

    def test_smaps_ignored_off_linux(self, caplog):
        with patch("memmark.collectors.vmmap.check_vmmap_installed", return_value=False):
            collectors = CollectorFactory(
                enable_smaps=True, platform_name="darwin"
            ).create_collectors()

        assert self._names(collectors) == ["rss_vsz"]
        assert "only available on Linux" in caplog.text

    def test_darwin_with_vmmap(self):
        with patch("memmark.collectors.vmmap.check_vmmap_installed", return_value=True):
            collectors = CollectorFactory(
                platform_name="darwin", vmmap_timeout_seconds=3.0
            ).create_collectors()

        assert self._names(collectors) == ["rss_vsz", "vmmap"]
        assert collectors[1].timeout_seconds == 3.0

    def test_other_platform_gets_rss_vsz_only(self):
        collectors = CollectorFactory(platform_name="freebsd").create_collectors()
        assert self._names(collectors) == ["rss_vsz"]
