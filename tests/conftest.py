"""
Pytest configuration and shared fixtures for the memmark test suite.

This module provides common fixtures, test utilities, and configuration
for all test modules in the memmark project.
"""

import subprocess
import sys
from pathlib import Path
from typing import Dict, Optional
from unittest.mock import Mock

import psutil
import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

SRC_DIR = Path(__file__).parent.parent / "src"


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def src_dir() -> Path:
    """Path of the package sources, for running the CLI in a subprocess."""
    return SRC_DIR


@pytest.fixture
def sample_snapshot() -> Dict[int, int]:
    """
    A pid -> ppid snapshot with a small tree under pid 100:

        100 -> 101 -> 103
            -> 102
        200 (unrelated) -> 201
    """
    return {
        1: 0,
        100: 1,
        101: 100,
        102: 100,
        103: 101,
        200: 1,
        201: 200,
    }


@pytest.fixture
def monitor_config():
    """A MonitorConfig with fast timings suitable for tests."""
    from memmark.models.config import MonitorConfig

    return MonitorConfig(
        interval_ms=50,
        duration_ms=None,
        enable_smaps=False,
        collector_workers=2,
        vmmap_timeout_seconds=1.0,
        out_path="-",
        chart_path=None,
        log_level="DEBUG",
    )


@pytest.fixture
def fake_psutil_process():
    """
    Build a psutil.Process replacement from a pid -> memory table.

    Values are (rss_bytes, vms_bytes, pss_bytes, swap_bytes); a pid mapped to
    an exception class raises it from every memory read, and unknown pids
    raise NoSuchProcess.
    """

    def factory(table: Dict[int, object]):
        def make_process(pid):
            entry = table.get(pid, psutil.NoSuchProcess)
            proc = Mock()
            proc.pid = pid
            if isinstance(entry, type) and issubclass(entry, Exception):
                error = entry(pid)
                proc.memory_info.side_effect = error
                proc.memory_full_info.side_effect = error
            else:
                rss, vms, pss, swap = entry
                proc.memory_info.return_value = Mock(rss=rss, vms=vms)
                proc.memory_full_info.return_value = Mock(rss=rss, vms=vms, pss=pss, swap=swap)
            return proc

        return make_process

    return factory


@pytest.fixture
def spawn_tree():
    """
    Start a Python process that forks one sleeping child, and clean both up.

    Yields a function taking the parent lifetime in seconds, and optionally a
    shorter child lifetime, and returning the parent Popen once the child is
    running. The parent reaps the child as soon as it exits.
    """
    started = []

    def start(lifetime: float = 5.0, child_lifetime: Optional[float] = None) -> subprocess.Popen:
        if child_lifetime is None:
            child_lifetime = lifetime
        code = (
            "import subprocess, sys, time\n"
            f"child = subprocess.Popen([sys.executable, '-c', 'import time; time.sleep({child_lifetime})'])\n"
            "print('ready', flush=True)\n"
            "child.wait()\n"
            f"time.sleep({max(0.0, lifetime - child_lifetime)})\n"
        )
        proc = subprocess.Popen([sys.executable, "-c", code], stdout=subprocess.PIPE, text=True)
        started.append(proc)
        assert proc.stdout.readline().strip() == "ready"
        return proc

    yield start

    for proc in started:
        try:
            parent = psutil.Process(proc.pid)
            for child in parent.children(recursive=True):
                child.kill()
        except psutil.NoSuchProcess:
            pass
        if proc.poll() is None:
            proc.kill()
        proc.wait()
        if proc.stdout:
            proc.stdout.close()


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    yield

    from memmark.config import clear_config_cache

    clear_config_cache()


# ============================================================================
# Test Utilities
# ============================================================================


class FakeClock:
    """A manual monotonic clock whose sleep advances time."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        # Rounded so repeated chunked sleeps land exactly on deadlines.
        self.now = round(self.now + seconds, 6)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()

