"""
External command helpers.

Functions for running the platform tools some collectors shell out to, and
for checking whether those tools are installed.
"""

import logging
import os
import platform
import shutil
import subprocess
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


def current_platform() -> str:
    """Return the lower-cased OS name, e.g. ``"linux"`` or ``"darwin"``."""
    return platform.system().lower()


def check_command_installed(name: str) -> bool:
    """Check whether an executable is available on PATH."""
    return shutil.which(name) is not None


def check_vmmap_installed() -> bool:
    """Check whether the macOS `vmmap` tool is available."""
    return check_command_installed("vmmap")


def run_command(
    argv: List[str], timeout: Optional[float] = None
) -> Tuple[int, str, str]:
    """Execute a command and capture its output.

    The command runs with ``LC_ALL=C`` so that numeric output parses the same
    regardless of the user's locale.

    Args:
        argv: The command and its arguments.
        timeout: Seconds to wait before giving up, or None to wait forever.

    Returns:
        Tuple of (return_code, stdout_string, stderr_string).
        return_code is -1 when the command could not be run or timed out.
    """
    logger.debug(f"Executing command: {argv}")
    env = os.environ.copy()
    env["LC_ALL"] = "C"
    try:
        process = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            env=env,
            timeout=timeout,
            check=False,
        )
        return process.returncode, process.stdout, process.stderr
    except FileNotFoundError as e:
        logger.debug(f"Command not found: {argv[0]}: {e}")
        return -1, "", f"Error: Command not found '{argv[0]}'"
    except subprocess.TimeoutExpired:
        logger.debug(f"Command timed out after {timeout}s: {argv}")
        return -1, "", f"Error: Command timed out after {timeout}s"
