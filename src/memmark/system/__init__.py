"""
System interaction for the memmark package.

- processes: process tree discovery and liveness checks
- commands: running external tools and detecting the platform
"""

from .commands import (
    check_command_installed,
    check_vmmap_installed,
    current_platform,
    run_command,
)
from .processes import (
    build_children_map,
    discover_tree,
    is_pid_alive,
    take_pid_snapshot,
)

__all__ = [
    "check_command_installed",
    "check_vmmap_installed",
    "current_platform",
    "run_command",
    "build_children_map",
    "discover_tree",
    "is_pid_alive",
    "take_pid_snapshot",
]
