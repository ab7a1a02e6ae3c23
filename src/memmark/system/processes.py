"""
Process tree discovery.

This module enumerates the tree of processes rooted at a given pid. The tree
is recomputed from a fresh global (pid, ppid) snapshot each time instead of
asking the OS for children, because not every platform exposes tree
enumeration directly and a flat snapshot is cheap to take in one pass.

Discovery is best-effort. The snapshot is not atomic with respect to the
kernel, so a process forked after the snapshot, or a child reparented to init
while the snapshot is being read, can be missed for one tick. Callers must
treat that as an approximation, not an error.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Mapping, Optional

import psutil

from ..models.runtime import ProcessSet

logger = logging.getLogger(__name__)


def take_pid_snapshot() -> Dict[int, int]:
    """
    Take a one-shot snapshot of every visible process and its parent.

    Processes that exit or deny access while being read are left out.

    Returns:
        Mapping of pid to parent pid.
    """
    snapshot: Dict[int, int] = {}
    for proc in psutil.process_iter(["pid", "ppid"]):
        try:
            info = proc.info
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
        pid, ppid = info.get("pid"), info.get("ppid")
        if pid is None or ppid is None:
            continue
        snapshot[pid] = ppid
    return snapshot


def build_children_map(snapshot: Mapping[int, int]) -> Dict[int, List[int]]:
    """Invert a pid -> ppid snapshot into parent -> children."""
    children: Dict[int, List[int]] = defaultdict(list)
    for pid, ppid in snapshot.items():
        if pid != ppid:
            children[ppid].append(pid)
    return children


def discover_tree(root: int, snapshot: Optional[Mapping[int, int]] = None) -> ProcessSet:
    """
    Return the root pid plus every process transitively parented by it.

    The walk is a worklist closure over the parent -> children relation. Each
    pid is added at most once, so it is bounded by the snapshot size and
    terminates even on an inconsistent snapshot.

    Args:
        root: Pid at the top of the tree.
        snapshot: Optional pid -> ppid mapping; a fresh one is taken if omitted.

    Returns:
        The set of pids in the tree, or an empty set if the root is not in the
        snapshot (the normal sign that the target has exited).
    """
    if snapshot is None:
        snapshot = take_pid_snapshot()
    if root not in snapshot:
        return frozenset()

    children = build_children_map(snapshot)
    tree = {root}
    worklist = [root]
    while worklist:
        parent = worklist.pop()
        for child in children.get(parent, ()):
            if child not in tree:
                tree.add(child)
                worklist.append(child)

    logger.debug(f"Discovered {len(tree)} processes under root {root}")
    return frozenset(tree)


def is_pid_alive(pid: int) -> bool:
    """Check whether a pid names a running process. Zombies count as dead."""
    try:
        return psutil.Process(pid).status() != psutil.STATUS_ZOMBIE
    except psutil.NoSuchProcess:
        # Also covers psutil.ZombieProcess.
        return False
    except psutil.AccessDenied:
        return True
