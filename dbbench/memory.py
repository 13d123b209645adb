"""Available memory, honouring cgroup and process limits."""

from __future__ import annotations

import os
import sys
from enum import Enum, auto
from pathlib import Path

import psutil

CGROUP_ROOT = "/sys/fs/cgroup"
UNLIMITED = 2**64 - 1
_PROC_SELF_CGROUP = Path("/proc/self/cgroup")


class CgroupsUnavailableError(OSError):
    """Raised when cgroup memory limits cannot be used here."""


class _Mode(Enum):
    UNAVAILABLE = auto()
    LEGACY = auto()
    HYBRID = auto()
    UNIFIED = auto()


def _mode(root: Path) -> _Mode:
    if not sys.platform.startswith("linux") or not root.is_dir():
        return _Mode.UNAVAILABLE
    if (root / "cgroup.controllers").is_file():
        return _Mode.UNIFIED
    if (root / "unified").is_dir():
        return _Mode.HYBRID
    return _Mode.LEGACY


def _self_cgroups() -> list[tuple[str, list[str], str]]:
    entries = []
    for line in _PROC_SELF_CGROUP.read_text().splitlines():
        parts = line.split(":", 2)
        if len(parts) != 3:
            continue
        hierarchy, controllers, path = parts
        entries.append((hierarchy, controllers.split(","), path))
    return entries


def _v1_limit(root: Path) -> int:
    if os.getpid() == 1:
        relative = "/"
    else:
        try:
            relative = next(
                path for _, controllers, path in _self_cgroups() if "memory" in controllers
            )
        except (OSError, StopIteration) as exc:
            raise OSError(f"failed to load cgroup1 for process: {exc}") from exc
    limit_file = root / "memory" / relative.lstrip("/") / "memory.limit_in_bytes"
    try:
        text = limit_file.read_text()
    except OSError as exc:
        raise OSError(f"failed to load memory cgroup1 stats: {exc}") from exc
    return int(text.strip())


def _v2_limit(root: Path) -> int:
    pid = os.getpid()
    try:
        relative = next(
            path
            for hierarchy, controllers, path in _self_cgroups()
            if hierarchy == "0" and controllers == [""]
        )
    except (OSError, StopIteration) as exc:
        raise OSError(f"failed to load cgroup2 path for process pid {pid}: {exc}") from exc
    group = root / relative.lstrip("/")
    if not group.is_dir():
        raise OSError(f"failed to load cgroup2 for process: no such group {group}")
    try:
        text = (group / "memory.max").read_text().strip()
    except FileNotFoundError:
        return 0
    if text == "max":
        return UNLIMITED
    return int(text)


def cgroups_memory_limit(root: str | Path = CGROUP_ROOT) -> int:
    """Return the memory limit of this process's cgroup under ``root``."""
    root = Path(root)
    mode = _mode(root)
    if mode is _Mode.UNIFIED:
        return _v2_limit(root)
    if mode is _Mode.LEGACY:
        return _v1_limit(root)
    raise CgroupsUnavailableError("cgroups not supported in this environment")


def _process_memory_limit() -> int:
    try:
        import resource
    except ImportError:
        return 0
    try:
        soft, _ = resource.getrlimit(resource.RLIMIT_AS)
    except (OSError, ValueError, AttributeError):
        return 0
    if soft == resource.RLIM_INFINITY or soft <= 0:
        return 0
    return soft


def total_memory() -> int:
    """Physical memory, reduced to the cgroup and process limits if lower."""
    mem = psutil.virtual_memory().total
    try:
        limit = cgroups_memory_limit()
    except (OSError, ValueError):
        limit = 0
    if limit > 0:
        mem = min(mem, limit)
    process_limit = _process_memory_limit()
    if process_limit > 0:
        mem = min(mem, process_limit)
    return mem