"""Memory-mapping of database files with access-pattern advice."""

from __future__ import annotations

import errno
import mmap
from typing import BinaryIO

MAX_MAP_SIZE = 0xFFFFFFFFFFFF


def _advise(mapping: mmap.mmap, option_name: str) -> None:
    option = getattr(mmap, option_name, None)
    if option is None or not hasattr(mapping, "madvise"):
        return
    try:
        mapping.madvise(option)
    except OSError as exc:
        # Kernels without madvise support still map the file correctly.
        if exc.errno == errno.ENOSYS:
            return
        raise OSError(exc.errno, f"madvise: {exc.strerror}") from exc


def _map(f: BinaryIO, size: int, access: int) -> mmap.mmap:
    if size <= 0:
        raise ValueError(f"mapping size must be positive, got {size}")
    if size > MAX_MAP_SIZE:
        raise ValueError(f"mapping size {size} exceeds maximum {MAX_MAP_SIZE}")
    mapping = mmap.mmap(f.fileno(), size, access=access)
    try:
        _advise(mapping, "MADV_RANDOM")
    except BaseException:
        mapping.close()
        raise
    return mapping


def mmap_rw(f: BinaryIO, size: int) -> mmap.mmap:
    """Map the first ``size`` bytes of ``f`` shared, for reading and writing."""
    return _map(f, size, mmap.ACCESS_WRITE)


def mmap_readonly(f: BinaryIO, size: int) -> mmap.mmap:
    """Map the first ``size`` bytes of ``f`` shared, read-only."""
    return _map(f, size, mmap.ACCESS_READ)


def madvise_sequential(mapping: mmap.mmap) -> None:
    _advise(mapping, "MADV_SEQUENTIAL")


def madvise_normal(mapping: mmap.mmap) -> None:
    _advise(mapping, "MADV_NORMAL")


def madvise_will_need(mapping: mmap.mmap) -> None:
    _advise(mapping, "MADV_WILLNEED")


def madvise_random(mapping: mmap.mmap) -> None:
    _advise(mapping, "MADV_RANDOM")


def munmap(mapping: mmap.mmap | None) -> None:
    """Unmap ``mapping``; ``None`` is accepted and ignored."""
    if mapping is None:
        return
    mapping.close()