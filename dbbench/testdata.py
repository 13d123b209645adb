"""Random key/value test data and helpers shared by the benchmarks."""

from __future__ import annotations

import random
import secrets
import shutil
from collections.abc import Iterable, Iterator, MutableSequence
from pathlib import Path
from typing import Any, NamedTuple

PATH_BADGER = "/tmp/badger"
PATH_BBOLT = "/tmp/bolt"
PATH_MDBX = "/tmp/mdbx"
PATH_ROCKSDB = "/tmp/rocksdb"
DATABASE_PATHS = (PATH_BADGER, PATH_BBOLT, PATH_MDBX, PATH_ROCKSDB)

KEY_SIZE = 32
VALUE_SIZE = 32
DEFAULT_SIZE = 1_000_000

_BATCH_SIZES = (1, 10, 100, 1000, 10000)
_TOTAL_ENTRIES = (1000, 10000, 100000, 1000000)


class KeyValue(NamedTuple):
    """A single key/value pair."""

    key: bytes
    val: bytes


def generate_random_pair() -> KeyValue:
    """Return a pair of cryptographically random 32-byte key and value."""
    return KeyValue(secrets.token_bytes(KEY_SIZE), secrets.token_bytes(VALUE_SIZE))


class Dataset:
    """A fixed list of random pairs with a cycling cursor."""

    def __init__(self, size: int = DEFAULT_SIZE) -> None:
        if size < 1:
            raise ValueError(f"dataset size must be positive, got {size}")
        self.data: list[KeyValue] = [generate_random_pair() for _ in range(size)]
        self._cursor = 0

    def __len__(self) -> int:
        return len(self.data)

    def next_pair(self) -> KeyValue:
        """Advance the cursor (wrapping to the start) and return the pair there."""
        self._cursor = (self._cursor + 1) % len(self.data)
        return self.data[self._cursor]

    def pair_at(self, index: int) -> KeyValue:
        """Return the pair stored at ``index``."""
        if not 0 <= index < len(self.data):
            raise IndexError(f"index {index} out of range for dataset of {len(self.data)}")
        return self.data[index]

    def iterator(self) -> DataIterator:
        """Return a fresh iterator over every pair in order."""
        return DataIterator(self)


class DataIterator:
    """Resettable iterator over the pairs of a dataset."""

    def __init__(self, dataset: Dataset) -> None:
        self._dataset = dataset
        self._index = 0

    def reset(self) -> None:
        self._index = 0

    def __iter__(self) -> Iterator[KeyValue]:
        return self

    def __next__(self) -> KeyValue:
        if self._index >= len(self._dataset):
            raise StopIteration
        pair = self._dataset.data[self._index]
        self._index += 1
        return pair


def remove_database_paths(paths: Iterable[str | Path] = DATABASE_PATHS) -> None:
    """Remove each path and everything below it; missing paths are ignored."""
    for entry in paths:
        path = Path(entry)
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()


def init_dataset(size: int = DEFAULT_SIZE) -> Dataset:
    """Generate a dataset and clear the benchmark database directories."""
    dataset = Dataset(size)
    remove_database_paths(DATABASE_PATHS)
    return dataset


def batch_sizes() -> list[int]:
    return list(_BATCH_SIZES)


def total_entries() -> list[int]:
    return list(_TOTAL_ENTRIES)


def shuffle(items: MutableSequence[Any]) -> None:
    """Shuffle ``items`` in place using a cryptographic random source."""
    random.SystemRandom().shuffle(items)