import pytest

from dbbench.mmap_util import (
    madvise_normal,
    madvise_random,
    madvise_sequential,
    madvise_will_need,
    mmap_readonly,
    mmap_rw,
    munmap,
)

DATA = bytes(range(256)) * 16


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "data.bin"
    path.write_bytes(DATA)
    return path


def test_readonly_mapping_reads_file(data_file):
    with open(data_file, "rb") as f:
        mapping = mmap_readonly(f, len(DATA))
        try:
            assert mapping[:] == DATA
            assert len(mapping) == len(DATA)
        finally:
            munmap(mapping)


def test_readonly_mapping_rejects_writes(data_file):
    with open(data_file, "rb") as f:
        mapping = mmap_readonly(f, len(DATA))
        try:
            with pytest.raises(TypeError):
                mapping[0] = 1
            assert mapping[:] == DATA
        finally:
            munmap(mapping)


def test_rw_mapping_writes_through(data_file):
    with open(data_file, "r+b") as f:
        mapping = mmap_rw(f, len(DATA))
        mapping[0:4] = b"abcd"
        mapping.flush()
        munmap(mapping)
    content = data_file.read_bytes()
    assert content[:4] == b"abcd"
    assert content[4:] == DATA[4:]


def test_partial_mapping(data_file):
    with open(data_file, "rb") as f:
        mapping = mmap_readonly(f, 100)
        try:
            assert mapping[:] == DATA[:100]
        finally:
            munmap(mapping)


@pytest.mark.parametrize(
    "advise", [madvise_sequential, madvise_normal, madvise_will_need, madvise_random]
)
def test_advice_keeps_contents(data_file, advise):
    with open(data_file, "rb") as f:
        mapping = mmap_readonly(f, len(DATA))
        try:
            advise(mapping)
            assert mapping[:] == DATA
        finally:
            munmap(mapping)


def test_munmap_closes(data_file):
    with open(data_file, "rb") as f:
        mapping = mmap_readonly(f, len(DATA))
    munmap(mapping)
    assert mapping.closed is True


def test_zero_size_rejected(data_file):
    with open(data_file, "rb") as f:
        with pytest.raises(ValueError):
            mmap_readonly(f, 0)