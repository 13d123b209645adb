import psutil
import pytest

from dbbench.memory import CgroupsUnavailableError, cgroups_memory_limit, total_memory


def test_missing_root_is_unavailable(tmp_path):
    with pytest.raises(CgroupsUnavailableError, match="cgroups not supported"):
        cgroups_memory_limit(tmp_path / "nowhere")


def test_hybrid_layout_is_unavailable(tmp_path):
    (tmp_path / "unified").mkdir()
    with pytest.raises(CgroupsUnavailableError):
        cgroups_memory_limit(tmp_path)


def test_legacy_without_memory_controller_fails(tmp_path):
    with pytest.raises(OSError):
        cgroups_memory_limit(tmp_path)


def test_unavailable_error_caught_as_os_error(tmp_path):
    with pytest.raises(OSError) as info:
        cgroups_memory_limit(tmp_path / "nowhere")
    assert isinstance(info.value, CgroupsUnavailableError)
    assert "cgroups not supported" in str(info.value)


def test_total_memory_bounded_by_physical():
    mem = total_memory()
    assert 0 < mem <= psutil.virtual_memory().total