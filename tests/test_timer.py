import pytest

from dbbench.metrics.registry import MetricSet
from dbbench.metrics.timer import HistTimer


@pytest.fixture
def metric_set():
    return MetricSet()


def test_name_strips_labels(metric_set):
    timer = HistTimer('db_op{a="b"}', metric_set)
    assert timer.name == "db_op"
    assert metric_set.list_metric_names() == ['db_op{a="b"}']


def test_put_since_observes_once(metric_set):
    timer = HistTimer("db_op", metric_set)
    timer.put_since()
    assert timer.histogram.count() == 1
    assert timer.histogram.sum() >= 0


def test_same_name_shares_histogram(metric_set):
    first = HistTimer("db_op", metric_set)
    second = HistTimer("db_op", metric_set)
    assert first.histogram is second.histogram


def test_tag_adds_labels(metric_set):
    timer = HistTimer("db_op", metric_set).tag("k", "v", "x", "y")
    assert timer.name == "db_op"
    assert timer.histogram.labels == {"k": "v", "x": "y"}
    assert 'db_op{k="v",x="y"}' in metric_set.list_metric_names()


def test_tag_odd_pairs_padded(metric_set):
    timer = HistTimer("db_op", metric_set).tag("k")
    assert timer.histogram.labels == {"k": "UNEQUAL_KEY_VALUE_TAGS"}


def test_tag_without_pairs_reuses_base(metric_set):
    base = HistTimer("db_op", metric_set)
    tagged = base.tag()
    assert tagged.histogram is base.histogram


def test_tag_from_labelled_timer_replaces_labels(metric_set):
    timer = HistTimer('db_op{a="b"}', metric_set).tag("c", "d")
    assert timer.histogram.labels == {"c": "d"}


@pytest.mark.parametrize("suffix", ["sub", "_sub"])
def test_child_name(metric_set, suffix):
    child = HistTimer("db_op", metric_set).child(suffix)
    assert child.name == "db_op_sub"
    assert "db_op_sub" in metric_set.list_metric_names()


def test_child_strips_only_one_underscore(metric_set):
    child = HistTimer("db_op", metric_set).child("__sub")
    assert child.name == "db_op__sub"


def test_tag_records_independently(metric_set):
    base = HistTimer("db_op", metric_set)
    tagged = base.tag("k", "v")
    tagged.put_since()
    assert tagged.histogram.count() == 1
    assert base.histogram.count() == 0