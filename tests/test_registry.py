import uuid

import pytest

from dbbench.metrics.parsing import MetricNameError
from dbbench.metrics.registry import (
    MetricSet,
    default_set,
    get_or_create_counter,
    get_or_create_gauge,
    get_or_create_histogram,
    get_or_create_summary,
    new_counter,
    new_gauge,
    new_histogram,
    new_summary,
)
from dbbench.metrics.types import Counter, Gauge, Histogram, Summary


@pytest.fixture
def unique_name():
    name = "test_" + uuid.uuid4().hex
    yield name
    default_set().unregister_metric(name)


def test_new_counter_parses_name_and_labels():
    s = MetricSet()
    c = s.new_counter('foo{bar="baz",aaa="b"}', "some", "help")
    assert c.name == "foo"
    assert c.labels == {"bar": "baz", "aaa": "b"}
    assert c.help == "some help"
    assert s.list_metric_names() == ['foo{bar="baz",aaa="b"}']


def test_new_metric_duplicate_raises():
    s = MetricSet()
    s.new_gauge("foo")
    with pytest.raises(ValueError, match="already registered"):
        s.new_counter("foo")


def test_new_metric_invalid_name():
    s = MetricSet()
    with pytest.raises(MetricNameError):
        s.new_counter("1bad")
    with pytest.raises(MetricNameError):
        s.new_summary("foo{bar")
    assert s.list_metric_names() == []


def test_get_or_create_returns_same_object():
    s = MetricSet()
    creators = (
        s.get_or_create_counter,
        s.get_or_create_gauge,
        s.get_or_create_histogram,
        s.get_or_create_summary,
    )
    names = []
    for create in creators:
        name = f"m_{create.__name__}"
        names.append(name)
        first = create(name)
        second = create(name)
        assert second is first
        assert first.name == name
    assert s.list_metric_names() == sorted(names)


def test_get_or_create_finds_metric_made_by_new():
    s = MetricSet()
    h = s.new_histogram("h")
    assert s.get_or_create_histogram("h") is h


def test_get_or_create_wrong_type_raises():
    s = MetricSet()
    s.new_counter("foo")
    with pytest.raises(TypeError, match="isn't a Gauge"):
        s.get_or_create_gauge("foo")


def test_get_or_create_invalid_name():
    s = MetricSet()
    with pytest.raises(MetricNameError, match="invalid metric name"):
        s.get_or_create_counter("")


def test_metric_kinds():
    s = MetricSet()
    made = [s.new_counter("a"), s.new_gauge("b"), s.new_histogram("c"), s.new_summary("d")]
    assert [type(m) for m in made] == [Counter, Gauge, Histogram, Summary]
    assert [m.kind for m in made] == ["counter", "gauge", "histogram", "summary"]
    assert [m.name for m in made] == ["a", "b", "c", "d"]


def test_summary_ext_settings():
    s = MetricSet()
    quantiles = {0.5: 0.05}
    summ = s.new_summary_ext("sx", 60, quantiles)
    assert summ.window == 60.0
    assert summ.quantiles == quantiles
    assert s.get_or_create_summary_ext("sx", 60, quantiles) is summ


def test_unregister():
    s = MetricSet()
    s.new_counter("a")
    assert s.unregister_metric("a") is True
    assert s.unregister_metric("a") is False
    assert s.list_metric_names() == []


def test_unregister_all_and_collect_order():
    s = MetricSet()
    for name in ("zeta", "alpha", "mid"):
        s.new_counter(name)
    assert s.list_metric_names() == ["alpha", "mid", "zeta"]
    assert [m.name for m in s.collect()] == ["alpha", "mid", "zeta"]
    s.unregister_all_metrics()
    assert s.collect() == []


def test_module_functions_use_default_set(unique_name):
    c = new_counter(unique_name)
    assert get_or_create_counter(unique_name) is c
    assert unique_name in default_set().list_metric_names()


def test_module_duplicate_is_wrapped(unique_name):
    new_gauge(unique_name)
    with pytest.raises(ValueError, match="could not create new gauge"):
        new_gauge(unique_name)
    assert get_or_create_gauge(unique_name).name == unique_name


def test_module_histogram_and_summary(unique_name):
    h = new_histogram(unique_name)
    assert get_or_create_histogram(unique_name) is h
    with pytest.raises(TypeError, match="could not get or create new summary"):
        get_or_create_summary(unique_name)


def test_module_new_summary(unique_name):
    summ = new_summary(unique_name)
    assert get_or_create_summary(unique_name) is summ
    with pytest.raises(ValueError, match="could not create new counter"):
        new_counter(unique_name)