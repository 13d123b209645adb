import urllib.error
import urllib.request

import pytest

from dbbench.metrics.exposition import METRICS_PATH, render_text, setup
from dbbench.metrics.registry import MetricSet


@pytest.fixture
def metric_set():
    return MetricSet()


def test_empty_set_renders_nothing(metric_set):
    assert render_text(metric_set) == ""


def test_counter_lines(metric_set):
    metric_set.new_counter("requests_total", "Total", "requests").add(3)
    lines = render_text(metric_set).splitlines()
    assert lines == [
        "# HELP requests_total Total requests",
        "# TYPE requests_total counter",
        "requests_total 3",
    ]


def test_gauge_with_labels(metric_set):
    metric_set.new_gauge('temp{room="a"}').set(2)
    text = render_text(metric_set)
    assert 'temp{room="a"} 2\n' in text
    assert "# TYPE temp gauge\n" in text


def test_family_has_one_type_line(metric_set):
    metric_set.new_gauge('temp{room="a"}').set(1)
    metric_set.new_gauge('temp{room="b"}').set(2)
    text = render_text(metric_set)
    assert text.count("# TYPE temp gauge") == 1
    assert 'temp{room="a"}' in text and 'temp{room="b"}' in text


def test_histogram_lines(metric_set):
    hist = metric_set.new_histogram("latency")
    hist.observe(0.3)
    text = render_text(metric_set)
    assert "# TYPE latency histogram\n" in text
    assert 'latency_bucket{le="+Inf"} 1\n' in text
    assert "latency_count 1\n" in text
    bucket_lines = [line for line in text.splitlines() if line.startswith("latency_bucket")]
    assert len(bucket_lines) == len(hist.bucket_counts())


def test_summary_lines(metric_set):
    summary = metric_set.new_summary('rt{op="get"}')
    summary.observe(2)
    text = render_text(metric_set)
    assert "# TYPE rt summary\n" in text
    assert 'rt{op="get",quantile="0.5"} 2\n' in text
    assert 'rt_count{op="get"} 1\n' in text


def test_server_serves_rendered_text(metric_set):
    metric_set.new_counter("hits").inc()
    server = setup("127.0.0.1:0", metric_set)
    try:
        port = server.server_address[1]
        with urllib.request.urlopen(f"http://127.0.0.1:{port}{METRICS_PATH}") as resp:
            body = resp.read().decode()
            assert resp.status == 200
        assert body == render_text(metric_set)
        with pytest.raises(urllib.error.HTTPError) as info:
            urllib.request.urlopen(f"http://127.0.0.1:{port}/other")
        assert info.value.code == 404
    finally:
        server.shutdown()
        server.server_close()


def test_setup_rejects_address_without_port(metric_set):
    with pytest.raises(ValueError):
        setup("localhost", metric_set)