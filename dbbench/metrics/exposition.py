"""Prometheus text exposition of a metric set and an HTTP server for it."""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Mapping
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

from dbbench.metrics.registry import MetricSet, default_set
from dbbench.metrics.types import Counter, Gauge, Histogram, Summary, _Metric

METRICS_PATH = "/debug/metrics/prometheus"
CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

_log = logging.getLogger(__name__)


def _format_value(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == int(value) and abs(value) < 1e15:
        return str(int(value))
    return repr(float(value))


def _escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def _labels(labels: Mapping[str, str], extra: tuple[str, str] | None = None) -> str:
    items = list(labels.items())
    if extra is not None:
        items.append(extra)
    if not items:
        return ""
    return "{" + ",".join(f'{k}="{_escape_label(v)}"' for k, v in items) + "}"


def _sample_lines(metric: _Metric) -> list[str]:
    name, labels = metric.name, metric.labels
    if isinstance(metric, (Counter, Gauge)):
        return [f"{name}{_labels(labels)} {_format_value(metric.value())}"]
    if isinstance(metric, Histogram):
        lines = [
            f"{name}_bucket{_labels(labels, ('le', _format_value(bound)))} {count}"
            for bound, count in metric.bucket_counts().items()
        ]
    elif isinstance(metric, Summary):
        lines = [
            f"{name}{_labels(labels, ('quantile', _format_value(q)))} {_format_value(v)}"
            for q, v in metric.quantile_values().items()
        ]
    else:
        return []
    lines.append(f"{name}_sum{_labels(labels)} {_format_value(metric.sum())}")
    lines.append(f"{name}_count{_labels(labels)} {metric.count()}")
    return lines


def render_text(metric_set: MetricSet | None = None) -> str:
    """Render every metric of the set in the Prometheus text format."""
    metric_set = default_set() if metric_set is None else metric_set
    families: dict[str, list[_Metric]] = {}
    for metric in metric_set.collect():
        families.setdefault(metric.name, []).append(metric)
    lines: list[str] = []
    for name, members in families.items():
        help_text = next((m.help for m in members if m.help), "")
        if help_text:
            lines.append(f"# HELP {name} {_escape_help(help_text)}")
        lines.append(f"# TYPE {name} {members[0].kind}")
        for metric in members:
            lines.extend(_sample_lines(metric))
    return "".join(line + "\n" for line in lines)


def _parse_address(address: str) -> tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"address must be of the form host:port, got {address!r}")
    return host.strip("[]"), int(port)


def setup(address: str, metric_set: MetricSet | None = None) -> ThreadingHTTPServer:
    """Serve the metric set over HTTP at ``address`` from a background thread."""
    metric_set = default_set() if metric_set is None else metric_set
    host, port = _parse_address(address)

    class _Handler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:
            if self.path.split("?", 1)[0] != METRICS_PATH:
                self.send_error(404)
                return
            body = render_text(metric_set).encode()
            self.send_response(200)
            self.send_header("Content-Type", CONTENT_TYPE)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format: str, *args: object) -> None:
            _log.debug(format, *args)

    server = ThreadingHTTPServer((host, port), _Handler)

    def _serve() -> None:
        try:
            server.serve_forever()
        except Exception:
            _log.exception("Failure in running Prometheus server")

    threading.Thread(target=_serve, name="metrics-server", daemon=True).start()
    _log.info(
        "Enabling metrics export to prometheus path=http://%s%s", address, METRICS_PATH
    )
    return server