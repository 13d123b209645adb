"""Named sets of metrics and the process-wide default set."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import TypeVar

from dbbench.metrics.parsing import MetricNameError, parse_metric
from dbbench.metrics.types import (
    DEFAULT_SUMMARY_QUANTILES,
    DEFAULT_SUMMARY_WINDOW,
    Counter,
    Gauge,
    Histogram,
    Summary,
    _Metric,
)

M = TypeVar("M", bound=_Metric)


@dataclass
class _NamedMetric:
    name: str
    metric: _Metric
    is_aux: bool = False


def _counter(name: str, help: tuple[str, ...]) -> Counter:
    ident, labels = parse_metric(name)
    return Counter(ident, labels, " ".join(help))


def _gauge(name: str, help: tuple[str, ...]) -> Gauge:
    ident, labels = parse_metric(name)
    return Gauge(ident, labels, " ".join(help))


def _histogram(name: str, help: tuple[str, ...]) -> Histogram:
    ident, labels = parse_metric(name)
    return Histogram(ident, labels, " ".join(help))


def _summary(
    name: str,
    window: float | timedelta,
    quantiles: Mapping[float, float],
    help: tuple[str, ...],
) -> Summary:
    ident, labels = parse_metric(name)
    return Summary(ident, labels, " ".join(help), window, quantiles)


class MetricSet:
    """A set of metrics keyed by their full name, labels included."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ordered: list[_NamedMetric] = []
        self._by_name: dict[str, _NamedMetric] = {}

    def _register(self, name: str, metric: M) -> M:
        with self._lock:
            if name in self._by_name:
                raise ValueError(f"metric {name!r} is already registered")
            entry = _NamedMetric(name, metric)
            self._by_name[name] = entry
            self._ordered.append(entry)
        return metric

    def _get_or_create(self, name: str, cls: type[M], factory: Callable[[], M]) -> M:
        with self._lock:
            entry = self._by_name.get(name)
        if entry is None:
            try:
                metric = factory()
            except MetricNameError as exc:
                raise MetricNameError(f"invalid metric name {name!r}: {exc}") from exc
            with self._lock:
                entry = self._by_name.get(name)
                if entry is None:
                    entry = _NamedMetric(name, metric)
                    self._by_name[name] = entry
                    self._ordered.append(entry)
        if not isinstance(entry.metric, cls):
            raise TypeError(
                f"metric {name!r} isn't a {cls.__name__}. It is {type(entry.metric).__name__}"
            )
        return entry.metric

    def new_counter(self, name: str, *args: str) -> Counter:
        """Register a new counter; extra arguments form its help text."""
        return self._register(name, _counter(name, args))

    def get_or_create_counter(self, name: str, *args: str) -> Counter:
        return self._get_or_create(name, Counter, lambda: _counter(name, args))

    def new_gauge(self, name: str, *args: str) -> Gauge:
        return self._register(name, _gauge(name, args))

    def get_or_create_gauge(self, name: str, *args: str) -> Gauge:
        return self._get_or_create(name, Gauge, lambda: _gauge(name, args))

    def new_histogram(self, name: str, *args: str) -> Histogram:
        return self._register(name, _histogram(name, args))

    def get_or_create_histogram(self, name: str, *args: str) -> Histogram:
        return self._get_or_create(name, Histogram, lambda: _histogram(name, args))

    def new_summary(self, name: str, *args: str) -> Summary:
        return self.new_summary_ext(
            name, DEFAULT_SUMMARY_WINDOW, DEFAULT_SUMMARY_QUANTILES, *args
        )

    def get_or_create_summary(self, name: str, *args: str) -> Summary:
        return self.get_or_create_summary_ext(
            name, DEFAULT_SUMMARY_WINDOW, DEFAULT_SUMMARY_QUANTILES, *args
        )

    def new_summary_ext(
        self,
        name: str,
        window: float | timedelta,
        quantiles: Mapping[float, float],
        *args: str,
    ) -> Summary:
        try:
            metric = _summary(name, window, quantiles, args)
        except MetricNameError as exc:
            raise MetricNameError(f"invalid metric name {name!r}: {exc}") from exc
        return self._register(name, metric)

    def get_or_create_summary_ext(
        self,
        name: str,
        window: float | timedelta,
        quantiles: Mapping[float, float],
        *args: str,
    ) -> Summary:
        return self._get_or_create(
            name, Summary, lambda: _summary(name, window, quantiles, args)
        )

    def unregister_metric(self, name: str) -> bool:
        """Remove the named metric; return whether it was present."""
        with self._lock:
            entry = self._by_name.pop(name, None)
            if entry is None:
                return False
            self._ordered.remove(entry)
            return True

    def unregister_all_metrics(self) -> None:
        for name in self.list_metric_names():
            self.unregister_metric(name)

    def list_metric_names(self) -> list[str]:
        """Sorted names of all non-auxiliary metrics."""
        with self._lock:
            return sorted(e.name for e in self._by_name.values() if not e.is_aux)

    def collect(self) -> list[_Metric]:
        """All metrics, ordered by their registered name."""
        with self._lock:
            self._ordered.sort(key=lambda e: e.name)
            return [e.metric for e in self._ordered]


_DEFAULT_SET = MetricSet()


def default_set() -> MetricSet:
    """The process-wide metric set used by the module-level functions."""
    return _DEFAULT_SET


def _wrapped(action: str, create: Callable[[str], M], name: str) -> M:
    try:
        return create(name)
    except (ValueError, TypeError) as exc:
        raise type(exc)(f"could not {action}: {exc}") from exc


def new_counter(name: str) -> Counter:
    return _wrapped("create new counter", _DEFAULT_SET.new_counter, name)


def get_or_create_counter(name: str) -> Counter:
    return _wrapped("get or create new counter", _DEFAULT_SET.get_or_create_counter, name)


def new_gauge(name: str) -> Gauge:
    return _wrapped("create new gauge", _DEFAULT_SET.new_gauge, name)


def get_or_create_gauge(name: str) -> Gauge:
    return _wrapped("get or create new gauge", _DEFAULT_SET.get_or_create_gauge, name)


def new_histogram(name: str) -> Histogram:
    return _wrapped("create new histogram", _DEFAULT_SET.new_histogram, name)


def get_or_create_histogram(name: str) -> Histogram:
    return _wrapped(
        "get or create new histogram", _DEFAULT_SET.get_or_create_histogram, name
    )


def new_summary(name: str) -> Summary:
    return _wrapped("create new summary", _DEFAULT_SET.new_summary, name)


def get_or_create_summary(name: str) -> Summary:
    return _wrapped("get or create new summary", _DEFAULT_SET.get_or_create_summary, name)