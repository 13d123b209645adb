"""Counter, gauge, histogram and summary metrics."""

from __future__ import annotations

import bisect
import itertools
import math
import threading
import time
from collections import deque
from collections.abc import Iterable, Mapping
from datetime import timedelta

DEFAULT_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
DEFAULT_SUMMARY_WINDOW = 300.0
DEFAULT_SUMMARY_QUANTILES = {0.5: 0.05, 0.9: 0.01, 0.97: 0.003, 0.99: 0.001}

_MAX_UINT32 = 2**32 - 1
_MAX_UINT64 = 2**64 - 1


def seconds_since(start: float) -> float:
    """Seconds elapsed since ``start``, a value taken from ``time.monotonic()``."""
    return time.monotonic() - start


def _check_unsigned(value: int, limit: int, kind: str) -> None:
    if not 0 <= value <= limit:
        raise ValueError(f"value {value} does not fit in {kind}")


def _as_uint64(current: float) -> int:
    if current < 0 or math.isnan(current):
        raise ValueError(f"value {current} cannot be represented as an unsigned integer")
    return int(current)


class _Metric:
    kind = "untyped"

    def __init__(self, name: str, labels: Mapping[str, str] | None = None, help: str = "") -> None:
        self.name = name
        self.labels: dict[str, str] = dict(labels) if labels else {}
        self.help = help
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, labels={self.labels!r})"


class Counter(_Metric):
    """A monotonically increasing value."""

    kind = "counter"

    def __init__(self, name: str, labels: Mapping[str, str] | None = None, help: str = "") -> None:
        super().__init__(name, labels, help)
        self._value = 0.0

    def inc(self) -> None:
        self.add(1.0)

    def add(self, value: float) -> None:
        value = float(value)
        if value < 0:
            raise ValueError("counter cannot decrease in value")
        with self._lock:
            self._value += value

    def add_int(self, value: int) -> None:
        """Add an integer; exact for magnitudes up to 2**53."""
        self.add(float(value))

    def add_uint64(self, value: int) -> None:
        """Add an unsigned 64-bit integer; exact up to 2**53."""
        _check_unsigned(value, _MAX_UINT64, "uint64")
        self.add(float(value))

    def value(self) -> float:
        """The current value."""
        with self._lock:
            return self._value

    def value_uint64(self) -> int:
        """The current value truncated to an unsigned integer."""
        return _as_uint64(self.value())


class Gauge(_Metric):
    """A value that can go up and down."""

    kind = "gauge"

    def __init__(self, name: str, labels: Mapping[str, str] | None = None, help: str = "") -> None:
        super().__init__(name, labels, help)
        self._value = 0.0

    def set(self, value: float) -> None:
        with self._lock:
            self._value = float(value)

    def set_uint32(self, value: int) -> None:
        _check_unsigned(value, _MAX_UINT32, "uint32")
        self.set(float(value))

    def set_uint64(self, value: int) -> None:
        """Set from an unsigned 64-bit integer; exact up to 2**53."""
        _check_unsigned(value, _MAX_UINT64, "uint64")
        self.set(float(value))

    def set_int(self, value: int) -> None:
        self.set(float(value))

    def inc(self) -> None:
        self.add(1.0)

    def dec(self) -> None:
        self.add(-1.0)

    def add(self, value: float) -> None:
        with self._lock:
            self._value += float(value)

    def sub(self, value: float) -> None:
        self.add(-float(value))

    def value(self) -> float:
        """The current value."""
        with self._lock:
            return self._value

    def value_uint64(self) -> int:
        """The current value truncated to an unsigned integer."""
        return _as_uint64(self.value())


class Histogram(_Metric):
    """Observations counted into cumulative buckets."""

    kind = "histogram"

    def __init__(
        self,
        name: str,
        labels: Mapping[str, str] | None = None,
        help: str = "",
        buckets: Iterable[float] | None = None,
    ) -> None:
        super().__init__(name, labels, help)
        bounds = [float(b) for b in (DEFAULT_BUCKETS if buckets is None else buckets)]
        if bounds and bounds[-1] == math.inf:
            bounds.pop()
        for lower, upper in zip(bounds, bounds[1:]):
            if lower >= upper:
                raise ValueError(
                    f"histogram buckets must be in increasing order: {lower} >= {upper}"
                )
        self._upper = tuple(bounds)
        self._counts = [0] * (len(bounds) + 1)
        self._count = 0
        self._sum = 0.0

    def observe(self, value: float) -> None:
        value = float(value)
        index = bisect.bisect_left(self._upper, value)
        with self._lock:
            self._counts[index] += 1
            self._count += 1
            self._sum += value

    def observe_duration(self, start: float) -> None:
        """Observe the seconds elapsed since ``start`` (from ``time.monotonic()``)."""
        self.observe(seconds_since(start))

    def count(self) -> int:
        with self._lock:
            return self._count

    def sum(self) -> float:
        with self._lock:
            return self._sum

    def bucket_counts(self) -> dict[float, int]:
        """Cumulative count per upper bound, ending with ``inf``."""
        with self._lock:
            counts = list(self._counts)
        bounds = (*self._upper, math.inf)
        return dict(zip(bounds, itertools.accumulate(counts)))


class Summary(_Metric):
    """Observations with quantiles over a sliding time window."""

    kind = "summary"

    def __init__(
        self,
        name: str,
        labels: Mapping[str, str] | None = None,
        help: str = "",
        window: float | timedelta = DEFAULT_SUMMARY_WINDOW,
        quantiles: Mapping[float, float] | None = None,
    ) -> None:
        super().__init__(name, labels, help)
        if isinstance(window, timedelta):
            window = window.total_seconds()
        if window <= 0:
            raise ValueError(f"summary window must be positive, got {window}")
        objectives = DEFAULT_SUMMARY_QUANTILES if quantiles is None else quantiles
        for quantile, error in objectives.items():
            if not 0.0 <= quantile <= 1.0:
                raise ValueError(f"quantile {quantile} must lie between 0 and 1")
            if error < 0:
                raise ValueError(f"allowed error {error} for quantile {quantile} is negative")
        self.window = float(window)
        self.quantiles: dict[float, float] = dict(sorted(objectives.items()))
        self._samples: deque[tuple[float, float]] = deque()
        self._count = 0
        self._sum = 0.0

    def _prune(self, now: float) -> None:
        cutoff = now - self.window
        while self._samples and self._samples[0][0] < cutoff:
            self._samples.popleft()

    def observe(self, value: float) -> None:
        value = float(value)
        now = time.monotonic()
        with self._lock:
            self._prune(now)
            self._samples.append((now, value))
            self._count += 1
            self._sum += value

    def observe_duration(self, start: float) -> None:
        """Observe the seconds elapsed since ``start`` (from ``time.monotonic()``)."""
        self.observe(seconds_since(start))

    def count(self) -> int:
        with self._lock:
            return self._count

    def sum(self) -> float:
        with self._lock:
            return self._sum

    def quantile_values(self) -> dict[float, float]:
        """Each configured quantile over the window; NaN when the window is empty."""
        now = time.monotonic()
        with self._lock:
            self._prune(now)
            values = sorted(value for _, value in self._samples)
        if not values:
            return {q: math.nan for q in self.quantiles}
        return {
            q: values[max(0, math.ceil(q * len(values)) - 1)] for q in self.quantiles
        }