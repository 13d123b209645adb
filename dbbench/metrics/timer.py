"""Histogram timers that record the time elapsed since their creation."""

from __future__ import annotations

import time

from dbbench.metrics.registry import MetricSet, default_set
from dbbench.metrics.types import Histogram

_UNEQUAL_TAGS = "UNEQUAL_KEY_VALUE_TAGS"


class HistTimer:
    """A start time bound to a histogram; ``put_since`` observes the elapsed time."""

    def __init__(self, name: str, metric_set: MetricSet | None = None) -> None:
        self._set = default_set() if metric_set is None else metric_set
        self.histogram: Histogram = self._set.get_or_create_histogram(name)
        self.start = time.monotonic()
        self.name = name.split("{", 1)[0]

    def put_since(self) -> None:
        """Observe the seconds elapsed since this timer was created."""
        self.histogram.observe_duration(self.start)

    def tag(self, *args: str) -> HistTimer:
        """Return a new timer for the same base name with the given label pairs."""
        pairs = list(args)
        if len(pairs) % 2:
            pairs.append(_UNEQUAL_TAGS)
        joined = ",".join(f'{key}="{value}"' for key, value in zip(pairs[::2], pairs[1::2]))
        tags = "{" + joined + "}" if joined else ""
        return HistTimer(self.name + tags, self._set)

    def child(self, suffix: str) -> HistTimer:
        """Return a new timer named ``<name>_<suffix>``."""
        if suffix.startswith("_"):
            suffix = suffix[1:]
        return HistTimer(f"{self.name}_{suffix}", self._set)