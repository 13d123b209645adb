"""Prometheus-style metrics: name parsing, metric types, registry, timers and text exposition."""

__all__ = ["exposition", "parsing", "registry", "timer", "types"]