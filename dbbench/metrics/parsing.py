"""Parsing of metric names of the form ``name{label="value",...}``."""

from __future__ import annotations

import re

_IDENT = re.compile(r"[a-zA-Z_:.][a-zA-Z0-9_:.]*")


class MetricNameError(ValueError):
    """Raised for a malformed metric name or label set."""


def _quote(s: str) -> str:
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'


def validate_ident(s: str) -> None:
    """Raise MetricNameError unless ``s`` is a valid identifier."""
    if not _IDENT.fullmatch(s):
        raise MetricNameError(f"invalid identifier {_quote(s)}")


def parse_metric(s: str) -> tuple[str, dict[str, str] | None]:
    """Split a metric into its name and its labels (None when it has none)."""
    if not s:
        raise MetricNameError("metric cannot be empty")
    ident, sep, rest = s.partition("{")
    if not sep:
        validate_ident(s)
        return s, None
    validate_ident(ident)
    if not rest.endswith("}"):
        raise MetricNameError(f"missing closing curly brace at the end of {_quote(ident)}")
    return ident, parse_tags(rest[:-1])


def parse_tags(s: str) -> dict[str, str] | None:
    """Parse ``a="x", b="y"`` into a dict; an empty string gives None."""
    if not s:
        return None
    labels: dict[str, str] = {}
    while True:
        ident, sep, tail = s.partition("=")
        if not sep:
            raise MetricNameError(f"missing `=` after {_quote(s)}")
        s = tail
        validate_ident(ident)
        if not s.startswith('"'):
            raise MetricNameError(
                f"missing starting `\"` for {_quote(ident)} value; tail={_quote(s)}"
            )
        s = s[1:]
        value = ""
        while True:
            n = s.find('"')
            if n < 0:
                raise MetricNameError(
                    f"missing trailing `\"` for {_quote(ident)} value; tail={_quote(s)}"
                )
            m = n
            while m > 0 and s[m - 1] == "\\":
                m -= 1
            value += s[:n]
            s = s[n + 1 :]
            if (n - m) % 2 == 1:
                continue
            break
        labels[ident] = value
        if not s:
            return labels
        if not s.startswith(","):
            raise MetricNameError(f"missing `,` after {_quote(ident)} value; tail={_quote(s)}")
        s = s[1:].lstrip(" ")