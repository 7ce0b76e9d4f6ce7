"""Prometheus-style duration strings.

Accepts compound durations with units ordered from largest to smallest,
e.g. ``1h30m`` or ``90s``. Units: y (365d), w, d, h, m, s, ms.

Pure Python + stdlib — ZERO framework imports.
"""

from __future__ import annotations

import re
from datetime import timedelta

_DURATION_PATTERN = re.compile(
    r"(?:(?P<y>[0-9]+)y)?(?:(?P<w>[0-9]+)w)?(?:(?P<d>[0-9]+)d)?(?:(?P<h>[0-9]+)h)?"
    r"(?:(?P<m>[0-9]+)m)?(?:(?P<s>[0-9]+)s)?(?:(?P<ms>[0-9]+)ms)?"
)

_UNIT_MS: dict[str, int] = {
    "y": 1000 * 60 * 60 * 24 * 365,
    "w": 1000 * 60 * 60 * 24 * 7,
    "d": 1000 * 60 * 60 * 24,
    "h": 1000 * 60 * 60,
    "m": 1000 * 60,
    "s": 1000,
    "ms": 1,
}

# Years and weeks are only emitted when they divide the remainder exactly,
# so 90d stays 90d instead of 12w6d.
_EXACT_UNITS = frozenset({"y", "w"})

# timedelta cannot represent more than 999999999 days
_MAX_MS = timedelta.max // timedelta(milliseconds=1)


def parse_duration(value: str) -> timedelta:
    """Parse a duration string into a timedelta.

    Raises ValueError for empty, malformed or out-of-range strings.
    ``"0"`` is accepted and parses to a zero duration.
    """
    if value == "0":
        return timedelta(0)
    if not value:
        msg = "empty duration string"
        raise ValueError(msg)

    match = _DURATION_PATTERN.fullmatch(value)
    if match is None:
        msg = f"not a valid duration string: {value!r}"
        raise ValueError(msg)

    total_ms = 0
    for unit, amount in match.groupdict().items():
        if amount is not None:
            total_ms += int(amount) * _UNIT_MS[unit]
    if total_ms > _MAX_MS:
        msg = f"duration out of range: {value!r}"
        raise ValueError(msg)
    return timedelta(milliseconds=total_ms)


def format_duration(value: timedelta) -> str:
    """Render a timedelta in the syntax accepted by ``parse_duration``.

    Sub-millisecond precision is truncated. Negative durations are prefixed
    with ``-``.
    """
    ms = value // timedelta(milliseconds=1)
    if ms == 0:
        return "0s"
    sign = ""
    if ms < 0:
        sign = "-"
        ms = -ms

    parts: list[str] = []
    for unit, mult in _UNIT_MS.items():
        if unit in _EXACT_UNITS and ms % mult != 0:
            continue
        count = ms // mult
        if count > 0:
            parts.append(f"{count}{unit}")
            ms -= count * mult
    return sign + "".join(parts)
