"""
Duration Parser

Turns human-readable TTL expressions into a canonical time quantity.

    "1h30m"   -> 5_400_000 ms
    "2d"      -> 172_800_000 ms
    "1w2d3h"  -> 1 week + 2 days + 3 hours
    "1 month" -> 30 days (fixed, not calendar-aware)

Grammar: repeated ``<integer><optional spaces><unit>`` occurrences, scanned
left to right. Unit tokens are case-insensitive and must not run into another
letter ("1hello" is not one hour). Everything that does not match is skipped,
so parsing never fails: unrecognised text simply contributes zero.

Supported units and aliases:

    second  s, sec, secs, second, seconds
    minute  m, min, mins, minute, minutes
    hour    h, hr, hrs, hour, hours
    day     d, day, days
    week    w, wk, week, weeks
    month   mo, month, months       (30 days)
"""

import re
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum


class DurationUnit(str, Enum):
    """Time unit with its fixed conversion factor and display label."""

    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @property
    def milliseconds(self) -> int:
        return _UNIT_MILLISECONDS[self]

    def label(self, quantity: int) -> str:
        """Unit label, pluralised unless quantity is exactly 1."""
        return self.value if quantity == 1 else f"{self.value}s"


_SECOND_MS = 1000
_DAY_MS = 24 * 60 * 60 * _SECOND_MS

_UNIT_MILLISECONDS: dict[DurationUnit, int] = {
    DurationUnit.SECOND: _SECOND_MS,
    DurationUnit.MINUTE: 60 * _SECOND_MS,
    DurationUnit.HOUR: 60 * 60 * _SECOND_MS,
    DurationUnit.DAY: _DAY_MS,
    DurationUnit.WEEK: 7 * _DAY_MS,
    DurationUnit.MONTH: 30 * _DAY_MS,
}

_UNIT_ALIASES: dict[str, DurationUnit] = {
    "s": DurationUnit.SECOND,
    "sec": DurationUnit.SECOND,
    "secs": DurationUnit.SECOND,
    "second": DurationUnit.SECOND,
    "seconds": DurationUnit.SECOND,
    "m": DurationUnit.MINUTE,
    "min": DurationUnit.MINUTE,
    "mins": DurationUnit.MINUTE,
    "minute": DurationUnit.MINUTE,
    "minutes": DurationUnit.MINUTE,
    "h": DurationUnit.HOUR,
    "hr": DurationUnit.HOUR,
    "hrs": DurationUnit.HOUR,
    "hour": DurationUnit.HOUR,
    "hours": DurationUnit.HOUR,
    "d": DurationUnit.DAY,
    "day": DurationUnit.DAY,
    "days": DurationUnit.DAY,
    "w": DurationUnit.WEEK,
    "wk": DurationUnit.WEEK,
    "week": DurationUnit.WEEK,
    "weeks": DurationUnit.WEEK,
    "mo": DurationUnit.MONTH,
    "month": DurationUnit.MONTH,
    "months": DurationUnit.MONTH,
}

# Longest aliases first so "months" is not read as "mo" + "nths"
_DURATION_PATTERN = re.compile(
    r"(\d+)\s*(" + "|".join(sorted(_UNIT_ALIASES, key=len, reverse=True)) + r")(?![a-z])",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class DurationPart:
    """One ``<quantity> <unit>`` match."""

    quantity: int
    unit: DurationUnit

    @property
    def milliseconds(self) -> int:
        return self.quantity * self.unit.milliseconds

    def render(self) -> str:
        return f"{self.quantity} {self.unit.label(self.quantity)}"


@dataclass(frozen=True)
class DurationSpec:
    """
    Ordered sequence of duration parts extracted from one string.

    Units may repeat ("1h 1h" is two hours); all parts are summed.
    """

    parts: tuple[DurationPart, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True when the source contained no recognised ``<n><unit>`` token."""
        return not self.parts

    @property
    def total_milliseconds(self) -> int:
        return sum(part.milliseconds for part in self.parts)

    @property
    def total_seconds(self) -> int:
        """Whole seconds, rounded down."""
        return self.total_milliseconds // _SECOND_MS

    def as_timedelta(self) -> timedelta:
        return timedelta(milliseconds=self.total_milliseconds)

    def render(self) -> str:
        """Human-readable form in source order, e.g. "1 hour 30 minutes"."""
        return " ".join(part.render() for part in self.parts)


def parse_duration_spec(text: str) -> DurationSpec:
    """
    Extract every ``<integer><unit>`` occurrence from ``text``.

    A new DurationSpec is built on every call; results are not memoised.
    """
    if not text:
        return DurationSpec()

    parts = []
    for match in _DURATION_PATTERN.finditer(text):
        quantity = int(match.group(1))
        unit = _UNIT_ALIASES[match.group(2).lower()]
        parts.append(DurationPart(quantity=quantity, unit=unit))
    return DurationSpec(parts=tuple(parts))


def parse_duration(text: str) -> int:
    """
    Convert a duration string to milliseconds.

    Args:
        text: Duration expression, e.g. "3d2h", "1month", "45m"

    Returns:
        Total duration in milliseconds; 0 when nothing is recognised
    """
    return parse_duration_spec(text).total_milliseconds


def duration_to_seconds(text: str) -> int:
    """Convert a duration string to whole seconds (rounded down), for TTLs."""
    return parse_duration_spec(text).total_seconds


def duration_to_string(text: str) -> str:
    """
    Convert a duration string to a human-readable one.

    Example:
        >>> duration_to_string("1d2h")
        '1 day 2 hours'

    Returns:
        The rendered parts joined by spaces; "" when nothing is recognised
    """
    return parse_duration_spec(text).render()
