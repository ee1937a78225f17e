"""
Duration Module

Parses TTL expressions such as "1h30m" or "2d" into milliseconds and renders
them back to readable text.
"""

from .parser import (
    DurationPart,
    DurationSpec,
    DurationUnit,
    duration_to_seconds,
    duration_to_string,
    parse_duration,
    parse_duration_spec,
)

__all__ = [
    "DurationPart",
    "DurationSpec",
    "DurationUnit",
    "duration_to_seconds",
    "duration_to_string",
    "parse_duration",
    "parse_duration_spec",
]
