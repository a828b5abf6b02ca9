"""Store-local clock and time-of-day helpers."""

from __future__ import annotations

from datetime import datetime, time
from zoneinfo import ZoneInfo


def store_now(tz_name: str) -> datetime:
    """Return the current wall-clock time in the store's operating zone.

    This is the only place that reads the real clock; everything downstream
    receives the value as an argument.
    """
    return datetime.now(ZoneInfo(tz_name))


def to_minutes(value: str | time | None) -> int | None:
    """Convert an ``HH:MM`` string or ``time`` into minute-of-day.

    Returns ``None`` for missing or unparseable input so callers can fail closed.
    """
    if value is None:
        return None
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if not isinstance(value, str):
        return None

    parts = value.strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour * 60 + minute


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def normalize_hhmm(value: str) -> str | None:
    """Return canonical ``HH:MM`` form of a time string, or ``None`` if invalid."""
    minutes = to_minutes(value)
    if minutes is None:
        return None
    return format_hhmm(time(hour=minutes // 60, minute=minutes % 60))
