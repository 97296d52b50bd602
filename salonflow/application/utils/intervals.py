from __future__ import annotations

from datetime import datetime, time


def to_minutes(value: str | time) -> int:
    """'HH:MM' (or a time) -> minutes since midnight."""
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    hours, minutes = value.strip().split(":")[:2]
    return int(hours) * 60 + int(minutes)


def to_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def is_valid_hhmm(value: str) -> bool:
    try:
        datetime.strptime(value, "%H:%M")
    except (TypeError, ValueError):
        return False
    return True


def is_overlapping(a_start: int, a_duration: int, b_start: int, b_duration: int) -> bool:
    """Half-open intervals [a, a+da) and [b, b+db) overlap iff a < b+db and b < a+da.

    Back-to-back intervals do not overlap. Used for server slots and cart conflicts alike.
    """
    return a_start < b_start + b_duration and b_start < a_start + a_duration


def end_time(start: str, duration: int) -> str:
    return to_hhmm(to_minutes(start) + duration)


def slot_starts(day_start: int, day_end: int, interval: int, duration: int) -> list[int]:
    """Slot starts at ``interval`` granularity whose whole duration fits in the day."""
    starts = []
    current = day_start
    while current + duration <= day_end:
        starts.append(current)
        current += interval
    return starts
