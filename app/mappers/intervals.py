"""Minute-of-day arithmetic and the half-open overlap test.

Every availability decision goes through windows_overlap(); nothing else
in the package compares booking windows directly.
"""

from datetime import time
from typing import NamedTuple

MINUTES_PER_DAY = 24 * 60


class Window(NamedTuple):
    """Half-open [start, end) in minutes from midnight. end may pass 1440."""

    start: int
    end: int


def to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def from_minutes(minutes: int) -> time:
    """Inverse of to_minutes(), wrapping past midnight."""
    minutes %= MINUTES_PER_DAY
    return time(minutes // 60, minutes % 60)


def close_minutes(open_time: time, close_time: time) -> int:
    """Closing minute, moved to the next day when the service runs past midnight."""
    close = to_minutes(close_time)
    if close <= to_minutes(open_time):
        close += MINUTES_PER_DAY
    return close


def booking_window(
    start_time: time, end_time: time | None, service_duration: int,
) -> Window:
    start = to_minutes(start_time)
    if end_time is None:
        return Window(start, start + service_duration)
    end = to_minutes(end_time)
    if end <= start:
        end += MINUTES_PER_DAY
    return Window(start, end)


def buffered(window: Window, buffer: int) -> Window:
    return Window(window.start - buffer, window.end + buffer)


def shifted(window: Window, days: int) -> Window:
    """Move a window by whole days, e.g. to compare against the next date."""
    offset = days * MINUTES_PER_DAY
    return Window(window.start + offset, window.end + offset)


def windows_overlap(a: Window, b: Window) -> bool:
    """Half-open overlap: touching windows do not overlap. Symmetric."""
    return a.start < b.end and b.start < a.end


def time_difference(a: time, b: time) -> int:
    """Absolute distance in minutes between two times of day."""
    return abs(to_minutes(a) - to_minutes(b))
