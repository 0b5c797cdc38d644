"""Resolve whether a restaurant is open on a given date, and when.

No I/O. Uses holidays (pip) for public-holiday closures.
"""

from collections.abc import Iterable
from datetime import date

import holidays

from app.schemas.calendar import DayHours, OpeningHours, SpecialPeriod

CLOSED = DayHours(is_open=False)


def covering_special_period(
    day: date, special_periods: Iterable[SpecialPeriod],
) -> SpecialPeriod | None:
    """The special period that governs *day*, if any.

    When several periods cover the same date the one that started last
    wins, so a short override inside a longer season takes precedence.
    """
    covering = [p for p in special_periods if p.covers(day)]
    if not covering:
        return None
    return max(covering, key=lambda p: p.start_date)


def weekday_hours(
    day: date, opening_hours: Iterable[OpeningHours],
) -> OpeningHours | None:
    weekday = day.weekday()
    for entry in opening_hours:
        if entry.day_of_week == weekday:
            return entry
    return None


def public_holiday_name(day: date, country: str | None) -> str | None:
    """Name of the public holiday on *day* in *country* (ISO code), or None."""
    if not country:
        return None
    year_holidays = holidays.country_holidays(country.strip().upper(), years=day.year)
    return year_holidays.get(day)


def resolve_day_hours(
    day: date,
    opening_hours: Iterable[OpeningHours],
    special_periods: Iterable[SpecialPeriod],
    holiday_country: str | None = None,
) -> DayHours:
    """Effective open/close window for *day*.

    Precedence: special period > public holiday > weekly opening hours.
    A missing weekly entry means closed; there is no "always open" default.
    """
    opening_hours = list(opening_hours)
    regular = weekday_hours(day, opening_hours)

    period = covering_special_period(day, special_periods)
    if period is not None:
        if not period.is_open:
            return DayHours(is_open=False, source="special_period", name=period.name)
        if period.open_time is not None and period.close_time is not None:
            return DayHours(
                is_open=True,
                open_time=period.open_time,
                close_time=period.close_time,
                source="special_period",
                name=period.name,
            )
        # Open without its own times → regular weekday times
        if regular is None or not regular.is_open:
            return DayHours(is_open=False, source="special_period", name=period.name)
        return DayHours(
            is_open=True,
            open_time=regular.open_time,
            close_time=regular.close_time,
            source="special_period",
            name=period.name,
        )

    holiday = public_holiday_name(day, holiday_country)
    if holiday:
        return DayHours(is_open=False, source="holiday", name=holiday)

    if regular is None:
        return CLOSED
    if not regular.is_open:
        return DayHours(is_open=False, source="opening_hours")
    return DayHours(
        is_open=True,
        open_time=regular.open_time,
        close_time=regular.close_time,
        source="opening_hours",
    )
