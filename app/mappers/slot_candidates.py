"""Lazy enumeration of (date, time, table) rescheduling candidates.

Each call recomputes from scratch; the collaborators that look up opening
hours, availability and cut-off are passed in as callables so the
generator itself stays free of I/O.
"""

from collections.abc import Callable, Iterable, Iterator
from datetime import date, time, timedelta

from app.mappers.intervals import MINUTES_PER_DAY, close_minutes, from_minutes, to_minutes
from app.schemas.booking import Table
from app.schemas.calendar import DayHours
from app.schemas.rescheduling import ReschedulingOptions, SlotCandidate

DEFAULT_SLOT_INTERVAL = 30

DayHoursLookup = Callable[[date], DayHours]
AvailabilityCheck = Callable[[date, time, Table], bool]
PermissionCheck = Callable[[date, time], bool]


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def candidate_dates(original_date: date, options: ReschedulingOptions) -> list[date]:
    """Original date plus up to date_range_days forward, weekends optional."""
    span = 0 if options.consider_same_day_only else options.date_range_days
    dates = []
    for offset in range(span + 1):
        day = original_date + timedelta(days=offset)
        if not options.include_weekends and is_weekend(day):
            continue
        dates.append(day)
    return dates


def _slot_range(lower: int, upper: int, slot_interval: int) -> list[time]:
    # Starts after midnight would belong to the next calendar date
    upper = min(upper, MINUTES_PER_DAY - 1)
    return [from_minutes(m) for m in range(lower, upper + 1, slot_interval)]


def candidate_times(
    hours: DayHours,
    original_time: time,
    time_range_hours: int,
    service_duration: int,
    slot_interval: int = DEFAULT_SLOT_INTERVAL,
) -> list[time]:
    """Start times within time_range_hours of the original that finish by closing."""
    if not hours.is_open or hours.open_time is None or hours.close_time is None:
        return []
    open_m = to_minutes(hours.open_time)
    close_m = close_minutes(hours.open_time, hours.close_time)
    original_m = to_minutes(original_time)
    lower = max(open_m, original_m - time_range_hours * 60)
    upper = min(close_m - service_duration, original_m + time_range_hours * 60)
    return _slot_range(lower, upper, slot_interval)


def all_day_times(
    hours: DayHours,
    service_duration: int,
    slot_interval: int = DEFAULT_SLOT_INTERVAL,
) -> list[time]:
    """Every start time between opening and the last seating."""
    if not hours.is_open or hours.open_time is None or hours.close_time is None:
        return []
    open_m = to_minutes(hours.open_time)
    close_m = close_minutes(hours.open_time, hours.close_time)
    return _slot_range(open_m, close_m - service_duration, slot_interval)


def suitable_tables(tables: Iterable[Table], guest_count: int) -> list[Table]:
    return [t for t in tables if t.capacity >= guest_count]


def iter_candidates(
    original_date: date,
    original_time: time,
    guest_count: int,
    tables: Iterable[Table],
    options: ReschedulingOptions,
    day_hours: DayHoursLookup,
    is_available: AvailabilityCheck,
    service_duration: int = 120,
    slot_interval: int = DEFAULT_SLOT_INTERVAL,
    is_permitted: PermissionCheck | None = None,
) -> Iterator[SlotCandidate]:
    """Yield available candidates in date, time, table order."""
    fitting = suitable_tables(tables, guest_count)
    if not fitting:
        return

    for day in candidate_dates(original_date, options):
        hours = day_hours(day)
        if not hours.is_open:
            continue
        times = candidate_times(
            hours, original_time, options.time_range_hours,
            service_duration, slot_interval,
        )
        for start in times:
            if is_permitted is not None and not is_permitted(day, start):
                continue
            for table in fitting:
                if is_available(day, start, table):
                    yield SlotCandidate(suggested_date=day, suggested_time=start, table=table)


def iter_day_candidates(
    day: date,
    guest_count: int,
    tables: Iterable[Table],
    hours: DayHours,
    is_available: AvailabilityCheck,
    exclude_time: time | None = None,
    service_duration: int = 120,
    slot_interval: int = DEFAULT_SLOT_INTERVAL,
    is_permitted: PermissionCheck | None = None,
) -> Iterator[SlotCandidate]:
    """Yield available candidates across the whole open window of one day."""
    fitting = suitable_tables(tables, guest_count)
    for start in all_day_times(hours, service_duration, slot_interval):
        if exclude_time is not None and start == exclude_time:
            continue
        if is_permitted is not None and not is_permitted(day, start):
            continue
        for table in fitting:
            if is_available(day, start, table):
                yield SlotCandidate(suggested_date=day, suggested_time=start, table=table)
