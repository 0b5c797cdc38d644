"""Tests for slot_candidates mapper (pure generator, no I/O)."""

from datetime import time

from app.mappers.slot_candidates import (
    all_day_times,
    candidate_dates,
    candidate_times,
    iter_candidates,
    iter_day_candidates,
    suitable_tables,
)
from app.schemas.calendar import DayHours
from app.schemas.rescheduling import ReschedulingOptions
from tests.factories import FRIDAY, MONDAY, SATURDAY, SUNDAY, make_table

OPEN_18_23 = DayHours(is_open=True, open_time=time(18, 0), close_time=time(23, 0))
CLOSED = DayHours(is_open=False)
TABLES = [make_table(5, 4), make_table(8, 8), make_table(2, 2)]


def _always_open(_day):
    return OPEN_18_23


def _always_free(_day, _start, _table):
    return True


# --- candidate_dates ---


def test_candidate_dates_include_original_and_range():
    dates = candidate_dates(FRIDAY, ReschedulingOptions(date_range_days=3))
    assert dates[0] == FRIDAY
    assert len(dates) == 4
    assert dates[-1] == MONDAY


def test_candidate_dates_skip_weekends():
    dates = candidate_dates(FRIDAY, ReschedulingOptions(date_range_days=3, include_weekends=False))
    assert dates == [FRIDAY, MONDAY]
    assert SATURDAY not in dates and SUNDAY not in dates


def test_candidate_dates_same_day_only():
    options = ReschedulingOptions(date_range_days=7, consider_same_day_only=True)
    assert candidate_dates(FRIDAY, options) == [FRIDAY]


# --- candidate_times ---


def test_candidate_times_clipped_to_last_seating():
    """Close 23:00 - 120 min → last start 21:00."""
    times = candidate_times(OPEN_18_23, time(20, 0), 3, 120)
    assert times == [time(18, 0), time(18, 30), time(19, 0), time(19, 30),
                     time(20, 0), time(20, 30), time(21, 0)]


def test_candidate_times_clipped_to_time_range():
    times = candidate_times(OPEN_18_23, time(19, 0), 1, 120)
    assert times == [time(18, 0), time(18, 30), time(19, 0), time(19, 30), time(20, 0)]


def test_candidate_times_start_from_lower_bound():
    """Lower bound 18:15 (19:15 - 1h) steps in 30 minute increments from there."""
    times = candidate_times(OPEN_18_23, time(19, 15), 1, 120)
    assert times == [time(18, 15), time(18, 45), time(19, 15), time(19, 45), time(20, 15)]


def test_candidate_times_closed_day_empty():
    assert candidate_times(CLOSED, time(19, 0), 3, 120) == []


def test_candidate_times_window_too_short():
    short = DayHours(is_open=True, open_time=time(18, 0), close_time=time(19, 0))
    assert candidate_times(short, time(18, 0), 3, 120) == []


def test_candidate_times_past_midnight_close():
    late = DayHours(is_open=True, open_time=time(20, 0), close_time=time(2, 0))
    times = candidate_times(late, time(23, 0), 3, 120)
    assert times[0] == time(20, 0)
    assert times[-1] == time(23, 30)


def test_all_day_times():
    assert all_day_times(OPEN_18_23, 120) == [
        time(18, 0), time(18, 30), time(19, 0), time(19, 30),
        time(20, 0), time(20, 30), time(21, 0),
    ]


# --- suitable_tables ---


def test_suitable_tables_filters_by_capacity():
    assert [t.id for t in suitable_tables(TABLES, 3)] == [5, 8]
    assert [t.id for t in suitable_tables(TABLES, 2)] == [5, 8, 2]
    assert suitable_tables(TABLES, 9) == []


# --- iter_candidates ---


def test_iter_candidates_cross_product():
    options = ReschedulingOptions(date_range_days=0, time_range_hours=0)
    candidates = list(iter_candidates(
        FRIDAY, time(19, 0), 4, TABLES, options, _always_open, _always_free,
    ))
    assert [(c.suggested_time, c.table.id) for c in candidates] == [
        (time(19, 0), 5), (time(19, 0), 8),
    ]


def test_iter_candidates_skip_closed_dates():
    def hours(day):
        return CLOSED if day == FRIDAY else OPEN_18_23

    options = ReschedulingOptions(date_range_days=1, time_range_hours=0)
    candidates = list(iter_candidates(FRIDAY, time(19, 0), 4, TABLES, options, hours, _always_free))
    assert {c.suggested_date for c in candidates} == {SATURDAY}


def test_iter_candidates_drops_unavailable():
    def free(day, start, table):
        return table.id != 5

    options = ReschedulingOptions(date_range_days=0, time_range_hours=0)
    candidates = list(iter_candidates(FRIDAY, time(19, 0), 2, TABLES, options, _always_open, free))
    assert [c.table.id for c in candidates] == [8, 2]


def test_iter_candidates_respects_permission():
    def permitted(day, start):
        return start >= time(20, 0)

    options = ReschedulingOptions(date_range_days=0, time_range_hours=1)
    candidates = list(iter_candidates(
        FRIDAY, time(19, 30), 8, TABLES, options, _always_open, _always_free,
        is_permitted=permitted,
    ))
    assert [c.suggested_time for c in candidates] == [time(20, 0), time(20, 30)]


def test_iter_candidates_no_fitting_table():
    candidates = list(iter_candidates(
        FRIDAY, time(19, 0), 20, TABLES, ReschedulingOptions(), _always_open, _always_free,
    ))
    assert candidates == []


def test_iter_candidates_is_restartable():
    options = ReschedulingOptions(date_range_days=2)
    first = list(iter_candidates(FRIDAY, time(19, 0), 4, TABLES, options, _always_open, _always_free))
    second = list(iter_candidates(FRIDAY, time(19, 0), 4, TABLES, options, _always_open, _always_free))
    assert first == second
    assert len(first) == 3 * 7 * 2


def test_iter_candidates_is_lazy():
    calls = []

    def free(day, start, table):
        calls.append((day, start, table.id))
        return True

    stream = iter_candidates(FRIDAY, time(19, 0), 4, TABLES, ReschedulingOptions(), _always_open, free)
    next(stream)
    assert len(calls) == 1


# --- iter_day_candidates ---


def test_iter_day_candidates_excludes_time():
    candidates = list(iter_day_candidates(
        FRIDAY, 8, TABLES, OPEN_18_23, _always_free, exclude_time=time(19, 0),
    ))
    times = [c.suggested_time for c in candidates]
    assert time(19, 0) not in times
    assert len(times) == 6
