"""Tests for suggestion_scorer mapper (pure functions, no I/O)."""

from datetime import date, time, timedelta

import pytest

from app.mappers.suggestion_scorer import (
    priority_from_score,
    rank_candidates,
    score_candidate,
    score_same_day_alternative,
)
from app.schemas.rescheduling import ReschedulingOptions, SlotCandidate
from tests.factories import FRIDAY, MONDAY, SATURDAY, SUNDAY, make_table

FOUR_TOP = make_table(5, 4)
EIGHT_TOP = make_table(8, 8)
DEFAULTS = ReschedulingOptions()


def _candidate(day, start, table=FOUR_TOP):
    return SlotCandidate(suggested_date=day, suggested_time=start, table=table)


# --- score_candidate ---


def test_identical_slot_scores_maximum():
    """5 base + 3 date + 2 time + 1 efficiency + 2 same day."""
    scored = score_candidate(_candidate(FRIDAY, time(19, 0)), FRIDAY, time(19, 0), 4, DEFAULTS)
    assert scored.score == 13
    assert scored.priority == 5
    assert scored.days_difference == 0
    assert scored.time_difference == 0


def test_weekend_penalty_for_weekday_original():
    """5 + 2 (one day away) + 2 + 1 - 1 weekend."""
    scored = score_candidate(_candidate(SATURDAY, time(19, 0)), FRIDAY, time(19, 0), 4, DEFAULTS)
    assert scored.score == 9
    assert scored.days_difference == 1


def test_no_weekend_penalty_for_weekend_original():
    """Saturday → Sunday: 5 + 2 + 2 + 1."""
    scored = score_candidate(_candidate(SUNDAY, time(19, 0)), SATURDAY, time(19, 0), 4, DEFAULTS)
    assert scored.score == 10


def test_no_weekend_penalty_for_weekday_candidate():
    """Sunday → Monday: 5 + 2 + 2 + 1, moving off the weekend costs nothing."""
    next_monday = SUNDAY + timedelta(days=1)
    scored = score_candidate(_candidate(next_monday, time(19, 0)), SUNDAY, time(19, 0), 4, DEFAULTS)
    assert scored.score == 10
    assert scored.days_difference == 1


def test_partial_time_bonus_and_oversized_table():
    """Monday 20:00 on an 8-top: 5 + 0 date + 1.5 time, no efficiency bonus."""
    scored = score_candidate(_candidate(MONDAY, time(20, 0), EIGHT_TOP), FRIDAY, time(19, 0), 4, DEFAULTS)
    assert scored.score == pytest.approx(6.5)
    assert scored.days_difference == 3
    assert scored.time_difference == 60


def test_time_bonus_floors_at_zero():
    scored = score_candidate(_candidate(MONDAY, time(23, 0), EIGHT_TOP), FRIDAY, time(18, 0), 4, DEFAULTS)
    assert scored.score == 5


def test_efficiency_threshold_is_strict():
    """2 guests / 4 seats = 0.5 → no bonus; 3 / 4 = 0.75 → bonus."""
    two = score_candidate(_candidate(MONDAY, time(19, 0)), FRIDAY, time(19, 0), 2, DEFAULTS)
    three = score_candidate(_candidate(MONDAY, time(19, 0)), FRIDAY, time(19, 0), 3, DEFAULTS)
    assert three.score - two.score == 1


def test_disabled_priorities_drop_proximity_bonuses():
    options = ReschedulingOptions(prioritize_closer_dates=False, prioritize_original_time=False)
    scored = score_candidate(_candidate(FRIDAY, time(19, 0)), FRIDAY, time(19, 0), 4, options)
    assert scored.score == 8  # 5 + 1 efficiency + 2 same day


def test_closer_dates_never_score_lower():
    """Candidates that only differ in distance score monotonically."""
    original = date(2026, 10, 19)  # Monday
    scores = [
        score_candidate(
            _candidate(original + timedelta(days=d), time(19, 0)),
            original, time(19, 0), 4, DEFAULTS,
        ).score
        for d in range(1, 5)  # Tuesday..Friday, all weekdays
    ]
    assert scores == sorted(scores, reverse=True)


# --- priority_from_score ---


@pytest.mark.parametrize("score, priority", [
    (13, 5), (5.4, 5), (4.5, 5), (4.49, 4), (2.5, 3), (1.2, 1), (0.2, 1), (-3, 1),
])
def test_priority_from_score(score, priority):
    assert priority_from_score(score) == priority


# --- score_same_day_alternative ---


def test_same_day_alternative_scores_by_hour_distance():
    assert score_same_day_alternative(_candidate(FRIDAY, time(18, 30)), time(19, 0)).score == 5
    assert score_same_day_alternative(_candidate(FRIDAY, time(21, 0)), time(19, 0)).score == 3
    assert score_same_day_alternative(_candidate(FRIDAY, time(23, 0)), time(18, 0)).score == 1


# --- rank_candidates ---


def test_rank_sorts_descending_and_keeps_ties_in_order():
    a = score_candidate(_candidate(MONDAY, time(19, 0), EIGHT_TOP), FRIDAY, time(19, 0), 4, DEFAULTS)
    b = score_candidate(_candidate(FRIDAY, time(19, 0)), FRIDAY, time(19, 0), 4, DEFAULTS)
    c = score_candidate(_candidate(MONDAY, time(19, 0), make_table(9, 8)), FRIDAY, time(19, 0), 4, DEFAULTS)
    ranked = rank_candidates([a, b, c])
    assert ranked[0] is b
    assert [r.table.id for r in ranked[1:]] == [8, 9]
