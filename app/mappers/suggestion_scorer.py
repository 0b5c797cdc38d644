"""Score rescheduling candidates against the original slot.

Additive rule, base 5 points:
  - date proximity:  +max(0, 3 - days_difference)       (prioritize_closer_dates)
  - time proximity:  +max(0, 2 - minutes_difference/120) (prioritize_original_time)
  - table efficiency: +1 if guest_count / capacity > 0.7
  - same day:        +2
  - weekend penalty: -1 if the original was a weekday and the candidate is a weekend day

Priority is the score rounded half up and clamped to 1..5.
"""

import math
from collections.abc import Iterable
from datetime import date, time

from app.mappers.intervals import time_difference
from app.mappers.slot_candidates import is_weekend
from app.schemas.rescheduling import ReschedulingOptions, ScoredCandidate, SlotCandidate

BASE_SCORE = 5.0
EFFICIENCY_THRESHOLD = 0.7
MIN_PRIORITY = 1
MAX_PRIORITY = 5


def priority_from_score(score: float) -> int:
    return max(MIN_PRIORITY, min(MAX_PRIORITY, math.floor(score + 0.5)))


def score_candidate(
    candidate: SlotCandidate,
    original_date: date,
    original_time: time,
    guest_count: int,
    options: ReschedulingOptions,
) -> ScoredCandidate:
    days_difference = abs((candidate.suggested_date - original_date).days)
    minutes_difference = time_difference(original_time, candidate.suggested_time)

    score = BASE_SCORE
    if options.prioritize_closer_dates:
        score += max(0, 3 - days_difference)
    if options.prioritize_original_time:
        score += max(0.0, 2 - minutes_difference / 120)
    if guest_count / candidate.table.capacity > EFFICIENCY_THRESHOLD:
        score += 1
    if candidate.suggested_date == original_date:
        score += 2
    if not is_weekend(original_date) and is_weekend(candidate.suggested_date):
        score -= 1

    return ScoredCandidate(
        suggested_date=candidate.suggested_date,
        suggested_time=candidate.suggested_time,
        table=candidate.table,
        score=score,
        priority=priority_from_score(score),
        days_difference=days_difference,
        time_difference=minutes_difference,
    )


def score_same_day_alternative(
    candidate: SlotCandidate, reference_time: time,
) -> ScoredCandidate:
    """Same-day alternatives rank purely on distance from the reference time."""
    minutes_difference = time_difference(reference_time, candidate.suggested_time)
    score = float(max(MIN_PRIORITY, MAX_PRIORITY - minutes_difference // 60))
    return ScoredCandidate(
        suggested_date=candidate.suggested_date,
        suggested_time=candidate.suggested_time,
        table=candidate.table,
        score=score,
        priority=priority_from_score(score),
        days_difference=0,
        time_difference=minutes_difference,
    )


def rank_candidates(scored: Iterable[ScoredCandidate]) -> list[ScoredCandidate]:
    """Highest score first; equal scores keep generation order."""
    return sorted(scored, key=lambda c: c.score, reverse=True)
