from __future__ import annotations

from datetime import date, datetime, time
from enum import StrEnum

from pydantic import BaseModel, Field

from app.schemas.booking import Booking, Table


class SuggestionStatus(StrEnum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    expired = "expired"


TERMINAL_STATUSES = frozenset({
    SuggestionStatus.accepted,
    SuggestionStatus.rejected,
    SuggestionStatus.expired,
})


class ReasonCode(StrEnum):
    table_conflict = "table_conflict"
    restaurant_closed = "restaurant_closed"
    capacity_issue = "capacity_issue"
    restaurant_request = "restaurant_request"
    alternative_time_same_day = "alternative_time_same_day"


class ReschedulingOptions(BaseModel):
    date_range_days: int = Field(default=7, ge=0)
    time_range_hours: int = Field(default=3, ge=0)
    include_weekends: bool = True
    consider_same_day_only: bool = False
    max_suggestions: int | None = Field(default=None, ge=1)  # None → settings default
    prioritize_closer_dates: bool = True
    prioritize_original_time: bool = True


class SlotCandidate(BaseModel):
    suggested_date: date
    suggested_time: time
    table: Table


class ScoredCandidate(BaseModel):
    suggested_date: date
    suggested_time: time
    table: Table
    score: float
    priority: int
    days_difference: int
    time_difference: int  # minutes


class ReschedulingSuggestion(BaseModel):
    id: int | None = None
    restaurant_id: int
    original_booking_id: int | None = None
    original_date: date
    original_time: time
    suggested_date: date
    suggested_time: time
    table_id: int
    table_number: str
    table_capacity: int
    guest_count: int
    score: float
    priority: int
    reason: ReasonCode
    availability: bool = True
    status: SuggestionStatus = SuggestionStatus.pending
    created_at: datetime
    updated_at: datetime
    expires_at: datetime

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class AcceptResult(BaseModel):
    success: bool
    suggestion: ReschedulingSuggestion
    booking: Booking | None = None
    message: str
