from datetime import date, time

from pydantic import BaseModel

from app.schemas.booking import Booking
from app.schemas.rescheduling import ReschedulingSuggestion, ScoredCandidate


class AvailabilityResponse(BaseModel):
    restaurant_id: int
    table_id: int
    booking_date: date
    start_time: time
    available: bool
    is_open: bool
    permitted: bool


class CutOffResponse(BaseModel):
    restaurant_id: int
    booking_date: date
    start_time: time
    permitted: bool


class SuggestionsResponse(BaseModel):
    status: str  # "generated" | "no_candidates"
    message: str | None = None
    suggestions: list[ReschedulingSuggestion] = []


class AlternativesResponse(BaseModel):
    booking_date: date
    alternatives: list[ScoredCandidate] = []


class DoubleBooking(BaseModel):
    table_id: int
    bookings: list[Booking]


class ConflictsResponse(BaseModel):
    restaurant_id: int
    booking_date: date
    conflicts: list[DoubleBooking] = []


class SweepResponse(BaseModel):
    expired: int
