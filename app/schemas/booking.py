from datetime import date, datetime, time
from enum import StrEnum

from pydantic import BaseModel


class BookingStatus(StrEnum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


class Table(BaseModel):
    id: int
    restaurant_id: int
    number: str
    capacity: int


class Booking(BaseModel):
    id: int
    restaurant_id: int
    table_id: int | None = None  # unassigned until a table is picked
    booking_date: date
    start_time: time
    end_time: time | None = None  # None → start + service duration
    guest_count: int
    status: BookingStatus = BookingStatus.pending
    created_at: datetime | None = None
