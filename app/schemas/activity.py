from datetime import datetime

from pydantic import BaseModel


class ActivityEvent(BaseModel):
    restaurant_id: int
    event_type: str  # "booking_rescheduled" | "rescheduling_rejected"
    description: str
    source: str = "rescheduling_assistant"
    actor: str | None = None
    details: dict = {}
    occurred_at: datetime
