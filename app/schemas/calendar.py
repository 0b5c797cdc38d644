from datetime import date, datetime, time
from typing import Literal

from pydantic import BaseModel


class OpeningHours(BaseModel):
    restaurant_id: int
    day_of_week: int  # 0 = Monday ... 6 = Sunday
    is_open: bool = True
    open_time: time
    close_time: time  # at or before open_time → closes after midnight


class SpecialPeriod(BaseModel):
    restaurant_id: int
    name: str
    start_date: date
    end_date: date  # inclusive
    is_open: bool = False
    open_time: time | None = None
    close_time: time | None = None

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


class CutOffRule(BaseModel):
    restaurant_id: int
    day_of_week: int
    lead_hours: int | None = None  # None or 0 → disabled


class DayHours(BaseModel):
    is_open: bool
    open_time: time | None = None
    close_time: time | None = None
    source: Literal["special_period", "opening_hours", "holiday", "none"] = "none"
    name: str | None = None  # special period or holiday name


class ChangeWindow(BaseModel):
    can_modify: bool
    can_cancel: bool
    cut_off_hours: int
    deadline: datetime  # restaurant local time
