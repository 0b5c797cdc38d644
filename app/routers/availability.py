from datetime import date, datetime, time, timezone

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.dependencies import AvailabilityDep
from app.schemas.calendar import ChangeWindow, DayHours
from app.schemas.responses import (
    AvailabilityResponse,
    ConflictsResponse,
    CutOffResponse,
    DoubleBooking,
)


router = APIRouter()


class AvailabilityRequest(BaseModel):
    restaurant_id: int
    table_id: int
    booking_date: date
    start_time: time
    duration_minutes: int | None = Field(default=None, ge=1)
    now: datetime | None = None


class CutOffRequest(BaseModel):
    restaurant_id: int
    booking_date: date
    start_time: time
    now: datetime | None = None


@router.post("/availability/check", response_model=AvailabilityResponse)
async def check_availability(
    request: AvailabilityRequest, service: AvailabilityDep,
) -> AvailabilityResponse:
    now = request.now or datetime.now(timezone.utc)
    return AvailabilityResponse(
        restaurant_id=request.restaurant_id,
        table_id=request.table_id,
        booking_date=request.booking_date,
        start_time=request.start_time,
        available=service.is_table_available(
            request.restaurant_id,
            request.booking_date,
            request.start_time,
            request.table_id,
            duration=request.duration_minutes,
        ),
        is_open=service.day_hours(request.restaurant_id, request.booking_date).is_open,
        permitted=service.is_booking_permitted(
            request.restaurant_id, request.booking_date, request.start_time, now,
        ),
    )


@router.get("/restaurants/{restaurant_id}/hours/{day}", response_model=DayHours)
async def get_day_hours(restaurant_id: int, day: date, service: AvailabilityDep) -> DayHours:
    return service.day_hours(restaurant_id, day)


@router.post("/cut-off/check", response_model=CutOffResponse)
async def check_cut_off(request: CutOffRequest, service: AvailabilityDep) -> CutOffResponse:
    now = request.now or datetime.now(timezone.utc)
    return CutOffResponse(
        restaurant_id=request.restaurant_id,
        booking_date=request.booking_date,
        start_time=request.start_time,
        permitted=service.is_booking_permitted(
            request.restaurant_id, request.booking_date, request.start_time, now,
        ),
    )


@router.get("/bookings/{booking_id}/change-window", response_model=ChangeWindow)
async def get_change_window(booking_id: int, service: AvailabilityDep) -> ChangeWindow:
    return service.change_window(booking_id, datetime.now(timezone.utc))


@router.get("/restaurants/{restaurant_id}/conflicts/{day}", response_model=ConflictsResponse)
async def get_conflicts(restaurant_id: int, day: date, service: AvailabilityDep) -> ConflictsResponse:
    pairs = service.double_bookings(restaurant_id, day)
    return ConflictsResponse(
        restaurant_id=restaurant_id,
        booking_date=day,
        conflicts=[
            DoubleBooking(table_id=first.table_id, bookings=[first, second])
            for first, second in pairs
        ],
    )
