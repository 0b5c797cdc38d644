from datetime import date, time

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from app.dependencies import ReschedulingDep
from app.schemas.rescheduling import (
    AcceptResult,
    ReasonCode,
    ReschedulingOptions,
    ReschedulingSuggestion,
)
from app.schemas.responses import AlternativesResponse, SuggestionsResponse, SweepResponse


router = APIRouter()


class SuggestionRequest(BaseModel):
    restaurant_id: int
    original_date: date
    original_time: time
    guest_count: int = Field(ge=1)
    reason: ReasonCode = ReasonCode.table_conflict
    options: ReschedulingOptions | None = None


class BookingRescheduleRequest(BaseModel):
    reason: ReasonCode = ReasonCode.restaurant_request
    options: ReschedulingOptions | None = None


class DecisionRequest(BaseModel):
    actor: str | None = None


def _suggestions_response(suggestions: list[ReschedulingSuggestion]) -> SuggestionsResponse:
    if not suggestions:
        return SuggestionsResponse(
            status="no_candidates",
            message="No available slots in the search window; widen the date or time range",
        )
    return SuggestionsResponse(status="generated", suggestions=suggestions)


@router.post("/rescheduling/suggestions", response_model=SuggestionsResponse)
async def generate_suggestions(
    request: SuggestionRequest, service: ReschedulingDep,
) -> SuggestionsResponse:
    suggestions = await service.generate_suggestions(
        request.restaurant_id,
        request.original_date,
        request.original_time,
        request.guest_count,
        request.reason,
        request.options,
    )
    return _suggestions_response(suggestions)


@router.post("/bookings/{booking_id}/rescheduling", response_model=SuggestionsResponse)
async def generate_for_booking(
    booking_id: int,
    service: ReschedulingDep,
    request: BookingRescheduleRequest | None = None,
) -> SuggestionsResponse:
    request = request or BookingRescheduleRequest()
    suggestions = await service.generate_for_booking(booking_id, request.reason, request.options)
    return _suggestions_response(suggestions)


@router.get("/bookings/{booking_id}/rescheduling", response_model=list[ReschedulingSuggestion])
async def list_booking_suggestions(
    booking_id: int, service: ReschedulingDep,
) -> list[ReschedulingSuggestion]:
    return service.suggestions_for_booking(booking_id)


@router.get("/rescheduling/suggestions/{suggestion_id}", response_model=ReschedulingSuggestion)
async def get_suggestion(suggestion_id: int, service: ReschedulingDep) -> ReschedulingSuggestion:
    return service.get_suggestion(suggestion_id)


@router.post("/rescheduling/suggestions/{suggestion_id}/accept", response_model=AcceptResult)
async def accept_suggestion(
    suggestion_id: int,
    service: ReschedulingDep,
    request: DecisionRequest | None = None,
) -> AcceptResult:
    result = await service.accept(suggestion_id, request.actor if request else None)
    if not result.success:
        return JSONResponse(status_code=409, content=result.model_dump(mode="json"))
    return result


@router.post(
    "/rescheduling/suggestions/{suggestion_id}/reject",
    response_model=ReschedulingSuggestion,
)
async def reject_suggestion(
    suggestion_id: int,
    service: ReschedulingDep,
    request: DecisionRequest | None = None,
) -> ReschedulingSuggestion:
    return await service.reject(suggestion_id, request.actor if request else None)


@router.post("/rescheduling/sweep", response_model=SweepResponse)
async def sweep_expired(service: ReschedulingDep) -> SweepResponse:
    return SweepResponse(expired=service.sweep_expired())


@router.get("/restaurants/{restaurant_id}/alternatives", response_model=AlternativesResponse)
async def alternatives_for_day(
    restaurant_id: int,
    service: ReschedulingDep,
    day: date = Query(...),
    guest_count: int = Query(..., ge=1),
    exclude_time: time | None = Query(None),
) -> AlternativesResponse:
    return AlternativesResponse(
        booking_date=day,
        alternatives=service.alternatives_for_day(restaurant_id, day, guest_count, exclude_time),
    )
