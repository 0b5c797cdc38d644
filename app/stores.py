"""Repository interfaces the engine depends on, plus in-memory implementations.

Hosts backed by a real database implement the Protocols; the in-memory
stores serve the bundled app and the tests.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import AbstractAsyncContextManager
from datetime import date, datetime
from itertools import count
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel

from app.exceptions.custom import BookingNotFoundError, SuggestionNotFoundError
from app.schemas.booking import Booking, Table
from app.schemas.calendar import CutOffRule, OpeningHours, SpecialPeriod
from app.schemas.rescheduling import ReschedulingSuggestion, SuggestionStatus

logger = logging.getLogger(__name__)


class BookingStore(Protocol):
    def bookings_for_restaurant_and_date(self, restaurant_id: int, day: date) -> list[Booking]: ...

    def booking_by_id(self, booking_id: int) -> Booking | None: ...

    def update_booking(self, booking_id: int, fields: dict[str, Any]) -> Booking: ...

    def transaction(self, restaurant_id: int) -> AbstractAsyncContextManager[Any]:
        """Unit of work that serialises booking mutations for a restaurant."""
        ...


class TableStore(Protocol):
    def tables_for_restaurant(self, restaurant_id: int) -> list[Table]: ...


class CalendarStore(Protocol):
    def opening_hours(self, restaurant_id: int) -> list[OpeningHours]: ...

    def special_periods(self, restaurant_id: int) -> list[SpecialPeriod]: ...


class CutOffStore(Protocol):
    def cut_off_rules(self, restaurant_id: int) -> list[CutOffRule]: ...


class SuggestionStore(Protocol):
    def create_suggestion(self, suggestion: ReschedulingSuggestion) -> ReschedulingSuggestion: ...

    def update_suggestion(self, suggestion_id: int, fields: dict[str, Any]) -> ReschedulingSuggestion: ...

    def suggestion_by_id(self, suggestion_id: int) -> ReschedulingSuggestion | None: ...

    def suggestions_for_booking(self, booking_id: int) -> list[ReschedulingSuggestion]: ...

    def mark_expired_suggestions(self, before: datetime) -> int: ...


class InMemoryBookingStore:
    def __init__(self, bookings: list[Booking] | None = None) -> None:
        self._bookings: dict[int, Booking] = {b.id: b for b in bookings or []}
        self._locks: dict[int, asyncio.Lock] = {}

    def add_booking(self, booking: Booking) -> Booking:
        self._bookings[booking.id] = booking
        return booking

    def bookings_for_restaurant_and_date(self, restaurant_id: int, day: date) -> list[Booking]:
        return [
            b for b in self._bookings.values()
            if b.restaurant_id == restaurant_id and b.booking_date == day
        ]

    def bookings_for_restaurant(self, restaurant_id: int) -> list[Booking]:
        return [b for b in self._bookings.values() if b.restaurant_id == restaurant_id]

    def booking_by_id(self, booking_id: int) -> Booking | None:
        return self._bookings.get(booking_id)

    def update_booking(self, booking_id: int, fields: dict[str, Any]) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        updated = booking.model_copy(update=fields)
        self._bookings[booking_id] = updated
        return updated

    def transaction(self, restaurant_id: int) -> asyncio.Lock:
        if restaurant_id not in self._locks:
            self._locks[restaurant_id] = asyncio.Lock()
        return self._locks[restaurant_id]


class InMemoryTableStore:
    def __init__(self, tables: list[Table] | None = None) -> None:
        self._tables: list[Table] = list(tables or [])

    def add_table(self, table: Table) -> Table:
        self._tables.append(table)
        return table

    def tables_for_restaurant(self, restaurant_id: int) -> list[Table]:
        return [t for t in self._tables if t.restaurant_id == restaurant_id]


class InMemoryCalendarStore:
    def __init__(
        self,
        opening_hours: list[OpeningHours] | None = None,
        special_periods: list[SpecialPeriod] | None = None,
    ) -> None:
        self._opening_hours: list[OpeningHours] = list(opening_hours or [])
        self._special_periods: list[SpecialPeriod] = list(special_periods or [])

    def set_opening_hours(self, restaurant_id: int, entries: list[OpeningHours]) -> None:
        self._opening_hours = [
            h for h in self._opening_hours if h.restaurant_id != restaurant_id
        ] + list(entries)

    def add_special_period(self, period: SpecialPeriod) -> SpecialPeriod:
        self._special_periods.append(period)
        return period

    def opening_hours(self, restaurant_id: int) -> list[OpeningHours]:
        return [h for h in self._opening_hours if h.restaurant_id == restaurant_id]

    def special_periods(self, restaurant_id: int) -> list[SpecialPeriod]:
        return [p for p in self._special_periods if p.restaurant_id == restaurant_id]


class InMemoryCutOffStore:
    def __init__(self, rules: list[CutOffRule] | None = None) -> None:
        self._rules: list[CutOffRule] = list(rules or [])

    def set_cut_off_rules(self, restaurant_id: int, rules: list[CutOffRule]) -> None:
        self._rules = [
            r for r in self._rules if r.restaurant_id != restaurant_id
        ] + list(rules)

    def cut_off_rules(self, restaurant_id: int) -> list[CutOffRule]:
        return [r for r in self._rules if r.restaurant_id == restaurant_id]


class InMemorySuggestionStore:
    def __init__(self) -> None:
        self._suggestions: dict[int, ReschedulingSuggestion] = {}
        self._ids = count(1)

    def create_suggestion(self, suggestion: ReschedulingSuggestion) -> ReschedulingSuggestion:
        saved = suggestion.model_copy(update={"id": next(self._ids)})
        self._suggestions[saved.id] = saved
        return saved

    def update_suggestion(self, suggestion_id: int, fields: dict[str, Any]) -> ReschedulingSuggestion:
        suggestion = self._suggestions.get(suggestion_id)
        if suggestion is None:
            raise SuggestionNotFoundError(suggestion_id)
        updated = suggestion.model_copy(update=fields)
        self._suggestions[suggestion_id] = updated
        return updated

    def suggestion_by_id(self, suggestion_id: int) -> ReschedulingSuggestion | None:
        return self._suggestions.get(suggestion_id)

    def suggestions_for_booking(self, booking_id: int) -> list[ReschedulingSuggestion]:
        return [
            s for s in self._suggestions.values()
            if s.original_booking_id == booking_id
        ]

    def mark_expired_suggestions(self, before: datetime) -> int:
        """Mark every pending suggestion whose expiry is before *before*."""
        expired = 0
        for suggestion_id, suggestion in list(self._suggestions.items()):
            if suggestion.status == SuggestionStatus.pending and suggestion.expires_at < before:
                self._suggestions[suggestion_id] = suggestion.model_copy(update={
                    "status": SuggestionStatus.expired,
                    "updated_at": before,
                })
                expired += 1
        return expired


class StoreSnapshot(BaseModel):
    tables: list[Table] = []
    bookings: list[Booking] = []
    opening_hours: list[OpeningHours] = []
    special_periods: list[SpecialPeriod] = []
    cut_off_rules: list[CutOffRule] = []


def load_snapshot(path: str | Path) -> StoreSnapshot:
    snapshot = StoreSnapshot.model_validate_json(Path(path).read_text(encoding="utf-8"))
    logger.info(
        "Loaded snapshot from %s: %d tables, %d bookings",
        path, len(snapshot.tables), len(snapshot.bookings),
    )
    return snapshot
