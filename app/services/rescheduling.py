import logging
from collections.abc import Callable
from datetime import date, datetime, time, timedelta, timezone

from app.exceptions.custom import (
    BookingNotFoundError,
    InvalidStateError,
    SuggestionExpiredError,
    SuggestionNotFoundError,
)
from app.mappers.availability import existing_window
from app.mappers.intervals import from_minutes, to_minutes
from app.mappers.slot_candidates import iter_candidates, iter_day_candidates
from app.mappers.suggestion_scorer import (
    rank_candidates,
    score_candidate,
    score_same_day_alternative,
)
from app.schemas.activity import ActivityEvent
from app.schemas.booking import Booking, BookingStatus
from app.schemas.rescheduling import (
    AcceptResult,
    ReasonCode,
    ReschedulingOptions,
    ReschedulingSuggestion,
    ScoredCandidate,
    SuggestionStatus,
)
from app.services.activity import ActivitySink
from app.services.availability import AvailabilityService
from app.stores import BookingStore, SuggestionStore, TableStore

logger = logging.getLogger(__name__)

DEFAULT_REFERENCE_TIME = time(12, 0)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReschedulingService:
    """Generates, ranks, persists and commits rescheduling suggestions.

    Suggestions are advisory: availability is checked again at acceptance,
    inside the restaurant's booking transaction, before the booking moves.
    """

    def __init__(
        self,
        availability: AvailabilityService,
        bookings: BookingStore,
        tables: TableStore,
        suggestions: SuggestionStore,
        activity: ActivitySink,
        *,
        suggestion_ttl_hours: int = 24,
        max_suggestions: int = 5,
        slot_interval: int = 30,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._availability = availability
        self._bookings = bookings
        self._tables = tables
        self._suggestions = suggestions
        self._activity = activity
        self._ttl = timedelta(hours=suggestion_ttl_hours)
        self._max_suggestions = max_suggestions
        self._slot_interval = slot_interval
        self._clock = clock

    # --- generation ---

    def rank(
        self,
        restaurant_id: int,
        original_date: date,
        original_time: time,
        guest_count: int,
        options: ReschedulingOptions | None = None,
        exclude_booking_id: int | None = None,
        duration: int | None = None,
    ) -> list[ScoredCandidate]:
        """Every available candidate, scored and sorted. Nothing is persisted.

        *duration* is the length of the seating being moved; candidates are
        checked and bounded by closing time with it.
        """
        duration = duration or self._availability.service_duration
        options = options or ReschedulingOptions()
        candidates = iter_candidates(
            original_date,
            original_time,
            guest_count,
            self._tables.tables_for_restaurant(restaurant_id),
            options,
            day_hours=lambda day: self._availability.day_hours(restaurant_id, day),
            is_available=self._availability.availability_check(
                restaurant_id, exclude_booking_id, duration,
            ),
            service_duration=duration,
            slot_interval=self._slot_interval,
            is_permitted=self._availability.permission_check(restaurant_id, self._clock()),
        )
        return rank_candidates(
            score_candidate(c, original_date, original_time, guest_count, options)
            for c in candidates
        )

    async def generate_suggestions(
        self,
        restaurant_id: int,
        original_date: date,
        original_time: time,
        guest_count: int,
        reason: ReasonCode,
        options: ReschedulingOptions | None = None,
        original_booking_id: int | None = None,
        duration: int | None = None,
    ) -> list[ReschedulingSuggestion]:
        """Persist the top-ranked candidates as pending suggestions.

        An empty list means no candidate was available in the search window.
        """
        options = options or ReschedulingOptions()
        limit = options.max_suggestions or self._max_suggestions
        ranked = self.rank(
            restaurant_id, original_date, original_time, guest_count, options,
            exclude_booking_id=original_booking_id,
            duration=duration,
        )[:limit]

        now = self._clock()
        saved = [
            self._suggestions.create_suggestion(ReschedulingSuggestion(
                restaurant_id=restaurant_id,
                original_booking_id=original_booking_id,
                original_date=original_date,
                original_time=original_time,
                suggested_date=c.suggested_date,
                suggested_time=c.suggested_time,
                table_id=c.table.id,
                table_number=c.table.number,
                table_capacity=c.table.capacity,
                guest_count=guest_count,
                score=c.score,
                priority=c.priority,
                reason=reason,
                availability=True,
                status=SuggestionStatus.pending,
                created_at=now,
                updated_at=now,
                expires_at=now + self._ttl,
            ))
            for c in ranked
        ]

        if saved:
            logger.info(
                "Generated %d suggestions for restaurant %s (%s %s, reason=%s)",
                len(saved), restaurant_id, original_date, original_time, reason,
            )
        else:
            logger.info(
                "No candidates for restaurant %s (%s %s, guests=%d)",
                restaurant_id, original_date, original_time, guest_count,
            )
        return saved

    async def generate_for_booking(
        self,
        booking_id: int,
        reason: ReasonCode,
        options: ReschedulingOptions | None = None,
    ) -> list[ReschedulingSuggestion]:
        booking = self._bookings.booking_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return await self.generate_suggestions(
            booking.restaurant_id,
            booking.booking_date,
            booking.start_time,
            booking.guest_count,
            reason,
            options,
            original_booking_id=booking.id,
            duration=self._booking_duration(booking),
        )

    def alternatives_for_day(
        self,
        restaurant_id: int,
        day: date,
        guest_count: int,
        exclude_time: time | None = None,
    ) -> list[ScoredCandidate]:
        """Same-day alternatives across the whole open window, best first."""
        hours = self._availability.day_hours(restaurant_id, day)
        if not hours.is_open:
            return []
        candidates = iter_day_candidates(
            day,
            guest_count,
            self._tables.tables_for_restaurant(restaurant_id),
            hours,
            is_available=self._availability.availability_check(restaurant_id),
            exclude_time=exclude_time,
            service_duration=self._availability.service_duration,
            slot_interval=self._slot_interval,
            is_permitted=self._availability.permission_check(restaurant_id, self._clock()),
        )
        reference = exclude_time or DEFAULT_REFERENCE_TIME
        return rank_candidates(score_same_day_alternative(c, reference) for c in candidates)

    # --- lookups ---

    def get_suggestion(self, suggestion_id: int) -> ReschedulingSuggestion:
        suggestion = self._suggestions.suggestion_by_id(suggestion_id)
        if suggestion is None:
            raise SuggestionNotFoundError(suggestion_id)
        return suggestion

    def suggestions_for_booking(self, booking_id: int) -> list[ReschedulingSuggestion]:
        if self._bookings.booking_by_id(booking_id) is None:
            raise BookingNotFoundError(booking_id)
        return self._suggestions.suggestions_for_booking(booking_id)

    # --- state transitions ---

    def _require_pending(self, suggestion_id: int, now: datetime) -> ReschedulingSuggestion:
        suggestion = self.get_suggestion(suggestion_id)
        if suggestion.is_terminal:
            raise InvalidStateError(suggestion_id, suggestion.status)
        if now > suggestion.expires_at:
            self._suggestions.update_suggestion(suggestion_id, {
                "status": SuggestionStatus.expired,
                "updated_at": now,
            })
            logger.info("Suggestion %s expired at %s", suggestion_id, suggestion.expires_at)
            raise SuggestionExpiredError(suggestion_id, suggestion.expires_at)
        return suggestion

    def _moved_booking_fields(
        self, booking: Booking, suggestion: ReschedulingSuggestion,
    ) -> dict:
        fields = {
            "booking_date": suggestion.suggested_date,
            "start_time": suggestion.suggested_time,
            "table_id": suggestion.table_id,
        }
        duration = self._booking_duration(booking)
        if duration is not None:
            fields["end_time"] = from_minutes(to_minutes(suggestion.suggested_time) + duration)
        return fields

    def _booking_duration(self, booking: Booking | None) -> int | None:
        if booking is None or booking.end_time is None:
            return None
        window = existing_window(booking, self._availability.service_duration)
        return window.end - window.start

    async def accept(self, suggestion_id: int, actor: str | None = None) -> AcceptResult:
        """Commit a pending suggestion after re-checking the slot.

        Raises SuggestionNotFoundError, InvalidStateError or
        SuggestionExpiredError. A slot taken since generation is not an
        error: the suggestion is rejected and success=False is returned.
        """
        restaurant_id = self.get_suggestion(suggestion_id).restaurant_id

        async with self._bookings.transaction(restaurant_id):
            now = self._clock()
            suggestion = self._require_pending(suggestion_id, now)

            booking: Booking | None = None
            if suggestion.original_booking_id is not None:
                booking = self._bookings.booking_by_id(suggestion.original_booking_id)
                if booking is None:
                    raise BookingNotFoundError(suggestion.original_booking_id)
                if booking.status == BookingStatus.cancelled:
                    raise InvalidStateError(
                        suggestion_id, booking.status,
                        message=f"Booking {booking.id} was cancelled",
                    )

            still_available = self._availability.is_table_available(
                restaurant_id,
                suggestion.suggested_date,
                suggestion.suggested_time,
                suggestion.table_id,
                duration=self._booking_duration(booking),
                exclude_booking_id=suggestion.original_booking_id,
            )
            if not still_available:
                rejected = self._suggestions.update_suggestion(suggestion_id, {
                    "status": SuggestionStatus.rejected,
                    "availability": False,
                    "updated_at": now,
                })
                logger.info(
                    "Suggestion %s rejected: slot %s %s on table %s no longer available",
                    suggestion_id, suggestion.suggested_date,
                    suggestion.suggested_time, suggestion.table_id,
                )
                return AcceptResult(
                    success=False,
                    suggestion=rejected,
                    message="Suggested time slot is no longer available",
                )

            if booking is not None:
                booking = self._bookings.update_booking(
                    booking.id, self._moved_booking_fields(booking, suggestion),
                )
            accepted = self._suggestions.update_suggestion(suggestion_id, {
                "status": SuggestionStatus.accepted,
                "updated_at": now,
            })

        logger.info("Suggestion %s accepted by %s", suggestion_id, actor)
        await self._record(ActivityEvent(
            restaurant_id=restaurant_id,
            event_type="booking_rescheduled",
            description=(
                f"Booking rescheduled from {accepted.original_date} "
                f"{accepted.original_time:%H:%M} to {accepted.suggested_date} "
                f"{accepted.suggested_time:%H:%M}"
            ),
            actor=actor,
            details={
                "original_booking_id": accepted.original_booking_id,
                "suggestion_id": suggestion_id,
                "table_id": accepted.table_id,
                "reason": accepted.reason,
            },
            occurred_at=now,
        ))

        message = (
            "Booking successfully rescheduled"
            if booking is not None
            else "Suggestion accepted"
        )
        return AcceptResult(success=True, suggestion=accepted, booking=booking, message=message)

    async def reject(self, suggestion_id: int, actor: str | None = None) -> ReschedulingSuggestion:
        restaurant_id = self.get_suggestion(suggestion_id).restaurant_id

        async with self._bookings.transaction(restaurant_id):
            now = self._clock()
            self._require_pending(suggestion_id, now)
            rejected = self._suggestions.update_suggestion(suggestion_id, {
                "status": SuggestionStatus.rejected,
                "updated_at": now,
            })

        logger.info("Suggestion %s rejected by %s", suggestion_id, actor)
        await self._record(ActivityEvent(
            restaurant_id=restaurant_id,
            event_type="rescheduling_rejected",
            description=(
                f"Rescheduling to {rejected.suggested_date} "
                f"{rejected.suggested_time:%H:%M} declined"
            ),
            actor=actor,
            details={
                "original_booking_id": rejected.original_booking_id,
                "suggestion_id": suggestion_id,
            },
            occurred_at=now,
        ))
        return rejected

    def sweep_expired(self) -> int:
        """Mark pending suggestions past their expiry. Safe to repeat."""
        expired = self._suggestions.mark_expired_suggestions(self._clock())
        if expired:
            logger.info("Expired %d rescheduling suggestions", expired)
        return expired

    async def _record(self, event: ActivityEvent) -> None:
        # Best-effort: the booking change already happened
        try:
            await self._activity.record_activity(event)
        except Exception:
            logger.warning(
                "Failed to record %s activity for restaurant %s",
                event.event_type, event.restaurant_id,
            )
