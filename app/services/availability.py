import logging
from datetime import date, datetime, time, timedelta

from app.exceptions.custom import BookingNotFoundError
from app.mappers.availability import find_double_bookings, is_table_free
from app.mappers.calendar_rules import resolve_day_hours
from app.mappers.cut_off import booking_change_window, get_timezone, is_slot_permitted
from app.mappers.slot_candidates import AvailabilityCheck, PermissionCheck
from app.schemas.booking import Booking, Table
from app.schemas.calendar import ChangeWindow, DayHours
from app.stores import BookingStore, CalendarStore, CutOffStore

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Store-backed calendar, cut-off and table availability checks."""

    def __init__(
        self,
        bookings: BookingStore,
        calendar: CalendarStore,
        cut_offs: CutOffStore,
        *,
        service_duration: int = 120,
        turnover_buffer: int = 60,
        holiday_country: str | None = None,
        timezone: str | None = None,
    ) -> None:
        self._bookings = bookings
        self._calendar = calendar
        self._cut_offs = cut_offs
        self.service_duration = service_duration
        self.turnover_buffer = turnover_buffer
        self._holiday_country = holiday_country or None
        self._tz = get_timezone(timezone)

    def day_hours(self, restaurant_id: int, day: date) -> DayHours:
        return resolve_day_hours(
            day,
            self._calendar.opening_hours(restaurant_id),
            self._calendar.special_periods(restaurant_id),
            holiday_country=self._holiday_country,
        )

    def _bookings_around(self, restaurant_id: int, day: date) -> list[Booking]:
        """Bookings on *day* and the dates either side of it."""
        return [
            booking
            for offset in (-1, 0, 1)
            for booking in self._bookings.bookings_for_restaurant_and_date(
                restaurant_id, day + timedelta(days=offset),
            )
        ]

    def is_table_available(
        self,
        restaurant_id: int,
        day: date,
        start: time,
        table_id: int,
        duration: int | None = None,
        exclude_booking_id: int | None = None,
    ) -> bool:
        return is_table_free(
            self._bookings_around(restaurant_id, day), table_id, day, start,
            duration=duration or self.service_duration,
            buffer=self.turnover_buffer,
            service_duration=self.service_duration,
            exclude_booking_id=exclude_booking_id,
        )

    def availability_check(
        self,
        restaurant_id: int,
        exclude_booking_id: int | None = None,
        duration: int | None = None,
    ) -> AvailabilityCheck:
        """Availability callable for one generation pass.

        Bookings are fetched once per date and reused for every table and
        time that needs them. *duration* is the length of the seating being
        placed; it defaults to the service duration.
        """
        by_day: dict[date, list[Booking]] = {}

        def bookings_on(day: date) -> list[Booking]:
            if day not in by_day:
                by_day[day] = self._bookings.bookings_for_restaurant_and_date(restaurant_id, day)
            return by_day[day]

        def check(day: date, start: time, table: Table) -> bool:
            bookings = [
                booking
                for offset in (-1, 0, 1)
                for booking in bookings_on(day + timedelta(days=offset))
            ]
            return is_table_free(
                bookings, table.id, day, start,
                duration=duration or self.service_duration,
                buffer=self.turnover_buffer,
                service_duration=self.service_duration,
                exclude_booking_id=exclude_booking_id,
            )

        return check

    def is_booking_permitted(
        self, restaurant_id: int, day: date, start: time, now: datetime,
    ) -> bool:
        return is_slot_permitted(
            self._cut_offs.cut_off_rules(restaurant_id), day, start, now, self._tz,
        )

    def permission_check(self, restaurant_id: int, now: datetime) -> PermissionCheck:
        rules = self._cut_offs.cut_off_rules(restaurant_id)

        def check(day: date, start: time) -> bool:
            return is_slot_permitted(rules, day, start, now, self._tz)

        return check

    def change_window(self, booking_id: int, now: datetime) -> ChangeWindow:
        booking = self._bookings.booking_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking_change_window(
            booking, self._cut_offs.cut_off_rules(booking.restaurant_id), now, self._tz,
        )

    def double_bookings(self, restaurant_id: int, day: date) -> list[tuple[Booking, Booking]]:
        pairs = find_double_bookings(
            self._bookings.bookings_for_restaurant_and_date(restaurant_id, day),
            service_duration=self.service_duration,
        )
        if pairs:
            logger.info(
                "Found %d double bookings for restaurant %s on %s",
                len(pairs), restaurant_id, day,
            )
        return pairs
