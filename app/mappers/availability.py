"""Table availability with turnover buffer, and double-booking detection.

Pure functions over already-fetched bookings.
"""

from collections.abc import Iterable
from datetime import date, time
from itertools import combinations

from app.mappers.intervals import (
    Window,
    booking_window,
    buffered,
    shifted,
    to_minutes,
    windows_overlap,
)
from app.schemas.booking import Booking, BookingStatus

DEFAULT_SERVICE_DURATION = 120
DEFAULT_TURNOVER_BUFFER = 60


def existing_window(booking: Booking, service_duration: int) -> Window:
    return booking_window(booking.start_time, booking.end_time, service_duration)


def conflicting_bookings(
    bookings: Iterable[Booking],
    table_id: int,
    day: date,
    start: time,
    duration: int = DEFAULT_SERVICE_DURATION,
    buffer: int = DEFAULT_TURNOVER_BUFFER,
    service_duration: int = DEFAULT_SERVICE_DURATION,
    exclude_booking_id: int | None = None,
) -> list[Booking]:
    """Bookings on *table_id* whose buffered window overlaps the request.

    Each existing booking is padded by the turnover buffer on both sides,
    so consecutive seatings on a table are at least *buffer* minutes apart.
    Bookings on the dates either side of *day* count too, for windows that
    cross midnight. Cancelled bookings and *exclude_booking_id* (the
    booking being moved) never conflict.
    """
    requested = Window(to_minutes(start), to_minutes(start) + duration)
    conflicts = []
    for booking in bookings:
        days_apart = (booking.booking_date - day).days
        if booking.table_id != table_id or abs(days_apart) > 1:
            continue
        if booking.status == BookingStatus.cancelled:
            continue
        if exclude_booking_id is not None and booking.id == exclude_booking_id:
            continue
        existing = buffered(existing_window(booking, service_duration), buffer)
        if windows_overlap(requested, shifted(existing, days_apart)):
            conflicts.append(booking)
    return conflicts


def is_table_free(
    bookings: Iterable[Booking],
    table_id: int,
    day: date,
    start: time,
    duration: int = DEFAULT_SERVICE_DURATION,
    buffer: int = DEFAULT_TURNOVER_BUFFER,
    service_duration: int = DEFAULT_SERVICE_DURATION,
    exclude_booking_id: int | None = None,
) -> bool:
    return not conflicting_bookings(
        bookings, table_id, day, start,
        duration=duration,
        buffer=buffer,
        service_duration=service_duration,
        exclude_booking_id=exclude_booking_id,
    )


def find_double_bookings(
    bookings: Iterable[Booking],
    service_duration: int = DEFAULT_SERVICE_DURATION,
) -> list[tuple[Booking, Booking]]:
    """Pairs of confirmed bookings sharing a table and date with overlapping times.

    No turnover buffer: only real double bookings are reported.
    """
    by_table: dict[tuple[int, date], list[Booking]] = {}
    for booking in bookings:
        if booking.table_id is None or booking.status != BookingStatus.confirmed:
            continue
        by_table.setdefault((booking.table_id, booking.booking_date), []).append(booking)

    pairs: list[tuple[Booking, Booking]] = []
    for table_bookings in by_table.values():
        for first, second in combinations(table_bookings, 2):
            if windows_overlap(
                existing_window(first, service_duration),
                existing_window(second, service_duration),
            ):
                pairs.append((first, second))
    return pairs
