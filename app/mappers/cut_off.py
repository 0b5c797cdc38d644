"""Lead-time (cut-off) rules for placing and changing bookings.

Pure functions. Target datetimes are naive restaurant-local wall-clock
values; an aware *now* is converted to the restaurant time zone first.
"""

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.schemas.booking import Booking
from app.schemas.calendar import ChangeWindow, CutOffRule

DEFAULT_CHANGE_LEAD_HOURS = 2


def get_timezone(name: str | None) -> ZoneInfo:
    """Return ZoneInfo for an IANA name. Falls back to UTC for empty or unknown names."""
    if not name:
        return ZoneInfo("UTC")
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def to_local(now: datetime, tz: ZoneInfo) -> datetime:
    """Naive local wall-clock time for *now* in *tz*."""
    if now.tzinfo is None:
        return now
    return now.astimezone(tz).replace(tzinfo=None)


def rule_for_weekday(
    rules: Iterable[CutOffRule], day_of_week: int,
) -> CutOffRule | None:
    for rule in rules:
        if rule.day_of_week == day_of_week:
            return rule
    return None


def lead_hours_for(rules: Iterable[CutOffRule], day_of_week: int) -> int:
    """Lead time in hours for a weekday; 0 when no rule or disabled."""
    rule = rule_for_weekday(rules, day_of_week)
    if rule is None or not rule.lead_hours:
        return 0
    return rule.lead_hours


def is_booking_permitted(
    rules: Iterable[CutOffRule],
    target: datetime,
    now: datetime,
    tz: ZoneInfo | None = None,
) -> bool:
    """True if a booking starting at *target* may still be placed at *now*.

    Permitted only when target > now + lead hours for the target weekday.
    """
    lead = lead_hours_for(rules, target.weekday())
    if lead == 0:
        return True
    local_now = to_local(now, tz or ZoneInfo("UTC"))
    return target > local_now + timedelta(hours=lead)


def is_slot_permitted(
    rules: Iterable[CutOffRule],
    day: date,
    start: time,
    now: datetime,
    tz: ZoneInfo | None = None,
) -> bool:
    return is_booking_permitted(rules, datetime.combine(day, start), now, tz)


def booking_change_window(
    booking: Booking,
    rules: Iterable[CutOffRule],
    now: datetime,
    tz: ZoneInfo | None = None,
    default_lead_hours: int = DEFAULT_CHANGE_LEAD_HOURS,
) -> ChangeWindow:
    """Whether the guest may still modify or cancel *booking*.

    Changes close *lead* hours before the booking starts; without a rule
    for the weekday the default lead time applies.
    """
    start = datetime.combine(booking.booking_date, booking.start_time)
    rule = rule_for_weekday(rules, booking.booking_date.weekday())
    lead = rule.lead_hours if rule is not None and rule.lead_hours else default_lead_hours
    deadline = start - timedelta(hours=lead)
    allowed = to_local(now, tz or ZoneInfo("UTC")) < deadline
    return ChangeWindow(
        can_modify=allowed,
        can_cancel=allowed,
        cut_off_hours=lead,
        deadline=deadline,
    )
