import asyncio
import logging
import sys
from contextlib import asynccontextmanager, suppress

import httpx
from fastapi import FastAPI

from app.config import Settings
from app.exceptions.custom import (
    BookingNotFoundError,
    InvalidStateError,
    StoreUnavailableError,
    SuggestionExpiredError,
    SuggestionNotFoundError,
)
from app.exceptions.handlers import (
    invalid_state_error_handler,
    not_found_error_handler,
    store_unavailable_error_handler,
    suggestion_expired_error_handler,
)
from app.routers.availability import router as availability_router
from app.routers.rescheduling import router as rescheduling_router
from app.services.activity import ActivitySink, LoggingActivitySink, WebhookActivitySink
from app.services.availability import AvailabilityService
from app.services.rescheduling import ReschedulingService
from app.stores import (
    InMemoryBookingStore,
    InMemoryCalendarStore,
    InMemoryCutOffStore,
    InMemorySuggestionStore,
    InMemoryTableStore,
    StoreSnapshot,
    load_snapshot,
)

logger = logging.getLogger(__name__)


async def _sweep_periodically(service: ReschedulingService, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            service.sweep_expired()
        except Exception:
            logger.exception("Expired suggestion sweep failed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    snapshot = load_snapshot(settings.data_file) if settings.data_file else StoreSnapshot()

    bookings = InMemoryBookingStore(snapshot.bookings)
    tables = InMemoryTableStore(snapshot.tables)
    calendar = InMemoryCalendarStore(snapshot.opening_hours, snapshot.special_periods)
    cut_offs = InMemoryCutOffStore(snapshot.cut_off_rules)
    suggestions = InMemorySuggestionStore()

    async with httpx.AsyncClient(timeout=10.0) as client:
        activity: ActivitySink = LoggingActivitySink()
        if settings.activity_webhook_url:
            activity = WebhookActivitySink(client, settings.activity_webhook_url)

        availability = AvailabilityService(
            bookings, calendar, cut_offs,
            service_duration=settings.service_duration_minutes,
            turnover_buffer=settings.turnover_buffer_minutes,
            holiday_country=settings.holiday_country,
            timezone=settings.restaurant_timezone,
        )
        rescheduling = ReschedulingService(
            availability, bookings, tables, suggestions, activity,
            suggestion_ttl_hours=settings.suggestion_ttl_hours,
            max_suggestions=settings.max_suggestions,
            slot_interval=settings.slot_interval_minutes,
        )

        app.state.booking_store = bookings
        app.state.table_store = tables
        app.state.calendar_store = calendar
        app.state.cut_off_store = cut_offs
        app.state.suggestion_store = suggestions
        app.state.availability_service = availability
        app.state.rescheduling_service = rescheduling

        sweeper = asyncio.create_task(
            _sweep_periodically(rescheduling, settings.sweep_interval_seconds)
        )
        try:
            yield
        finally:
            sweeper.cancel()
            with suppress(asyncio.CancelledError):
                await sweeper


app = FastAPI(title="Table Rescheduler", lifespan=lifespan)

app.add_exception_handler(BookingNotFoundError, not_found_error_handler)
app.add_exception_handler(SuggestionNotFoundError, not_found_error_handler)
app.add_exception_handler(InvalidStateError, invalid_state_error_handler)
app.add_exception_handler(SuggestionExpiredError, suggestion_expired_error_handler)
app.add_exception_handler(StoreUnavailableError, store_unavailable_error_handler)

app.include_router(availability_router)
app.include_router(rescheduling_router)
