import httpx
import pytest
from httpx import ASGITransport

from app.services.availability import AvailabilityService
from app.services.rescheduling import ReschedulingService
from app.stores import (
    InMemoryBookingStore,
    InMemoryCalendarStore,
    InMemoryCutOffStore,
    InMemorySuggestionStore,
    InMemoryTableStore,
)
from tests.factories import FakeClock, RecordingSink, daily_hours, make_table


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def booking_store():
    return InMemoryBookingStore()


@pytest.fixture
def table_store():
    # Table 5 seats 4, table 8 seats 8
    return InMemoryTableStore([make_table(5, 4), make_table(8, 8)])


@pytest.fixture
def calendar_store():
    return InMemoryCalendarStore(daily_hours())


@pytest.fixture
def cut_off_store():
    return InMemoryCutOffStore()


@pytest.fixture
def suggestion_store():
    return InMemorySuggestionStore()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def availability(booking_store, calendar_store, cut_off_store):
    return AvailabilityService(booking_store, calendar_store, cut_off_store)


@pytest.fixture
def rescheduling(availability, booking_store, table_store, suggestion_store, sink, clock):
    return ReschedulingService(
        availability, booking_store, table_store, suggestion_store, sink,
        clock=clock,
    )


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("DATA_FILE", "")
    monkeypatch.setenv("ACTIVITY_WEBHOOK_URL", "")
    monkeypatch.setenv("HOLIDAY_COUNTRY", "")


@pytest.fixture
async def client(mock_env):
    from app.main import app, lifespan

    async with lifespan(app):
        app.state.calendar_store.set_opening_hours(1, daily_hours())
        app.state.table_store.add_table(make_table(5, 4))
        app.state.table_store.add_table(make_table(8, 8))
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c
