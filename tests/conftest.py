import pytest

from frontdesk.config.logging import configure_logging
from frontdesk.config.settings import FrontDeskSettings, Settings
from frontdesk.services import (
    DailyOperations,
    GuestRegistry,
    ReservationLedger,
    ReservationTransitions,
    RoomRegistry,
)
from tests.fakes import TODAY, FakeStore, make_guest, make_room


@pytest.fixture(autouse=True, scope="session")
def app_logging():
    """Route structlog through the stdlib handlers the CLI uses."""
    configure_logging()


@pytest.fixture
def app_settings():
    """Settings with the business rules at their defaults."""
    return Settings(frontdesk=FrontDeskSettings(timezone="UTC"))


@pytest.fixture
def today():
    return lambda: TODAY


@pytest.fixture
def store():
    """Store seeded with room 101 and guest Jane Doe."""
    return FakeStore({"rooms": [make_room()], "guests": [make_guest()], "reservations": []})


@pytest.fixture
def transitions(store):
    return ReservationTransitions(store)


@pytest.fixture
def rooms(store, app_settings, today):
    return RoomRegistry(store, app_settings, today)


@pytest.fixture
def guests(store, app_settings, today):
    return GuestRegistry(store, app_settings, today)


@pytest.fixture
def ledger(store, app_settings, transitions):
    return ReservationLedger(store, app_settings, transitions)


@pytest.fixture
def operations(store, app_settings, today, transitions):
    return DailyOperations(store, app_settings, today, transitions)
