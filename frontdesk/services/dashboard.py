"""Composition root: builds the clients and services for one front desk session."""

from typing import Optional

from structlog import get_logger

from frontdesk.clients.auth_client import AuthClient
from frontdesk.clients.data_store_client import DataStoreClient
from frontdesk.clients.redis_session_cache import RedisSessionCache
from frontdesk.config import Settings, settings as default_settings
from frontdesk.services.common import TodayProvider, today_provider
from frontdesk.services.daily_operations import DailyOperations
from frontdesk.services.guest_registry import GuestRegistry
from frontdesk.services.reservation_ledger import ReservationLedger
from frontdesk.services.room_registry import RoomRegistry
from frontdesk.services.session_manager import SessionManager
from frontdesk.services.status_transitions import ReservationTransitions

logger = get_logger(__name__)


class FrontDeskDashboard:
    """Owns the backend clients and hands them to every service.

    Use as an async context manager, or call ``start()`` and ``close()``.
    """

    def __init__(
        self,
        app_settings: Optional[Settings] = None,
        store: Optional[DataStoreClient] = None,
        auth_client: Optional[AuthClient] = None,
        session_cache: Optional[RedisSessionCache] = None,
        today: Optional[TodayProvider] = None,
    ):
        """Initialize the dashboard with all required services."""
        self.settings = app_settings or default_settings
        self.store = store or DataStoreClient(self.settings)
        self.auth_client = auth_client or AuthClient(self.settings)
        if session_cache is None and self.settings.session.cache_enabled:
            session_cache = RedisSessionCache(self.settings)
        self.session_cache = session_cache
        self.today = today or today_provider(self.settings.frontdesk.timezone)

        self.sessions = SessionManager(self.auth_client, self.store, self.session_cache)
        transitions = ReservationTransitions(self.store)
        self.rooms = RoomRegistry(self.store, self.settings, self.today)
        self.guests = GuestRegistry(self.store, self.settings, self.today)
        self.reservations = ReservationLedger(self.store, self.settings, transitions)
        self.operations = DailyOperations(self.store, self.settings, self.today, transitions)

    async def start(self) -> "FrontDeskDashboard":
        """Open the data store connection and restore a cached session.

        Connections opened so far are released if startup fails.
        """
        try:
            await self.store.open()
            await self.sessions.restore()
        except Exception:
            await self.close()
            raise
        logger.info(
            "Front desk dashboard started",
            environment=self.settings.environment,
            signed_in=self.sessions.is_signed_in,
        )
        return self

    async def close(self) -> None:
        """Release all backend connections."""
        await self.store.close()
        await self.auth_client.close()
        if self.session_cache is not None:
            await self.session_cache.close()
        logger.debug("Front desk dashboard closed")

    async def __aenter__(self) -> "FrontDeskDashboard":
        return await self.start()

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
