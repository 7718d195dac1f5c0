"""Guest registry: search, create, update and archive guests."""

from datetime import datetime, timezone
from typing import Any, Optional

from structlog import get_logger

from frontdesk.clients import query as q
from frontdesk.clients.data_store_client import DataStoreClient
from frontdesk.config import Settings, settings as default_settings
from frontdesk.errors import (
    FrontDeskValidationError,
    HasActiveReservationsError,
    RecordNotFoundError,
)
from frontdesk.models.base import parse_payload
from frontdesk.models.guest import Guest, GuestCreate, GuestUpdate
from frontdesk.services.common import TodayProvider, store_errors, today_provider
from frontdesk.services.reservation_queries import active_reservation_ids

logger = get_logger(__name__)

GUESTS_TABLE = "guests"


class GuestRegistry:
    """Service for guest records."""

    def __init__(
        self,
        store: DataStoreClient,
        app_settings: Optional[Settings] = None,
        today: Optional[TodayProvider] = None,
    ):
        cfg = app_settings or default_settings
        self.store = store
        self.today = today or today_provider(cfg.frontdesk.timezone)

    async def list_active(self, search: Optional[str] = None) -> list[Guest]:
        """Active guests, newest first.

        Args:
            search: Optional text matched case-insensitively against name or document
        """
        filters: list = [q.eq("is_active", True)]
        term = (search or "").strip()
        if term:
            filters.append(q.any_of(q.contains("name", term), q.contains("document", term)))

        with store_errors("Failed to load guests", search=term or None):
            rows = await self.store.select(
                GUESTS_TABLE,
                filters=filters,
                order=[q.desc("created_at")],
            )
        return Guest.from_rows(rows)

    async def get(self, guest_id: str) -> Guest:
        with store_errors("Failed to load guest", guest_id=guest_id):
            row = await self.store.select_one(GUESTS_TABLE, filters=[q.eq("id", guest_id)])
        if row is None:
            raise RecordNotFoundError(f"Guest {guest_id} not found")
        return Guest.from_row(row)

    async def create(self, payload: GuestCreate | dict[str, Any]) -> Guest:
        """Create a guest.

        Raises:
            FrontDeskValidationError: If the name is missing or the email is malformed
            PersistenceError: If the data store rejects the guest
        """
        guest = parse_payload(GuestCreate, payload)
        with store_errors("Failed to create guest"):
            row = await self.store.insert(GUESTS_TABLE, guest.to_row())
        created = Guest.from_row(row)
        logger.info("Guest created", guest_id=created.id)
        return created

    async def update(self, guest_id: str, payload: GuestUpdate | dict[str, Any]) -> Optional[Guest]:
        """Write the supplied fields of a guest.

        Returns:
            The updated guest, or None when there was nothing to write
        """
        if not guest_id:
            raise FrontDeskValidationError({"id": "Guest ID is required for update"})
        changes = parse_payload(GuestUpdate, payload).changes()
        if not changes:
            logger.debug("Guest update without changes, skipping", guest_id=guest_id)
            return None

        with store_errors("Failed to update guest", guest_id=guest_id):
            rows = await self.store.update(GUESTS_TABLE, changes, [q.eq("id", guest_id)])
        if not rows:
            raise RecordNotFoundError(f"Guest {guest_id} not found")
        logger.info("Guest updated", guest_id=guest_id, fields=sorted(changes))
        return Guest.from_row(rows[0])

    async def archive(self, guest_id: str) -> Guest:
        """Soft-archive a guest. Their reservations are kept.

        Raises:
            HasActiveReservationsError: If the guest has booked or checked-in
                reservations ending today or later
            RecordNotFoundError: If no guest has this id
        """
        with store_errors("Failed to check guest reservations", guest_id=guest_id):
            active = await active_reservation_ids(self.store, "guest_id", guest_id, self.today())
        if active:
            logger.warning(
                "Refusing to archive guest with active reservations",
                guest_id=guest_id,
                reservation_ids=active,
            )
            raise HasActiveReservationsError("guest", guest_id, len(active))

        values = {
            "is_active": False,
            "archived_at": datetime.now(timezone.utc).isoformat(),
        }
        with store_errors("Failed to archive guest", guest_id=guest_id):
            rows = await self.store.update(GUESTS_TABLE, values, [q.eq("id", guest_id)])
        if not rows:
            raise RecordNotFoundError(f"Guest {guest_id} not found")
        logger.info("Guest archived", guest_id=guest_id)
        return Guest.from_row(rows[0])
