"""Room registry: list, create, update and archive rooms."""

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
from frontdesk.models.room import Room, RoomCreate, RoomReservation, RoomUpdate
from frontdesk.services.common import TodayProvider, store_errors, today_provider
from frontdesk.services.reservation_queries import (
    RESERVATIONS_TABLE,
    active_reservation_ids,
)

logger = get_logger(__name__)

ROOMS_TABLE = "rooms"
GUESTS_TABLE = "guests"


class RoomRegistry:
    """Service for room records."""

    def __init__(
        self,
        store: DataStoreClient,
        app_settings: Optional[Settings] = None,
        today: Optional[TodayProvider] = None,
    ):
        cfg = app_settings or default_settings
        self.store = store
        self.archive_guard = cfg.frontdesk.archive_room_guard
        self.today = today or today_provider(cfg.frontdesk.timezone)

    async def list_active(self) -> list[Room]:
        """Active rooms ordered by room number."""
        with store_errors("Failed to load rooms"):
            rows = await self.store.select(
                ROOMS_TABLE,
                filters=[q.eq("is_active", True)],
                order=[q.asc("number")],
            )
        rooms = Room.from_rows(rows)
        logger.debug("Loaded rooms", room_count=len(rooms))
        return rooms

    async def get(self, room_id: str) -> Room:
        """Fetch a room by id.

        Raises:
            RecordNotFoundError: If no room has this id
        """
        with store_errors("Failed to load room", room_id=room_id):
            row = await self.store.select_one(ROOMS_TABLE, filters=[q.eq("id", room_id)])
        if row is None:
            raise RecordNotFoundError(f"Room {room_id} not found")
        return Room.from_row(row)

    async def create(self, payload: RoomCreate | dict[str, Any]) -> Room:
        """Create a room.

        Args:
            payload: Room fields; status defaults to available

        Returns:
            The created room

        Raises:
            FrontDeskValidationError: If the input is invalid
            PersistenceError: If the data store rejects the room (e.g. duplicate number)
        """
        room = parse_payload(RoomCreate, payload)
        with store_errors("Failed to create room", number=room.number):
            row = await self.store.insert(ROOMS_TABLE, room.to_row())
        created = Room.from_row(row)
        logger.info("Room created", room_id=created.id, number=created.number)
        return created

    async def update(self, room_id: str, payload: RoomUpdate | dict[str, Any]) -> Optional[Room]:
        """Write the supplied fields of a room.

        Returns:
            The updated room, or None when there was nothing to write

        Raises:
            FrontDeskValidationError: If the id is missing or a field is invalid
            RecordNotFoundError: If no room has this id
        """
        if not room_id:
            raise FrontDeskValidationError({"id": "Room ID is required for update"})
        changes = parse_payload(RoomUpdate, payload).changes()
        if not changes:
            logger.debug("Room update without changes, skipping", room_id=room_id)
            return None

        with store_errors("Failed to update room", room_id=room_id):
            rows = await self.store.update(ROOMS_TABLE, changes, [q.eq("id", room_id)])
        if not rows:
            raise RecordNotFoundError(f"Room {room_id} not found")
        logger.info("Room updated", room_id=room_id, fields=sorted(changes))
        return Room.from_row(rows[0])

    async def archive(self, room_id: str) -> Room:
        """Soft-archive a room. Its reservations are kept.

        Raises:
            HasActiveReservationsError: If the room still has booked or
                checked-in reservations ending today or later
            RecordNotFoundError: If no room has this id
        """
        if self.archive_guard:
            with store_errors("Failed to check room reservations", room_id=room_id):
                active = await active_reservation_ids(self.store, "room_id", room_id, self.today())
            if active:
                logger.warning(
                    "Refusing to archive room with active reservations",
                    room_id=room_id,
                    reservation_ids=active,
                )
                raise HasActiveReservationsError("room", room_id, len(active))

        values = {
            "is_active": False,
            "archived_at": datetime.now(timezone.utc).isoformat(),
        }
        with store_errors("Failed to archive room", room_id=room_id):
            rows = await self.store.update(ROOMS_TABLE, values, [q.eq("id", room_id)])
        if not rows:
            raise RecordNotFoundError(f"Room {room_id} not found")
        logger.info("Room archived", room_id=room_id)
        return Room.from_row(rows[0])

    async def upcoming_reservations(self, room_id: str) -> list[RoomReservation]:
        """Reservations of a room ending today or later, earliest arrival first."""
        if not room_id:
            raise FrontDeskValidationError({"room_id": "Room ID is required"})

        with store_errors("Failed to load reservations", room_id=room_id):
            rows = await self.store.select(
                RESERVATIONS_TABLE,
                columns="id, guest_id, check_in_date, check_out_date, status",
                filters=[
                    q.eq("room_id", room_id),
                    q.gte("check_out_date", self.today()),
                ],
                order=[q.asc("check_in_date")],
            )
        if not rows:
            return []

        guest_ids = sorted({str(row["guest_id"]) for row in rows if row.get("guest_id")})
        guest_names: dict[str, str] = {}
        if guest_ids:
            with store_errors("Failed to load guests", room_id=room_id):
                guests = await self.store.select(
                    GUESTS_TABLE,
                    columns="id, name",
                    filters=[q.in_("id", guest_ids)],
                )
            guest_names = {str(g["id"]): str(g.get("name") or "") for g in guests}

        for row in rows:
            row["guest_name"] = guest_names.get(str(row.get("guest_id")), "")
        return RoomReservation.from_rows(rows)
