"""Today's arrivals and departures, and the front desk actions on them."""

from typing import Optional

from structlog import get_logger

from frontdesk.clients import query as q
from frontdesk.clients.data_store_client import DataStoreClient
from frontdesk.config import Settings, settings as default_settings
from frontdesk.errors import RecordNotFoundError, StateConflictError
from frontdesk.models.reservation import DailyMovement, Reservation, ReservationListItem
from frontdesk.models.room import Room
from frontdesk.models.status import ReservationAction, RoomStatus
from frontdesk.services.common import TodayProvider, store_errors, today_provider
from frontdesk.services.reservation_queries import LIST_COLUMNS, RESERVATIONS_TABLE
from frontdesk.services.status_transitions import ReservationTransitions

logger = get_logger(__name__)

ROOMS_TABLE = "rooms"


class DailyOperations:
    """The front desk's "today" board."""

    def __init__(
        self,
        store: DataStoreClient,
        app_settings: Optional[Settings] = None,
        today: Optional[TodayProvider] = None,
        transitions: Optional[ReservationTransitions] = None,
    ):
        cfg = app_settings or default_settings
        self.store = store
        self.today = today or today_provider(cfg.frontdesk.timezone)
        self.transitions = transitions or ReservationTransitions(store)

    async def _reservations_on(self, column: str, context: str) -> list[ReservationListItem]:
        today = self.today()
        with store_errors(context, day=today.isoformat()):
            rows = await self.store.select(
                RESERVATIONS_TABLE,
                columns=LIST_COLUMNS,
                filters=[q.eq(column, today)],
                order=[q.asc(column)],
            )
        return ReservationListItem.from_rows(rows)

    async def arrivals_today(self) -> list[DailyMovement]:
        """Reservations checking in today."""
        items = await self._reservations_on("check_in_date", "Failed to load arrivals")
        return [DailyMovement.arrival(item) for item in items]

    async def departures_today(self) -> list[DailyMovement]:
        """Reservations checking out today."""
        items = await self._reservations_on("check_out_date", "Failed to load departures")
        return [DailyMovement.departure(item) for item in items]

    async def check_in(self, reservation_id: str) -> Reservation:
        """Check a booked guest in and mark the room occupied."""
        return await self.transitions.apply(reservation_id, ReservationAction.CHECK_IN)

    async def check_out(self, reservation_id: str) -> Reservation:
        """Check a checked-in guest out and send the room to cleaning."""
        return await self.transitions.apply(reservation_id, ReservationAction.CHECK_OUT)

    async def mark_no_show(self, reservation_id: str) -> Reservation:
        """Mark a booked guest as not arrived. The room is not touched."""
        return await self.transitions.apply(reservation_id, ReservationAction.NO_SHOW)

    async def mark_room_clean(self, room_id: str) -> Room:
        """Return a room from cleaning to available.

        A room that is already available is left as is.

        Raises:
            StateConflictError: If the room is occupied or under maintenance
            RecordNotFoundError: If no room has this id
        """
        with store_errors("Failed to mark room as clean", room_id=room_id):
            row = await self.store.select_one(ROOMS_TABLE, filters=[q.eq("id", room_id)])
            if row is None:
                raise RecordNotFoundError(f"Room {room_id} not found")
            room = Room.from_row(row)

            if room.status == RoomStatus.AVAILABLE:
                logger.debug("Room already available", room_id=room_id)
                return room
            if room.status != RoomStatus.CLEANING:
                raise StateConflictError(
                    f"Cannot mark room {room.number} as clean: current status is '{room.status.value}'",
                    current_status=room.status.value,
                )

            rows = await self.store.update(
                ROOMS_TABLE,
                {"status": RoomStatus.AVAILABLE.value},
                [q.eq("id", room_id), q.eq("status", RoomStatus.CLEANING)],
            )

        if not rows:
            raise StateConflictError(
                f"Room {room.number} was changed by someone else before it could be marked clean"
            )
        logger.info("Room marked clean", room_id=room_id, number=room.number)
        return Room.from_row(rows[0])
