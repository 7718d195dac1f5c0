"""Reservation ledger: list, create and cancel reservations."""

from typing import Any, Optional

from structlog import get_logger

from frontdesk.clients import query as q
from frontdesk.clients.data_store_client import DataStoreClient
from frontdesk.config import Settings, settings as default_settings
from frontdesk.errors import (
    FrontDeskValidationError,
    RecordNotFoundError,
    RoomUnavailableError,
)
from frontdesk.models.base import coerce_price, parse_payload
from frontdesk.models.reservation import (
    Reservation,
    ReservationCreate,
    ReservationListItem,
)
from frontdesk.models.status import ReservationAction, ReservationStatus
from frontdesk.services.common import store_errors
from frontdesk.services.reservation_queries import (
    LIST_COLUMNS,
    RESERVATIONS_TABLE,
    overlapping_reservation_ids,
)
from frontdesk.services.status_transitions import ReservationTransitions

logger = get_logger(__name__)

ROOMS_TABLE = "rooms"
GUESTS_TABLE = "guests"


class ReservationLedger:
    """Service for reservation records."""

    def __init__(
        self,
        store: DataStoreClient,
        app_settings: Optional[Settings] = None,
        transitions: Optional[ReservationTransitions] = None,
    ):
        cfg = app_settings or default_settings
        self.store = store
        self.enforce_overlap_check = cfg.frontdesk.enforce_overlap_check
        self.transitions = transitions or ReservationTransitions(store)

    async def list_all(self) -> list[ReservationListItem]:
        """Every reservation, including finished ones, latest arrival first."""
        with store_errors("Failed to load reservations"):
            rows = await self.store.select(
                RESERVATIONS_TABLE,
                columns=LIST_COLUMNS,
                order=[q.desc("check_in_date")],
            )
        return ReservationListItem.from_rows(rows)

    async def get(self, reservation_id: str) -> Reservation:
        return await self.transitions.load(reservation_id)

    async def create(self, payload: ReservationCreate | dict[str, Any]) -> Reservation:
        """Book a room for a guest.

        The room's current base price is copied onto the reservation and the
        status is always booked.

        Raises:
            FrontDeskValidationError: If a field is missing, the dates are not
                in order or the discount exceeds the price
            RecordNotFoundError: If the room or guest does not exist
            RoomUnavailableError: If the room is already reserved for those dates
            PersistenceError: If the data store call fails
        """
        request = parse_payload(ReservationCreate, payload)

        with store_errors("Failed to load room", room_id=request.room_id):
            room = await self.store.select_one(
                ROOMS_TABLE,
                columns="id, base_price, is_active",
                filters=[q.eq("id", request.room_id)],
            )
        if room is None:
            raise RecordNotFoundError(f"Room {request.room_id} not found")
        if room.get("is_active") is False:
            raise FrontDeskValidationError({"room_id": "Room is archived"})

        with store_errors("Failed to load guest", guest_id=request.guest_id):
            guest = await self.store.select_one(
                GUESTS_TABLE,
                columns="id, is_active",
                filters=[q.eq("id", request.guest_id)],
            )
        if guest is None:
            raise RecordNotFoundError(f"Guest {request.guest_id} not found")
        if guest.get("is_active") is False:
            raise FrontDeskValidationError({"guest_id": "Guest is archived"})

        base_price = float(coerce_price(room.get("base_price")))
        if request.discount > base_price:
            raise FrontDeskValidationError({"discount": "Discount cannot exceed the room price"})

        if self.enforce_overlap_check:
            with store_errors("Failed to check room availability", room_id=request.room_id):
                conflicts = await overlapping_reservation_ids(
                    self.store,
                    request.room_id,
                    request.check_in_date,
                    request.check_out_date,
                )
            if conflicts:
                logger.warning(
                    "Room already reserved for requested dates",
                    room_id=request.room_id,
                    check_in_date=request.check_in_date.isoformat(),
                    check_out_date=request.check_out_date.isoformat(),
                    conflicting_ids=conflicts,
                )
                raise RoomUnavailableError(request.room_id, conflicts)

        row = {
            "room_id": request.room_id,
            "guest_id": request.guest_id,
            "check_in_date": request.check_in_date.isoformat(),
            "check_out_date": request.check_out_date.isoformat(),
            "status": ReservationStatus.BOOKED.value,
            "base_price": base_price,
            "discount": request.discount,
            "final_price": base_price - request.discount,
            "notes": request.notes,
        }
        with store_errors("Failed to create reservation", room_id=request.room_id):
            created_row = await self.store.insert(RESERVATIONS_TABLE, row)

        reservation = Reservation.from_row(created_row)
        logger.info(
            "Reservation created",
            reservation_id=reservation.id,
            room_id=reservation.room_id,
            guest_id=reservation.guest_id,
            check_in_date=reservation.check_in_date.isoformat(),
            check_out_date=reservation.check_out_date.isoformat(),
            final_price=reservation.final_price,
        )
        return reservation

    async def cancel(self, reservation_id: str) -> Reservation:
        """Cancel a booked reservation. The room is not touched.

        Raises:
            StateConflictError: If the reservation is not booked
        """
        return await self.transitions.apply(reservation_id, ReservationAction.CANCEL)
