"""Applies reservation lifecycle actions, including the room writes they drive."""

from structlog import get_logger

from frontdesk.clients import query as q
from frontdesk.clients.data_store_client import DataStoreClient
from frontdesk.errors import RecordNotFoundError
from frontdesk.models.reservation import Reservation
from frontdesk.models.status import ReservationAction, ReservationLifecycle
from frontdesk.services.common import store_errors
from frontdesk.services.reservation_queries import RESERVATIONS_TABLE
from frontdesk.services.saga import Saga, SagaContext, SagaStep
from frontdesk.services.saga.steps import UpdateReservationStatusStep, UpdateRoomStatusStep

logger = get_logger(__name__)


class ReservationTransitions:
    """Runs lifecycle actions as sagas.

    Actions that touch the room (check-in, check-out) update the
    reservation first and the room second; if the room write fails the
    reservation is put back to its previous status.
    """

    def __init__(self, store: DataStoreClient):
        self.store = store

    async def load(self, reservation_id: str) -> Reservation:
        """Fetch a reservation by id.

        Raises:
            RecordNotFoundError: If no reservation has this id
            PersistenceError: If the data store call fails
        """
        with store_errors("Failed to load reservation", reservation_id=reservation_id):
            row = await self.store.select_one(
                RESERVATIONS_TABLE,
                filters=[q.eq("id", reservation_id)],
            )
        if row is None:
            raise RecordNotFoundError(f"Reservation {reservation_id} not found")
        return Reservation.from_row(row)

    def build_saga(self, action: ReservationAction) -> Saga:
        steps: list[SagaStep] = [UpdateReservationStatusStep(self.store)]
        if ReservationLifecycle.room_effect(action) is not None:
            steps.append(UpdateRoomStatusStep(self.store))
        return Saga(f"reservation-{action.value}", steps)

    async def apply(self, reservation_id: str, action: ReservationAction) -> Reservation:
        """Apply an action to a reservation.

        Args:
            reservation_id: Reservation to transition
            action: Lifecycle action

        Returns:
            The reservation as stored after the transition

        Raises:
            StateConflictError: If the action is not allowed from the current status
            RecordNotFoundError: If the reservation or its room does not exist
            PersistenceError: If a write fails (after rolling back earlier writes)
            PartialUpdateError: If a write fails and the rollback fails too
        """
        reservation = await self.load(reservation_id)

        # Reject invalid transitions before any write is attempted
        ReservationLifecycle.target_status(reservation.status, action)

        room_status = ReservationLifecycle.room_effect(action)
        context = SagaContext(
            reservation_id=reservation.id,
            action=action,
            room_id=reservation.room_id if room_status is not None else None,
        )
        context.previous_status = reservation.status
        context.target_room_status = room_status

        await self.build_saga(action).execute(context)

        logger.info("Reservation transition applied", **context.get_results())
        return Reservation.from_row(context.reservation_row)
