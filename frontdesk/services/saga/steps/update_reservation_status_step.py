"""Step: move a reservation to its next lifecycle status."""

from frontdesk.clients import query as q
from frontdesk.clients.data_store_client import DataStoreClient
from frontdesk.errors import PersistenceError, RecordNotFoundError, StateConflictError
from frontdesk.models.status import ReservationLifecycle
from frontdesk.services.common import store_errors
from frontdesk.services.reservation_queries import RESERVATIONS_TABLE
from frontdesk.services.saga.base_step import SagaStep
from frontdesk.services.saga.context import SagaContext


class UpdateReservationStatusStep(SagaStep):
    """Conditionally update the reservation status.

    The write only matches while the reservation still has the status it
    was read with, so a concurrent change is reported as a state conflict
    instead of being overwritten.
    """

    def __init__(self, store: DataStoreClient):
        super().__init__()
        self.store = store

    async def execute(self, context: SagaContext) -> None:
        if context.previous_status is None:
            raise ValueError("previous_status must be loaded before updating the reservation")

        target = ReservationLifecycle.target_status(context.previous_status, context.action)
        context.target_status = target

        with store_errors("Failed to update reservation", reservation_id=context.reservation_id):
            rows = await self.store.update(
                RESERVATIONS_TABLE,
                {"status": target.value},
                [
                    q.eq("id", context.reservation_id),
                    q.eq("status", context.previous_status),
                ],
            )
            if not rows:
                current = await self.store.select_one(
                    RESERVATIONS_TABLE,
                    columns="id, status",
                    filters=[q.eq("id", context.reservation_id)],
                )

        if not rows:
            if current is None:
                raise RecordNotFoundError(f"Reservation {context.reservation_id} not found")
            status = str(current.get("status"))
            raise StateConflictError(
                f"Reservation {context.reservation_id} was changed by someone else: "
                f"current status is '{status}'",
                current_status=status,
            )

        context.reservation_row = rows[0]
        self.logger.info(
            "Reservation status updated",
            reservation_id=context.reservation_id,
            previous_status=context.previous_status.value,
            status=target.value,
        )

    async def compensate(self, context: SagaContext) -> None:
        with store_errors("Failed to restore reservation status", reservation_id=context.reservation_id):
            rows = await self.store.update(
                RESERVATIONS_TABLE,
                {"status": context.previous_status.value},
                [
                    q.eq("id", context.reservation_id),
                    q.eq("status", context.target_status),
                ],
            )
        if not rows:
            raise PersistenceError(
                f"Reservation {context.reservation_id} changed before its status could be restored"
            )
        self.logger.info(
            "Reservation status restored",
            reservation_id=context.reservation_id,
            status=context.previous_status.value,
        )
