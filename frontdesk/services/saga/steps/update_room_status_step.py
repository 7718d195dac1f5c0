"""Step: apply the room status driven by a reservation transition."""

from frontdesk.clients import query as q
from frontdesk.clients.data_store_client import DataStoreClient
from frontdesk.errors import PersistenceError, RecordNotFoundError
from frontdesk.models.status import RoomStatus
from frontdesk.services.common import store_errors
from frontdesk.services.saga.base_step import SagaStep
from frontdesk.services.saga.context import SagaContext

ROOMS_TABLE = "rooms"


class UpdateRoomStatusStep(SagaStep):
    """Set the room to the status the action drives (occupied, cleaning)."""

    def __init__(self, store: DataStoreClient):
        super().__init__()
        self.store = store

    async def execute(self, context: SagaContext) -> None:
        if context.room_id is None or context.target_room_status is None:
            raise ValueError("room_id and target_room_status must be set before updating the room")

        with store_errors("Failed to update room", room_id=context.room_id):
            current = await self.store.select_one(
                ROOMS_TABLE,
                columns="id, status",
                filters=[q.eq("id", context.room_id)],
            )
            if current is None:
                raise RecordNotFoundError(f"Room {context.room_id} not found")
            try:
                context.previous_room_status = RoomStatus(current.get("status"))
            except ValueError:
                context.previous_room_status = RoomStatus.AVAILABLE

            rows = await self.store.update(
                ROOMS_TABLE,
                {"status": context.target_room_status.value},
                [q.eq("id", context.room_id)],
            )

        if not rows:
            raise RecordNotFoundError(f"Room {context.room_id} not found")

        self.logger.info(
            "Room status updated",
            room_id=context.room_id,
            previous_status=context.previous_room_status.value,
            status=context.target_room_status.value,
        )

    async def compensate(self, context: SagaContext) -> None:
        with store_errors("Failed to restore room status", room_id=context.room_id):
            rows = await self.store.update(
                ROOMS_TABLE,
                {"status": context.previous_room_status.value},
                [
                    q.eq("id", context.room_id),
                    q.eq("status", context.target_room_status),
                ],
            )
        if not rows:
            raise PersistenceError(f"Room {context.room_id} changed before its status could be restored")
