"""Tests for the status transition saga and its compensation."""

from unittest.mock import AsyncMock

import pytest

from frontdesk.errors import PartialUpdateError, PersistenceError, StateConflictError
from frontdesk.models.status import ReservationAction, ReservationStatus
from frontdesk.services.saga import Saga, SagaContext, SagaStep
from tests.fakes import make_reservation


class RecordingStep(SagaStep):
    """Step that appends to a shared log, optionally failing."""

    def __init__(self, name, log, fail=False, fail_compensation=False):
        super().__init__(name)
        self.log = log
        self.fail = fail
        self.fail_compensation = fail_compensation

    async def execute(self, context):
        if self.fail:
            raise PersistenceError(f"{self.name} failed")
        self.log.append(f"execute:{self.name}")

    async def compensate(self, context):
        if self.fail_compensation:
            raise PersistenceError(f"{self.name} rollback failed")
        self.log.append(f"compensate:{self.name}")


def make_context():
    return SagaContext("res-1", ReservationAction.CHECK_IN, room_id="room-101")


class TestSaga:
    """Tests for Saga."""

    @pytest.mark.asyncio
    async def test_all_steps_succeed(self):
        log = []
        saga = Saga("test", [RecordingStep("a", log), RecordingStep("b", log)])

        context = await saga.execute(make_context())

        assert context.success is True
        assert log == ["execute:a", "execute:b"]
        assert context.completed_steps == ["a", "b"]
        assert saga.get_step_names() == ["a", "b"]

    @pytest.mark.asyncio
    async def test_failure_compensates_in_reverse(self):
        log = []
        saga = Saga(
            "test",
            [RecordingStep("a", log), RecordingStep("b", log), RecordingStep("c", log, fail=True)],
        )
        context = make_context()

        with pytest.raises(PersistenceError, match="c failed"):
            await saga.execute(context)

        assert log == ["execute:a", "execute:b", "compensate:b", "compensate:a"]
        assert context.success is False
        assert context.compensated_steps == ["b", "a"]
        assert context.errors[0]["step"] == "c"

    @pytest.mark.asyncio
    async def test_failed_compensation_raises_partial_update(self):
        log = []
        saga = Saga(
            "test",
            [RecordingStep("a", log, fail_compensation=True), RecordingStep("b", log, fail=True)],
        )

        with pytest.raises(PartialUpdateError) as exc_info:
            await saga.execute(make_context())

        assert exc_info.value.completed_steps == ["a"]
        assert "rollback of a also failed" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_first_step_failure_needs_no_compensation(self):
        step = RecordingStep("a", [], fail=True)
        step.compensate = AsyncMock()

        with pytest.raises(PersistenceError):
            await Saga("test", [step]).execute(make_context())

        step.compensate.assert_not_called()


class TestReservationTransitions:
    """Saga behaviour against the store."""

    @pytest.mark.asyncio
    async def test_room_failure_restores_reservation(self, store, transitions):
        store.rows("reservations").append(make_reservation())
        store.fail("update", "rooms")

        with pytest.raises(PersistenceError, match="Failed to update room"):
            await transitions.apply("res-1", ReservationAction.CHECK_IN)

        assert store.find("reservations", "res-1")["status"] == "booked"
        assert store.find("rooms", "room-101")["status"] == "available"

    @pytest.mark.asyncio
    async def test_room_and_rollback_failure(self, store, transitions):
        store.rows("reservations").append(make_reservation())
        store.fail("update", "rooms")
        store.fail("update", "reservations", after=1)

        with pytest.raises(PartialUpdateError) as exc_info:
            await transitions.apply("res-1", ReservationAction.CHECK_IN)

        assert exc_info.value.completed_steps == ["UpdateReservationStatusStep"]
        assert store.find("reservations", "res-1")["status"] == "checked_in"

    @pytest.mark.asyncio
    async def test_concurrent_change_detected(self, store, transitions):
        store.rows("reservations").append(make_reservation())
        real_update = store.update

        async def update_after_someone_else(table, values, filters):
            # Another desk cancels the reservation between our read and write
            store.find("reservations", "res-1")["status"] = "cancelled"
            return await real_update(table, values, filters)

        store.update = update_after_someone_else

        with pytest.raises(StateConflictError, match="changed by someone else") as exc_info:
            await transitions.apply("res-1", ReservationAction.CHECK_IN)

        assert exc_info.value.current_status == "cancelled"
        assert store.find("rooms", "room-101")["status"] == "available"

    def test_build_saga_steps_follow_room_effect(self, transitions):
        saga = transitions.build_saga(ReservationAction.CHECK_IN)

        assert saga.get_step_names() == ["UpdateReservationStatusStep", "UpdateRoomStatusStep"]
        assert transitions.build_saga(ReservationAction.CANCEL).get_step_names() == [
            "UpdateReservationStatusStep"
        ]

    def test_context_results(self):
        context = make_context()
        context.previous_status = ReservationStatus.BOOKED
        context.target_status = ReservationStatus.CHECKED_IN

        results = context.get_results()

        assert results["action"] == "check_in"
        assert results["previous_status"] == "booked"
        assert results["status"] == "checked_in"
        assert results["success"] is False
