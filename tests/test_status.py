"""Unit tests for the reservation lifecycle table."""

import pytest

from frontdesk.errors import StateConflictError
from frontdesk.models.status import (
    ACTIVE_RESERVATION_STATUSES,
    ReservationAction,
    ReservationLifecycle,
    ReservationStatus,
    RoomStatus,
)


class TestReservationLifecycle:
    """Tests for ReservationLifecycle."""

    @pytest.mark.parametrize(
        "current,action,expected",
        [
            (ReservationStatus.BOOKED, ReservationAction.CHECK_IN, ReservationStatus.CHECKED_IN),
            (ReservationStatus.CHECKED_IN, ReservationAction.CHECK_OUT, ReservationStatus.CHECKED_OUT),
            (ReservationStatus.BOOKED, ReservationAction.CANCEL, ReservationStatus.CANCELLED),
            (ReservationStatus.BOOKED, ReservationAction.NO_SHOW, ReservationStatus.NO_SHOW),
        ],
    )
    def test_allowed_transitions(self, current, action, expected):
        assert ReservationLifecycle.target_status(current, action) == expected

    def test_cancel_after_check_in_is_rejected(self):
        with pytest.raises(StateConflictError) as exc_info:
            ReservationLifecycle.target_status(ReservationStatus.CHECKED_IN, ReservationAction.CANCEL)

        assert exc_info.value.current_status == "checked_in"
        assert "Cannot cancel reservation" in str(exc_info.value)

    def test_check_out_requires_checked_in(self):
        with pytest.raises(StateConflictError, match="current status is 'booked'"):
            ReservationLifecycle.target_status(ReservationStatus.BOOKED, ReservationAction.CHECK_OUT)

    def test_terminal_statuses_allow_no_action(self):
        for status in (
            ReservationStatus.CHECKED_OUT,
            ReservationStatus.CANCELLED,
            ReservationStatus.NO_SHOW,
        ):
            assert ReservationLifecycle.is_terminal(status)
            assert ReservationLifecycle.allowed_actions(status) == []

    def test_allowed_actions_for_booked(self):
        actions = ReservationLifecycle.allowed_actions(ReservationStatus.BOOKED)

        assert set(actions) == {
            ReservationAction.CHECK_IN,
            ReservationAction.CANCEL,
            ReservationAction.NO_SHOW,
        }

    def test_room_effects(self):
        assert ReservationLifecycle.room_effect(ReservationAction.CHECK_IN) == RoomStatus.OCCUPIED
        assert ReservationLifecycle.room_effect(ReservationAction.CHECK_OUT) == RoomStatus.CLEANING
        assert ReservationLifecycle.room_effect(ReservationAction.CANCEL) is None
        assert ReservationLifecycle.room_effect(ReservationAction.NO_SHOW) is None

    def test_active_statuses(self):
        assert ACTIVE_RESERVATION_STATUSES == (ReservationStatus.BOOKED, ReservationStatus.CHECKED_IN)
