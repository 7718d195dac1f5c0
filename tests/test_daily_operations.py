"""Tests for DailyOperations: today's board and the check-in/out lifecycle."""

from datetime import date

import pytest

from frontdesk.errors import RecordNotFoundError, StateConflictError
from frontdesk.models.status import ReservationStatus, RoomStatus
from tests.fakes import make_guest, make_reservation, make_room


class TestTodayBoard:
    """Tests for arrivals and departures."""

    @pytest.mark.asyncio
    async def test_arrivals_today(self, store, operations):
        store.rows("rooms").append(make_room("room-102", "102"))
        store.rows("guests").append(make_guest("guest-2", "John Smith"))
        store.rows("reservations").extend(
            [
                make_reservation("res-1", check_in="2025-03-01", check_out="2025-03-03"),
                make_reservation(
                    "res-2", room_id="room-102", guest_id="guest-2",
                    check_in="2025-03-01", check_out="2025-03-02",
                ),
                make_reservation("res-3", check_in="2025-03-05", check_out="2025-03-07"),
            ]
        )

        arrivals = await operations.arrivals_today()

        assert {(a.reservation_id, a.room_number, a.guest_name) for a in arrivals} == {
            ("res-1", "101", "Jane Doe"),
            ("res-2", "102", "John Smith"),
        }
        assert all(a.movement_date == date(2025, 3, 1) for a in arrivals)

    @pytest.mark.asyncio
    async def test_departures_today(self, store, operations):
        store.rows("reservations").extend(
            [
                make_reservation(
                    "res-1", check_in="2025-02-27", check_out="2025-03-01", status="checked_in"
                ),
                make_reservation("res-2", check_in="2025-03-01", check_out="2025-03-03"),
            ]
        )

        departures = await operations.departures_today()

        assert [(d.reservation_id, d.status) for d in departures] == [
            ("res-1", ReservationStatus.CHECKED_IN)
        ]

    @pytest.mark.asyncio
    async def test_empty_board(self, operations):
        assert await operations.arrivals_today() == []
        assert await operations.departures_today() == []


class TestLifecycle:
    """Check-in, check-out, no-show and housekeeping."""

    @pytest.mark.asyncio
    async def test_check_in_occupies_room(self, store, operations):
        store.rows("reservations").append(make_reservation())

        reservation = await operations.check_in("res-1")

        assert reservation.status == ReservationStatus.CHECKED_IN
        assert store.find("reservations", "res-1")["status"] == "checked_in"
        assert store.find("rooms", "room-101")["status"] == RoomStatus.OCCUPIED.value

    @pytest.mark.asyncio
    async def test_check_out_then_mark_clean(self, store, operations):
        store.rows("reservations").append(make_reservation())
        await operations.check_in("res-1")

        reservation = await operations.check_out("res-1")

        assert reservation.status == ReservationStatus.CHECKED_OUT
        assert store.find("rooms", "room-101")["status"] == "cleaning"

        room = await operations.mark_room_clean("room-101")

        assert room.status == RoomStatus.AVAILABLE
        assert store.find("rooms", "room-101")["status"] == "available"

    @pytest.mark.asyncio
    async def test_check_out_requires_check_in(self, store, operations):
        store.rows("reservations").append(make_reservation())

        with pytest.raises(StateConflictError, match="current status is 'booked'"):
            await operations.check_out("res-1")

        assert store.find("rooms", "room-101")["status"] == "available"

    @pytest.mark.asyncio
    async def test_check_in_twice_rejected(self, store, operations):
        store.rows("reservations").append(make_reservation(status="checked_in"))

        with pytest.raises(StateConflictError):
            await operations.check_in("res-1")

        assert store.count("update", "rooms") == 0

    @pytest.mark.asyncio
    async def test_no_show_leaves_room_untouched(self, store, operations):
        store.rows("reservations").append(make_reservation())

        reservation = await operations.mark_no_show("res-1")

        assert reservation.status == ReservationStatus.NO_SHOW
        assert store.count("update", "rooms") == 0

    @pytest.mark.asyncio
    async def test_check_in_unknown_reservation(self, operations):
        with pytest.raises(RecordNotFoundError):
            await operations.check_in("res-404")

    @pytest.mark.asyncio
    async def test_mark_clean_when_available_is_noop(self, store, operations):
        room = await operations.mark_room_clean("room-101")

        assert room.status == RoomStatus.AVAILABLE
        assert store.count("update", "rooms") == 0

    @pytest.mark.asyncio
    async def test_mark_clean_occupied_room_rejected(self, store, operations):
        store.find("rooms", "room-101")["status"] = "occupied"

        with pytest.raises(StateConflictError) as exc_info:
            await operations.mark_room_clean("room-101")

        assert exc_info.value.current_status == "occupied"
        assert store.find("rooms", "room-101")["status"] == "occupied"

    @pytest.mark.asyncio
    async def test_mark_clean_unknown_room(self, operations):
        with pytest.raises(RecordNotFoundError):
            await operations.mark_room_clean("room-404")
