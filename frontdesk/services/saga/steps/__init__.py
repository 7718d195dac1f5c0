"""Saga steps package."""

from .update_reservation_status_step import UpdateReservationStatusStep
from .update_room_status_step import UpdateRoomStatusStep

__all__ = [
    "UpdateReservationStatusStep",
    "UpdateRoomStatusStep",
]
