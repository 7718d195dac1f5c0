"""Domain models."""

from frontdesk.models.base import RowModel, parse_payload
from frontdesk.models.guest import Guest, GuestCreate, GuestUpdate
from frontdesk.models.reservation import (
    DailyMovement,
    Reservation,
    ReservationCreate,
    ReservationListItem,
)
from frontdesk.models.room import Room, RoomCreate, RoomReservation, RoomUpdate
from frontdesk.models.status import (
    ReservationAction,
    ReservationLifecycle,
    ReservationStatus,
    RoomStatus,
    RoomType,
)
from frontdesk.models.user import AppUser, AuthUser, Session, UserRole

__all__ = [
    "RowModel",
    "parse_payload",
    "Room",
    "RoomCreate",
    "RoomUpdate",
    "RoomReservation",
    "Guest",
    "GuestCreate",
    "GuestUpdate",
    "Reservation",
    "ReservationCreate",
    "ReservationListItem",
    "DailyMovement",
    "ReservationAction",
    "ReservationLifecycle",
    "ReservationStatus",
    "RoomStatus",
    "RoomType",
    "AppUser",
    "AuthUser",
    "Session",
    "UserRole",
]
