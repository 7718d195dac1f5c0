"""Pydantic models for reservations and the daily arrivals/departures views."""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from structlog import get_logger

from frontdesk.models.base import RowModel, blank_to_none, coerce_price
from frontdesk.models.status import ReservationStatus

logger = get_logger(__name__)


def _parse_reservation_status(v: Any) -> ReservationStatus:
    """Unknown statuses fall back to booked."""
    try:
        return ReservationStatus(v)
    except ValueError:
        logger.warning("Unknown reservation status, defaulting to booked", status=v)
        return ReservationStatus.BOOKED


def _require_id(v: Any) -> str:
    if v is None or v == "":
        raise ValueError("field is required")
    return str(v)


class Reservation(RowModel):
    """Reservation record from the data store."""

    id: str
    room_id: str
    guest_id: str
    check_in_date: date
    check_out_date: date
    status: ReservationStatus = ReservationStatus.BOOKED
    base_price: float = 0.0
    discount: float = 0.0
    final_price: float = 0.0
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("id", "room_id", "guest_id", mode="before")
    @classmethod
    def require_ids(cls, v):
        return _require_id(v)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        return _parse_reservation_status(v)

    @field_validator("base_price", "discount", "final_price", mode="before")
    @classmethod
    def parse_prices(cls, v):
        return coerce_price(v)

    @model_validator(mode="after")
    def check_date_range(self):
        if self.check_out_date <= self.check_in_date:
            raise ValueError("check_out_date must be after check_in_date")
        return self

    @property
    def nights(self) -> int:
        return (self.check_out_date - self.check_in_date).days


class ReservationListItem(RowModel):
    """Reservation joined with its room number and guest name for display.

    Accepts rows with embedded ``rooms`` / ``guests`` objects as returned by
    the data store's foreign key joins.
    """

    id: str
    room_id: Optional[str] = None
    guest_id: Optional[str] = None
    room_number: str = ""
    guest_name: str = ""
    check_in_date: date
    check_out_date: date
    status: ReservationStatus = ReservationStatus.BOOKED
    final_price: float = 0.0

    @model_validator(mode="before")
    @classmethod
    def flatten_joins(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        room = data.pop("rooms", None)
        guest = data.pop("guests", None)
        if isinstance(room, dict) and "room_number" not in data:
            data["room_number"] = room.get("number") or ""
        if isinstance(guest, dict) and "guest_name" not in data:
            data["guest_name"] = guest.get("name") or ""
        return data

    @field_validator("id", mode="before")
    @classmethod
    def require_id(cls, v):
        return _require_id(v)

    @field_validator("room_id", "guest_id", mode="before")
    @classmethod
    def optional_ids(cls, v):
        return None if v is None else str(v)

    @field_validator("room_number", "guest_name", mode="before")
    @classmethod
    def parse_text(cls, v):
        return "" if v is None else str(v)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        return _parse_reservation_status(v)

    @field_validator("final_price", mode="before")
    @classmethod
    def parse_price(cls, v):
        return coerce_price(v)


class DailyMovement(BaseModel):
    """An arrival or departure on the front desk's "today" board."""

    reservation_id: str
    room_id: str
    room_number: str
    guest_name: str
    movement_date: date
    status: ReservationStatus

    @classmethod
    def arrival(cls, item: ReservationListItem) -> "DailyMovement":
        return cls(
            reservation_id=item.id,
            room_id=item.room_id or "",
            room_number=item.room_number,
            guest_name=item.guest_name,
            movement_date=item.check_in_date,
            status=item.status,
        )

    @classmethod
    def departure(cls, item: ReservationListItem) -> "DailyMovement":
        return cls(
            reservation_id=item.id,
            room_id=item.room_id or "",
            room_number=item.room_number,
            guest_name=item.guest_name,
            movement_date=item.check_out_date,
            status=item.status,
        )


class ReservationCreate(BaseModel):
    """Input for creating a reservation.

    Any status supplied by the caller is ignored: new reservations always
    start as booked. Prices come from the room, not from the caller.
    """

    room_id: str
    guest_id: str
    check_in_date: date
    check_out_date: date
    discount: float = Field(default=0.0, ge=0)
    notes: Optional[str] = None

    class Config:
        extra = "ignore"

    @field_validator("room_id", "guest_id", mode="before")
    @classmethod
    def require_reference(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("is required")
        return str(v).strip()

    @field_validator("check_in_date", "check_out_date", mode="before")
    @classmethod
    def require_date(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("date is required")
        return v

    @field_validator("discount", mode="before")
    @classmethod
    def default_discount(cls, v):
        return 0.0 if v is None else v

    @field_validator("notes", mode="before")
    @classmethod
    def clean_notes(cls, v):
        return blank_to_none(v)

    @model_validator(mode="after")
    def check_date_range(self):
        # ISO dates order lexically the same way they order chronologically
        if self.check_out_date.isoformat() <= self.check_in_date.isoformat():
            raise ValueError("check_out_date must be after check_in_date")
        return self
