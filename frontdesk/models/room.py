"""Pydantic models for rooms."""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator
from structlog import get_logger

from frontdesk.models.base import RowModel, blank_to_none, coerce_price
from frontdesk.models.status import ReservationStatus, RoomStatus, RoomType

logger = get_logger(__name__)


class Room(RowModel):
    """Room record from the data store."""

    id: str
    number: str
    type: str
    base_price: float = 0.0
    status: RoomStatus = RoomStatus.AVAILABLE
    notes: Optional[str] = None
    is_active: bool = True
    archived_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @field_validator("id", "number", "type", mode="before")
    @classmethod
    def require_text(cls, v):
        """Identifiers arrive as uuids or numbers; keep them as strings."""
        if v is None:
            raise ValueError("field is required")
        return str(v)

    @field_validator("base_price", mode="before")
    @classmethod
    def parse_price(cls, v):
        return coerce_price(v)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        """Unknown statuses fall back to available."""
        try:
            return RoomStatus(v)
        except ValueError:
            logger.warning("Unknown room status, defaulting to available", status=v)
            return RoomStatus.AVAILABLE


class RoomReservation(RowModel):
    """Upcoming reservation of a single room, shown in the room detail view."""

    id: str
    guest_id: Optional[str] = None
    guest_name: str = ""
    check_in_date: date
    check_out_date: date
    status: ReservationStatus = ReservationStatus.BOOKED

    @field_validator("id", mode="before")
    @classmethod
    def require_id(cls, v):
        if v is None:
            raise ValueError("field is required")
        return str(v)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        try:
            return ReservationStatus(v)
        except ValueError:
            return ReservationStatus.BOOKED


class RoomCreate(BaseModel):
    """Input for creating a room."""

    number: str
    type: RoomType
    base_price: float = Field(ge=0)
    status: RoomStatus = RoomStatus.AVAILABLE
    notes: Optional[str] = None

    @field_validator("number", mode="before")
    @classmethod
    def require_number(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("Room number is required")
        return str(v).strip()

    @field_validator("type", mode="before")
    @classmethod
    def require_type(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("Room type is required")
        return str(v).strip().lower()

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v):
        return RoomStatus.AVAILABLE if v is None else v

    @field_validator("notes", mode="before")
    @classmethod
    def clean_notes(cls, v):
        return blank_to_none(v)

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class RoomUpdate(BaseModel):
    """Partial room update. Only fields explicitly set are written."""

    number: Optional[str] = None
    type: Optional[RoomType] = None
    base_price: Optional[float] = Field(default=None, ge=0)
    status: Optional[RoomStatus] = None
    notes: Optional[str] = None

    @field_validator("number", mode="before")
    @classmethod
    def require_number(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("Room number cannot be empty")
        return str(v).strip()

    @field_validator("type", mode="before")
    @classmethod
    def require_type(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("Room type cannot be empty")
        return str(v).strip().lower()

    @field_validator("base_price", "status", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("cannot be null")
        return v

    @field_validator("notes", mode="before")
    @classmethod
    def clean_notes(cls, v):
        return blank_to_none(v)

    def changes(self) -> dict[str, Any]:
        """Fields to write, as JSON-ready values."""
        return self.model_dump(mode="json", exclude_unset=True)
