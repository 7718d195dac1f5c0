"""Pydantic models for guests."""

import re
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from frontdesk.models.base import RowModel, blank_to_none

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _check_email(v: Optional[str]) -> Optional[str]:
    email = blank_to_none(v)
    if email is not None and not EMAIL_PATTERN.match(email):
        raise ValueError(f"Invalid email address: {email}")
    return email


class Guest(RowModel):
    """Guest record from the data store."""

    id: str
    name: str
    document: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: bool = True
    archived_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def require_id(cls, v):
        if v is None:
            raise ValueError("field is required")
        return str(v)

    @field_validator("name", mode="before")
    @classmethod
    def parse_name(cls, v):
        return "" if v is None else str(v)


class GuestCreate(BaseModel):
    """Input for creating a guest."""

    name: str
    document: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def require_name(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("Guest name is required")
        return str(v).strip()

    @field_validator("document", "phone", mode="before")
    @classmethod
    def clean_text(cls, v):
        return blank_to_none(v)

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class GuestUpdate(BaseModel):
    """Partial guest update. Only fields explicitly set are written."""

    name: Optional[str] = None
    document: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def require_name(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("Guest name cannot be empty")
        return str(v).strip()

    @field_validator("document", "phone", mode="before")
    @classmethod
    def clean_text(cls, v):
        return blank_to_none(v)

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    def changes(self) -> dict[str, Any]:
        """Fields to write, as JSON-ready values."""
        return self.model_dump(mode="json", exclude_unset=True)
