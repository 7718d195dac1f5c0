"""Pydantic models for authentication sessions and application users."""

import time
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from frontdesk.models.base import RowModel


class UserRole(str, Enum):
    """Front desk staff roles."""
    ADMIN = "admin"
    RECEPTIONIST = "receptionist"


class AuthUser(BaseModel):
    """Identity returned by the authentication service."""

    id: str
    email: str = ""

    class Config:
        extra = "ignore"

    @field_validator("email", mode="before")
    @classmethod
    def parse_email(cls, v):
        return v or ""


class Session(BaseModel):
    """Signed-in session issued by the authentication service."""

    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: int = 3600
    expires_at: Optional[int] = None
    user: AuthUser

    class Config:
        extra = "ignore"

    @field_validator("expires_at", mode="before")
    @classmethod
    def parse_expires_at(cls, v):
        return int(v) if v is not None else None

    def model_post_init(self, __context) -> None:
        if self.expires_at is None:
            self.expires_at = int(time.time()) + self.expires_in

    def is_expired(self, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        return self.expires_at is not None and now >= self.expires_at

    def seconds_left(self, now: Optional[float] = None) -> int:
        now = time.time() if now is None else now
        return max(0, int((self.expires_at or 0) - now))


class AppUser(RowModel):
    """Application user row linked to an authentication identity."""

    id: str
    auth_user_id: Optional[str] = None
    email: str = ""
    role: UserRole = UserRole.RECEPTIONIST
    created_at: Optional[datetime] = Field(default=None)

    @field_validator("id", mode="before")
    @classmethod
    def require_id(cls, v):
        if v is None:
            raise ValueError("field is required")
        return str(v)

    @field_validator("role", mode="before")
    @classmethod
    def parse_role(cls, v):
        try:
            return UserRole(v)
        except ValueError:
            return UserRole.RECEPTIONIST
