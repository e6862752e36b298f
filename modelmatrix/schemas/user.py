# modelmatrix/schemas/user.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel, Field

# App-level roles. Anonymous callers have no row.
Role = Literal["user", "admin"]


class UserCreate(SQLModel):
    """
    Payload sent by the client after every sign-in.

    Upserted by email: the first call inserts, later calls refresh the
    profile fields and last_login. Role is never taken from the payload.
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    email: EmailStr
    name: str | None = Field(default=None, max_length=100)
    photo_url: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class UserRead(SQLModel):
    """Response schema returned to clients."""

    id: uuid.UUID
    email: str
    name: str | None = None
    photo_url: str | None = None
    role: Role
    created_at: datetime
    last_login: datetime


class UserUpdate(SQLModel):
    """
    Partial profile update for the owner.
    Email and role are not editable here.
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    name: str | None = Field(default=None, max_length=100)
    photo_url: str | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v
