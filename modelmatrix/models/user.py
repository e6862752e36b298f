# modelmatrix/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Persistent user profile.

    Identity:
      - email is the identity key used across the app
        (models.created_by, purchases.purchased_by)

    Role:
      - "user" | "admin"
      - "admin" must be granted manually in the store.

    Passwords live with the identity provider; this table only mirrors
    email, profile fields and the application role.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Email from the identity provider",
    )

    name: str | None = Field(
        default=None,
        max_length=100,
        description="Display name",
    )

    photo_url: str | None = Field(
        default=None,
        description="Avatar URL",
    )

    # Application role
    role: str = Field(
        default="user",
        index=True,
        description="Application role: user | admin",
    )

    # Set once on first insert
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    # Refreshed on every sign-in
    last_login: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last sign-in timestamp (UTC)",
    )
