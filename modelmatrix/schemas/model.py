# modelmatrix/schemas/model.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel, Field


class ModelCreate(SQLModel):
    """
    Payload for listing a new model.

    Backend derives:
      - created_by from the token
      - created_at = now
      - purchased = 0
    """

    # Accepts use_case or useCase
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    name: str = Field(max_length=200)
    framework: str = Field(max_length=50)
    use_case: str = Field(max_length=200)
    image: str | None = None
    description: str | None = None

    @field_validator("name", "framework", "use_case")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ModelUpdate(SQLModel):
    """
    Partial update payload for models.
    All fields are optional; owner, counter and timestamps are not editable.
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    name: str | None = Field(default=None, max_length=200)
    framework: str | None = Field(default=None, max_length=50)
    use_case: str | None = Field(default=None, max_length=200)
    image: str | None = None
    description: str | None = None

    @field_validator("name", "framework", "use_case")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ModelRead(SQLModel):
    """Model representation for clients."""

    id: uuid.UUID
    name: str
    framework: str
    use_case: str
    image: str | None = None
    description: str | None = None
    created_by: str
    purchased: int
    created_at: datetime
