# modelmatrix/models/model.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class AIModel(SQLModel, table=True):
    """
    Marketplace listing for an AI model.

    Ownership:
      - created_by: email of the user who listed it (identity key)

    Counters:
      - purchased: incremented once per completed purchase, never recomputed
    """

    __tablename__ = "models"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=200,
        index=True,
        description="Display name of the model",
    )

    framework: str = Field(
        max_length=50,
        index=True,
        description="Framework tag, e.g. TensorFlow, PyTorch, ONNX",
    )

    use_case: str = Field(
        max_length=200,
        description="What the model is for, e.g. image classification",
    )

    image: str | None = Field(
        default=None,
        description="Cover image URL",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description",
    )

    created_by: str = Field(
        index=True,
        description="Owner email",
    )

    purchased: int = Field(
        default=0,
        ge=0,
        description="Number of completed purchases",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
        description="Creation timestamp (UTC)",
    )
