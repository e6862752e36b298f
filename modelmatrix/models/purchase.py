# modelmatrix/models/purchase.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field

PURCHASE_PENDING = "pending"
PURCHASE_COMPLETED = "completed"
PURCHASE_PENDING_RECONCILIATION = "pending_reconciliation"


class Purchase(SQLModel, table=True):
    """
    One purchase of one model by one buyer.

    Model fields are copied at write time, so the record still reads
    correctly after the model is edited or deleted.

    status lifecycle:
      pending -> completed
      pending -> pending_reconciliation -> completed (admin reconcile)
    """

    __tablename__ = "purchases"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    # Reference only; no FK so purchases outlive deleted models
    model_id: uuid.UUID = Field(index=True)

    model_name: str
    framework: str
    use_case: str
    image: str | None = None

    created_by: str = Field(
        index=True,
        description="Model owner email at purchase time",
    )

    purchased_by: str = Field(
        index=True,
        description="Buyer email",
    )

    status: str = Field(
        default=PURCHASE_PENDING,
        index=True,
        description="pending | completed | pending_reconciliation",
    )

    purchased_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Purchase timestamp (UTC)",
    )
