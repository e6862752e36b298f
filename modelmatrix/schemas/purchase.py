# modelmatrix/schemas/purchase.py
import uuid
from datetime import datetime
from typing import Literal

from sqlmodel import SQLModel

PurchaseStatus = Literal["pending", "completed", "pending_reconciliation"]


class PurchaseRead(SQLModel):
    """Purchase record as returned to buyers."""

    id: uuid.UUID
    model_id: uuid.UUID
    model_name: str
    framework: str
    use_case: str
    image: str | None = None
    created_by: str
    purchased_by: str
    status: PurchaseStatus
    purchased_at: datetime


class ReconcileResult(SQLModel):
    reconciled: int
