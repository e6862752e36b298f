# modelmatrix/schemas/stats.py
from pydantic import ConfigDict
from sqlmodel import SQLModel


class AdminStats(SQLModel):
    """
    Payload for the admin dashboard.

    Counts are store estimates, not exact; revenue is a placeholder
    (total_purchases * unit price), not a ledger.
    """

    model_config = ConfigDict(extra="forbid")

    total_users: int
    total_models: int
    total_purchases: int
    revenue: float
