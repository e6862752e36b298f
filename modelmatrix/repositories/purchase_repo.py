# modelmatrix/repositories/purchase_repo.py
import uuid

from sqlalchemy import update
from sqlmodel import Session, select

from modelmatrix.models.purchase import (
    PURCHASE_COMPLETED,
    PURCHASE_PENDING_RECONCILIATION,
    Purchase,
)


class PurchaseRepository:
    """
    Data access layer for the purchases collection.

    NOTE:
      - `flush` and `claim` methods don't commit; the purchase flow is a
        multi-step sequence and the service owns the commits.
    """

    def list_by_buyer(self, session: Session, email: str) -> list[Purchase]:
        stmt = (
            select(Purchase)
            .where(Purchase.purchased_by == email)
            .order_by(Purchase.purchased_at.desc())
        )
        return list(session.exec(stmt).all())

    def list_by_status(self, session: Session, status: str) -> list[Purchase]:
        stmt = (
            select(Purchase)
            .where(Purchase.status == status)
            .order_by(Purchase.purchased_at)
        )
        return list(session.exec(stmt).all())

    def create(self, session: Session, purchase: Purchase) -> Purchase:
        session.add(purchase)
        session.commit()
        session.refresh(purchase)
        return purchase

    def update(self, session: Session, purchase: Purchase) -> Purchase:
        session.add(purchase)
        session.commit()
        session.refresh(purchase)
        return purchase

    def flush_status(self, session: Session, purchase: Purchase, status: str) -> None:
        purchase.status = status
        session.add(purchase)
        session.flush()

    def claim(self, session: Session, purchase_id: uuid.UUID) -> int:
        """
        Move a parked purchase to 'completed' if it is still parked.

        Returns the number of rows touched; 0 means another run already
        finished it. No commit.
        """
        stmt = (
            update(Purchase)
            .where(Purchase.id == purchase_id)
            .where(Purchase.status == PURCHASE_PENDING_RECONCILIATION)
            .values(status=PURCHASE_COMPLETED)
        )
        result = session.exec(stmt)
        return result.rowcount
