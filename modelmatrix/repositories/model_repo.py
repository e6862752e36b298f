# modelmatrix/repositories/model_repo.py
import uuid

from sqlalchemy import update
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, select

from modelmatrix.models.model import AIModel


class ModelRepository:
    """
    Data access layer for the models collection.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, model_id: uuid.UUID) -> AIModel | None:
        return session.get(AIModel, model_id)

    def find(
        self,
        session: Session,
        where: ColumnElement[bool],
        limit: int | None = None,
    ) -> list[AIModel]:
        """Models matching `where`, newest first."""
        stmt = select(AIModel).where(where).order_by(AIModel.created_at.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(session.exec(stmt).all())

    def list_by_owner(self, session: Session, email: str) -> list[AIModel]:
        return self.find(session, AIModel.created_by == email)

    def create(self, session: Session, model: AIModel) -> AIModel:
        session.add(model)
        session.commit()
        session.refresh(model)
        return model

    def update(self, session: Session, model: AIModel) -> AIModel:
        session.add(model)
        session.commit()
        session.refresh(model)
        return model

    def delete(self, session: Session, model: AIModel) -> None:
        session.delete(model)
        session.commit()

    def increment_purchased(self, session: Session, model_id: uuid.UUID) -> int:
        """
        Atomically bump the purchase counter in the store.

        Returns the number of rows touched (0 if the model is gone).
        No commit; the caller decides the transaction boundary.
        """
        stmt = (
            update(AIModel)
            .where(AIModel.id == model_id)
            .values(purchased=AIModel.purchased + 1)
        )
        result = session.exec(stmt)
        return result.rowcount
