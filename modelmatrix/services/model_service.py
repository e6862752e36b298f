# modelmatrix/services/model_service.py
import uuid

from sqlmodel import Session

from modelmatrix.core.auth import Identity
from modelmatrix.core.errors import NotFound
from modelmatrix.core.policies import MODEL_MAINTAINER, authorize
from modelmatrix.models.model import AIModel
from modelmatrix.repositories.filters import build_model_filter
from modelmatrix.repositories.model_repo import ModelRepository
from modelmatrix.schemas.common import DeleteResult
from modelmatrix.schemas.model import ModelCreate, ModelRead, ModelUpdate


class ModelService:
    """
    Business logic for marketplace models.

    Responsibilities:
      - stamp owner/timestamps/counter on create
      - filtered and "recent" listings
      - owner-or-admin rule on update/delete
      - map missing rows to NotFound
    """

    def __init__(self, repo: ModelRepository):
        self.repo = repo

    def _get_or_404(self, session: Session, model_id: uuid.UUID) -> AIModel:
        model = self.repo.get_by_id(session, model_id)
        if not model:
            raise NotFound("model not found")
        return model

    # ----- Listings -----

    def list_models(
        self,
        session: Session,
        search: str | None = None,
        framework: str | None = None,
    ) -> list[ModelRead]:
        where = build_model_filter(search=search, framework=framework)
        return [ModelRead.model_validate(m) for m in self.repo.find(session, where)]

    def list_recent(self, session: Session, limit: int = 6) -> list[ModelRead]:
        """Newest `limit` models."""
        rows = self.repo.find(session, build_model_filter(), limit=limit)
        return [ModelRead.model_validate(m) for m in rows]

    def list_owned(self, session: Session, email: str) -> list[ModelRead]:
        return [ModelRead.model_validate(m) for m in self.repo.list_by_owner(session, email)]

    # ----- Single model -----

    def get_model(self, session: Session, model_id: uuid.UUID) -> ModelRead:
        return ModelRead.model_validate(self._get_or_404(session, model_id))

    def create_model(
        self,
        session: Session,
        identity: Identity,
        payload: ModelCreate,
    ) -> ModelRead:
        model = AIModel(
            **payload.model_dump(),
            created_by=identity.email,
            purchased=0,
        )
        return ModelRead.model_validate(self.repo.create(session, model))

    def update_model(
        self,
        session: Session,
        identity: Identity,
        model_id: uuid.UUID,
        payload: ModelUpdate,
    ) -> ModelRead:
        """
        Partial update. Only fields present in the payload change.

        Raises:
            NotFound(404), Forbidden(403) if caller is neither owner nor admin.
        """
        model = self._get_or_404(session, model_id)
        authorize(MODEL_MAINTAINER, identity, model)

        for key, value in payload.model_dump(exclude_unset=True).items():
            setattr(model, key, value)

        return ModelRead.model_validate(self.repo.update(session, model))

    def delete_model(
        self,
        session: Session,
        identity: Identity,
        model_id: uuid.UUID,
    ) -> DeleteResult:
        model = self._get_or_404(session, model_id)
        authorize(MODEL_MAINTAINER, identity, model)
        self.repo.delete(session, model)
        return DeleteResult(id=model_id, deleted_count=1)
