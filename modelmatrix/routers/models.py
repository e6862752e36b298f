# modelmatrix/routers/models.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from modelmatrix.core.auth import Identity, require_auth
from modelmatrix.core.config import Settings, get_app_settings
from modelmatrix.database import get_session
from modelmatrix.repositories.model_repo import ModelRepository
from modelmatrix.repositories.purchase_repo import PurchaseRepository
from modelmatrix.schemas.common import DeleteResult, Envelope, ok
from modelmatrix.schemas.model import ModelCreate, ModelRead, ModelUpdate
from modelmatrix.schemas.purchase import PurchaseRead
from modelmatrix.services.model_service import ModelService
from modelmatrix.services.purchase_service import PurchaseService

router = APIRouter(prefix="/models", tags=["Models"])

model_repo = ModelRepository()
purchase_repo = PurchaseRepository()
service = ModelService(model_repo)
purchase_service = PurchaseService(purchase_repo, model_repo)


# -------- Public endpoints --------


@router.get("", response_model=Envelope[list[ModelRead]])
def list_models(
    session: Session = Depends(get_session),
    search: str | None = Query(default=None, description="Substring of the model name"),
    framework: str | None = Query(default=None, description="Comma-separated frameworks"),
):
    """
    Browse models, newest first.

    - `search`: case-insensitive substring of the name.
    - `framework`: e.g. `TensorFlow,ONNX`; exact match on any value.
    """
    return ok(service.list_models(session, search=search, framework=framework))


@router.get("/recent", response_model=Envelope[list[ModelRead]])
def list_recent_models(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
):
    """
    Newest models (capped by RECENT_MODELS_LIMIT, 6 by default).
    """
    return ok(service.list_recent(session, limit=settings.RECENT_MODELS_LIMIT))


# -------- Authenticated endpoints --------


@router.post(
    "",
    response_model=Envelope[ModelRead],
    status_code=status.HTTP_201_CREATED,
)
def create_model(
    payload: ModelCreate,
    session: Session = Depends(get_session),
    identity: Identity = Depends(require_auth),
):
    """
    List a new model owned by the caller.
    """
    return ok(service.create_model(session, identity, payload))


@router.get("/{model_id}", response_model=Envelope[ModelRead])
def get_model(
    model_id: uuid.UUID,
    session: Session = Depends(get_session),
    identity: Identity = Depends(require_auth),
):
    return ok(service.get_model(session, model_id))


@router.put("/{model_id}", response_model=Envelope[ModelRead])
def update_model(
    model_id: uuid.UUID,
    payload: ModelUpdate,
    session: Session = Depends(get_session),
    identity: Identity = Depends(require_auth),
):
    """
    Partial update (owner or admin).
    """
    return ok(service.update_model(session, identity, model_id, payload))


@router.delete("/{model_id}", response_model=Envelope[DeleteResult])
def delete_model(
    model_id: uuid.UUID,
    session: Session = Depends(get_session),
    identity: Identity = Depends(require_auth),
):
    """
    Delete a model (owner or admin). Existing purchases keep their copy
    of the model fields.
    """
    return ok(service.delete_model(session, identity, model_id))


@router.post(
    "/{model_id}/purchase",
    response_model=Envelope[PurchaseRead],
    status_code=status.HTTP_201_CREATED,
)
def purchase_model(
    model_id: uuid.UUID,
    session: Session = Depends(get_session),
    identity: Identity = Depends(require_auth),
):
    """
    Buy a model. Every call records a new purchase and bumps the
    model's `purchased` counter by one.
    """
    return ok(purchase_service.purchase_model(session, identity, model_id))
