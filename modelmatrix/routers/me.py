# modelmatrix/routers/me.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from modelmatrix.core.auth import Identity
from modelmatrix.core.policies import SELF_ONLY, require_policy
from modelmatrix.database import get_session
from modelmatrix.routers.models import purchase_service, service as model_service
from modelmatrix.schemas.common import Envelope, ok
from modelmatrix.schemas.model import ModelRead
from modelmatrix.schemas.purchase import PurchaseRead

router = APIRouter(tags=["Me"])

# `?email=` is optional; when sent it must be the caller's own.
EMAIL_QUERY = Query(default=None, description="Must match the token email")


@router.get("/my-models", response_model=Envelope[list[ModelRead]])
def list_my_models(
    email: str | None = EMAIL_QUERY,
    session: Session = Depends(get_session),
    identity: Identity = Depends(require_policy(SELF_ONLY, "email")),
):
    """
    Models listed by the caller, newest first.
    """
    return ok(model_service.list_owned(session, identity.email))


@router.get("/my-purchases", response_model=Envelope[list[PurchaseRead]])
def list_my_purchases(
    email: str | None = EMAIL_QUERY,
    session: Session = Depends(get_session),
    identity: Identity = Depends(require_policy(SELF_ONLY, "email")),
):
    """
    Purchases made by the caller, newest first.
    """
    return ok(purchase_service.list_for_buyer(session, identity.email))
