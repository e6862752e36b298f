# modelmatrix/routers/admin.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from modelmatrix.core.config import Settings, get_app_settings
from modelmatrix.core.policies import require_admin
from modelmatrix.database import get_session
from modelmatrix.repositories.stats_repo import StatsRepository
from modelmatrix.routers.models import purchase_service, service as model_service
from modelmatrix.schemas.common import Envelope, ok
from modelmatrix.schemas.model import ModelRead
from modelmatrix.schemas.purchase import ReconcileResult
from modelmatrix.schemas.stats import AdminStats
from modelmatrix.services.stats_service import StatsService

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)

stats_repo = StatsRepository()
stats_service = StatsService(stats_repo)


@router.get("/stats", response_model=Envelope[AdminStats])
def get_admin_stats(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
):
    """
    Aggregated statistics for the admin dashboard.

    Counts are store estimates; revenue = total_purchases * UNIT_PRICE.

    Only accessible to users with role='admin'.
    """
    return ok(stats_service.get_admin_stats(session, unit_price=settings.UNIT_PRICE))


@router.get("/models", response_model=Envelope[list[ModelRead]])
def list_all_models(
    session: Session = Depends(get_session),
    search: str | None = Query(default=None),
    framework: str | None = Query(default=None),
):
    """
    Every model, with the same filters as the public listing (admin only).
    """
    return ok(model_service.list_models(session, search=search, framework=framework))


@router.post("/purchases/reconcile", response_model=Envelope[ReconcileResult])
def reconcile_purchases(session: Session = Depends(get_session)):
    """
    Finish purchases parked as 'pending_reconciliation' (admin only).
    """
    return ok(purchase_service.reconcile(session))
