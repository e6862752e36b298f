# modelmatrix/services/purchase_service.py
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from modelmatrix.core.auth import Identity
from modelmatrix.core.errors import NotFound, UpstreamFailure
from modelmatrix.models.purchase import (
    PURCHASE_COMPLETED,
    PURCHASE_PENDING,
    PURCHASE_PENDING_RECONCILIATION,
    Purchase,
)
from modelmatrix.repositories.model_repo import ModelRepository
from modelmatrix.repositories.purchase_repo import PurchaseRepository
from modelmatrix.schemas.purchase import PurchaseRead, ReconcileResult

logger = logging.getLogger(__name__)


class PurchaseService:
    """
    Business logic for purchases.

    Responsibilities:
      - record a purchase with model fields copied at write time
      - keep models.purchased in step with completed purchases
      - park half-done purchases for reconciliation instead of drifting
    """

    def __init__(self, purchase_repo: PurchaseRepository, model_repo: ModelRepository):
        self.purchase_repo = purchase_repo
        self.model_repo = model_repo

    def list_for_buyer(self, session: Session, email: str) -> list[PurchaseRead]:
        rows = self.purchase_repo.list_by_buyer(session, email)
        return [PurchaseRead.model_validate(p) for p in rows]

    def purchase_model(
        self,
        session: Session,
        identity: Identity,
        model_id: uuid.UUID,
    ) -> PurchaseRead:
        """
        Buy a model.

        Steps:
          1. Load the model (404 if missing).
          2. Insert the purchase (status='pending') and commit.
          3. Increment models.purchased and mark the purchase 'completed'
             in one commit.
          4. If step 3 fails, mark the purchase 'pending_reconciliation'
             so an admin reconcile run can finish it.

        Not deduplicated: every call creates a new purchase.

        Raises:
            NotFound(404): model missing.
            UpstreamFailure(502): store failure at step 2 or 3.
        """
        # 1) Target model
        model = self.model_repo.get_by_id(session, model_id)
        if not model:
            raise NotFound("model not found")

        # 2) Purchase record
        purchase = Purchase(
            model_id=model.id,
            model_name=model.name,
            framework=model.framework,
            use_case=model.use_case,
            image=model.image,
            created_by=model.created_by,
            purchased_by=identity.email,
            status=PURCHASE_PENDING,
        )
        try:
            purchase = self.purchase_repo.create(session, purchase)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Purchase insert failed for model %s: %s", model_id, e)
            raise UpstreamFailure("purchase could not be recorded")

        # 3) Counter + completion
        try:
            self.model_repo.increment_purchased(session, model_id)
            self.purchase_repo.flush_status(session, purchase, PURCHASE_COMPLETED)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(
                "Purchase %s recorded but counter update failed: %s", purchase.id, e
            )
            self._park(session, purchase)
            raise UpstreamFailure("purchase recorded, pending reconciliation")

        session.refresh(purchase)
        return PurchaseRead.model_validate(purchase)

    def _park(self, session: Session, purchase: Purchase) -> None:
        try:
            purchase.status = PURCHASE_PENDING_RECONCILIATION
            self.purchase_repo.update(session, purchase)
        except SQLAlchemyError as e:
            # Record stays 'pending'; only the log points at it.
            session.rollback()
            logger.error("Could not park purchase %s: %s", purchase.id, e)

    def reconcile(self, session: Session) -> ReconcileResult:
        """
        Finish purchases whose counter update never landed.

        For each parked purchase: claim it (conditional status flip to
        'completed'), then increment its model's counter (if the model
        still exists), one commit per record. A record another run has
        already claimed is skipped, so overlapping runs count it once.
        """
        parked = self.purchase_repo.list_by_status(
            session, PURCHASE_PENDING_RECONCILIATION
        )

        reconciled = 0
        for purchase in parked:
            if not self.purchase_repo.claim(session, purchase.id):
                logger.info("Purchase %s already reconciled; skipping", purchase.id)
                session.rollback()
                continue
            touched = self.model_repo.increment_purchased(session, purchase.model_id)
            if not touched:
                logger.info(
                    "Model %s gone; closing purchase %s without increment",
                    purchase.model_id,
                    purchase.id,
                )
            session.commit()
            reconciled += 1

        logger.info("Reconciled %d purchase(s)", reconciled)
        return ReconcileResult(reconciled=reconciled)
