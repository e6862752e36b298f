# modelmatrix/services/stats_service.py
from sqlmodel import Session

from modelmatrix.repositories.stats_repo import StatsRepository
from modelmatrix.schemas.stats import AdminStats


class StatsService:
    """
    Orchestrates aggregated admin dashboard statistics.
    """

    def __init__(self, repo: StatsRepository):
        self.repo = repo

    def get_admin_stats(self, session: Session, unit_price: float) -> AdminStats:
        total_users = self.repo.estimated_users(session)
        total_models = self.repo.estimated_models(session)
        total_purchases = self.repo.estimated_purchases(session)

        # Placeholder revenue until purchases carry a price
        revenue = round(total_purchases * unit_price, 2)

        return AdminStats(
            total_users=total_users,
            total_models=total_models,
            total_purchases=total_purchases,
            revenue=revenue,
        )
