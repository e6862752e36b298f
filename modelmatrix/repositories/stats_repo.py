# modelmatrix/repositories/stats_repo.py
from sqlalchemy import func, text
from sqlmodel import Session, SQLModel, select

from modelmatrix.models.model import AIModel
from modelmatrix.models.purchase import Purchase
from modelmatrix.models.user import User


class StatsRepository:
    """
    Read-only aggregated queries for the admin dashboard.

    Counts come from the planner's row estimate where the store keeps one
    (Postgres `pg_class.reltuples`), so they are cheap but approximate.
    """

    def estimated_count(self, session: Session, table: type[SQLModel]) -> int:
        name = table.__tablename__
        if session.get_bind().dialect.name == "postgresql":
            # to_regclass resolves the name through search_path, like the ORM does
            stmt = text(
                "SELECT reltuples::bigint FROM pg_class WHERE oid = to_regclass(:name)"
            )
            value = session.exec(stmt, params={"name": name}).scalar()
            # reltuples is -1 until the table has been vacuumed/analyzed
            if value is not None and value >= 0:
                return int(value)
        return self.exact_count(session, table)

    def exact_count(self, session: Session, table: type[SQLModel]) -> int:
        stmt = select(func.count()).select_from(table)
        value = session.exec(stmt).one()
        return int(value or 0)

    def estimated_users(self, session: Session) -> int:
        return self.estimated_count(session, User)

    def estimated_models(self, session: Session) -> int:
        return self.estimated_count(session, AIModel)

    def estimated_purchases(self, session: Session) -> int:
        return self.estimated_count(session, Purchase)
