# modelmatrix/repositories/user_repo.py
import uuid

from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import Session, select

from modelmatrix.models.user import User

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def get_by_email(self, session: Session, email: str) -> User | None:
        """Return a User by unique email, or None if not found."""
        stmt = select(User).where(User.email == email)
        return session.exec(stmt).first()

    def list(self, session: Session) -> list[User]:
        """All users, newest first."""
        stmt = select(User).order_by(User.created_at.desc())
        return list(session.exec(stmt).all())

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    def upsert_by_email(self, session: Session, user: User, refresh: set[str]) -> User:
        """
        Insert `user`, or, if its email is taken, update only the `refresh`
        columns of the existing row. One statement, so two first sign-ins
        racing each other end up on the same row.

        Returns the stored row (the existing id, role and created_at on
        conflict).
        """
        insert = _UPSERT_INSERTS[session.get_bind().dialect.name]
        stmt = insert(User).values(**user.model_dump())
        stmt = stmt.on_conflict_do_update(
            index_elements=["email"],
            set_={name: stmt.excluded[name] for name in refresh},
        ).returning(User)
        stored = session.scalars(
            stmt, execution_options={"populate_existing": True}
        ).one()
        session.commit()
        session.refresh(stored)
        return stored

    def delete(self, session: Session, user: User) -> None:
        """Delete a User."""
        session.delete(user)
        session.commit()
