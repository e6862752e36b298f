# modelmatrix/services/user_service.py
import uuid
from datetime import datetime, timezone

from sqlmodel import Session

from modelmatrix.core.auth import Identity
from modelmatrix.core.errors import NotFound
from modelmatrix.core.policies import SELF_OR_ADMIN, authorize
from modelmatrix.models.user import User
from modelmatrix.repositories.user_repo import UserRepository
from modelmatrix.schemas.common import DeleteResult
from modelmatrix.schemas.user import UserCreate, UserRead, UserUpdate


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - upsert profiles on sign-in (created_at and role are insert-only)
      - orchestrate repository operations
      - map missing rows to NotFound
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def _get_by_email_or_404(self, session: Session, email: str) -> User:
        user = self.repo.get_by_email(session, email.strip().lower())
        if not user:
            raise NotFound("user not found")
        return user

    # ----- Sign-in -----

    def upsert(self, session: Session, payload: UserCreate) -> UserRead:
        """
        Insert-or-update keyed by email.

        Existing user:
          - refresh profile fields present in the payload
          - last_login = now
          - id, role, created_at untouched
        New user:
          - role = "user", created_at = last_login = now
        """
        now = datetime.now(timezone.utc)
        fields = payload.model_dump(exclude_unset=True)
        user = User(**fields, role="user", created_at=now, last_login=now)

        refresh = (set(fields) - {"email"}) | {"last_login"}
        return UserRead.model_validate(self.repo.upsert_by_email(session, user, refresh))

    # ----- Self profile -----

    def get_profile(self, session: Session, email: str) -> UserRead:
        return UserRead.model_validate(self._get_by_email_or_404(session, email))

    def update_profile(
        self,
        session: Session,
        email: str,
        payload: UserUpdate,
    ) -> UserRead:
        """Partial update; only fields present in the payload change."""
        user = self._get_by_email_or_404(session, email)
        for key, value in payload.model_dump(exclude_unset=True).items():
            setattr(user, key, value)
        return UserRead.model_validate(self.repo.update(session, user))

    # ----- Admin operations -----

    def list_users(self, session: Session) -> list[UserRead]:
        return [UserRead.model_validate(u) for u in self.repo.list(session)]

    def delete_user(
        self,
        session: Session,
        identity: Identity,
        user_id: uuid.UUID,
    ) -> DeleteResult:
        """
        Delete a user by id. Admins may delete anyone; users only themselves.

        Raises:
            NotFound(404), Forbidden(403).
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise NotFound("user not found")
        authorize(SELF_OR_ADMIN, identity, user.email)
        self.repo.delete(session, user)
        return DeleteResult(id=user_id, deleted_count=1)
