# modelmatrix/routers/users.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from modelmatrix.core.auth import Identity, require_auth
from modelmatrix.core.policies import SELF_ONLY, require_admin, require_policy
from modelmatrix.database import get_session
from modelmatrix.repositories.user_repo import UserRepository
from modelmatrix.schemas.common import DeleteResult, Envelope, ok
from modelmatrix.schemas.user import UserCreate, UserRead, UserUpdate
from modelmatrix.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


# -------- Sign-in --------


@router.post("", response_model=Envelope[UserRead])
def upsert_user(
    payload: UserCreate,
    session: Session = Depends(get_session),
):
    """
    Create or refresh a profile after sign-in.

    - Public endpoint; called by the client right after the identity
      provider signs the user in.
    - Keyed by email; created_at and role are never overwritten.
    """
    return ok(service.upsert(session, payload))


# -------- Self profile --------


@router.get("/{email}", response_model=Envelope[UserRead])
def read_profile(
    email: str,
    session: Session = Depends(get_session),
    identity: Identity = Depends(require_policy(SELF_ONLY, "email")),
):
    """
    Return the caller's own profile.

    Auth:
      - Token email must equal `email`.
    """
    return ok(service.get_profile(session, email))


@router.put("/{email}", response_model=Envelope[UserRead])
def update_profile(
    email: str,
    payload: UserUpdate,
    session: Session = Depends(get_session),
    identity: Identity = Depends(require_policy(SELF_ONLY, "email")),
):
    """
    Partial update of the caller's own profile (`name`, `photo_url`).
    """
    return ok(service.update_profile(session, email, payload))


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=Envelope[list[UserRead]],
    dependencies=[Depends(require_admin)],
)
def list_users(session: Session = Depends(get_session)):
    """
    List all users, newest first (admin only).
    """
    return ok(service.list_users(session))


@router.delete("/{user_id}", response_model=Envelope[DeleteResult])
def delete_user(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
    identity: Identity = Depends(require_auth),
):
    """
    Delete a user by id.

    Auth:
      - Admins may delete anyone; users may delete only themselves.
    """
    return ok(service.delete_user(session, identity, user_id))
