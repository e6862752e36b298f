# modelmatrix/core/auth.py
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

import httpx
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session
from supabase_auth.errors import AuthApiError, AuthError

from modelmatrix.core.config import Settings
from modelmatrix.core.errors import Unauthorized, UpstreamFailure
from modelmatrix.core.supabase_client import supabase_public
from modelmatrix.database import get_session
from modelmatrix.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

# HTTP Bearer scheme:
# - auto_error=False => a missing/garbled Authorization header yields None
#   so we can answer with our own 401 envelope.
bearer_scheme = HTTPBearer(auto_error=False)

# token -> claims; raises Unauthorized when the token is rejected
TokenVerifier = Callable[[str], dict[str, Any]]

user_repo = UserRepository()


@dataclass(frozen=True)
class Identity:
    """Verified caller, attached to `request.state.identity`."""

    email: str
    subject: str | None = None
    role: str = "user"
    claims: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class JWTTokenVerifier:
    """
    Verify a Supabase access token (JWT) locally.

    Verification:
      - signature (HS256 using SUPABASE_JWT_SECRET)
      - expiration time (exp)
      - audience is NOT verified (Supabase 'aud' may vary)
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    def __call__(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_aud": False},
            )
        except JWTError as e:
            logger.debug("JWT rejected: %s", e)
            raise Unauthorized()


class SupabaseTokenVerifier:
    """
    Ask Supabase Auth who owns the token.

    The client is created on first use so the app can start without
    reaching the identity provider.

    Raises:
        Unauthorized(401): Supabase rejected the token.
        UpstreamFailure(502): Supabase could not be reached or failed.
    """

    def __init__(self, url: str, key: str):
        self.url = url
        self.key = key

    def __call__(self, token: str) -> dict[str, Any]:
        try:
            response = supabase_public(self.url, self.key).auth.get_user(token)
        except AuthApiError as e:
            if e.status >= 500:
                logger.error("Supabase Auth failed (%s): %s", e.status, e)
                raise UpstreamFailure("identity provider unavailable")
            logger.debug("Supabase rejected token: %s", e)
            raise Unauthorized()
        except (AuthError, httpx.HTTPError) as e:
            # Transport errors, 502-504 and unreadable replies
            logger.error("Supabase Auth unreachable: %s", e)
            raise UpstreamFailure("identity provider unavailable")

        user = response.user if response else None
        if user is None:
            raise Unauthorized()
        return {"sub": str(user.id), "email": user.email, "role": user.role}


def build_token_verifier(settings: Settings) -> TokenVerifier:
    """Local verification when a JWT secret is configured, remote otherwise."""
    if settings.SUPABASE_JWT_SECRET:
        return JWTTokenVerifier(settings.SUPABASE_JWT_SECRET, settings.SUPABASE_JWT_ALG)
    return SupabaseTokenVerifier(settings.SUPABASE_URL, settings.SUPABASE_KEY)


def get_token_verifier(request: Request) -> TokenVerifier:
    """FastAPI dependency returning the verifier built at app creation."""
    return request.app.state.token_verifier


def require_auth(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    verify: TokenVerifier = Depends(get_token_verifier),
    session: Session = Depends(get_session),
) -> Identity:
    """
    Authentication gate.

    Flow:
      1. No `Authorization: Bearer <token>` => 401.
      2. Verify the token with the identity provider => claims.
      3. Require an 'email' claim.
      4. Read the application role from the stored profile (default "user").

    Returns:
        The verified Identity (also stored on request.state.identity).

    Raises:
        Unauthorized(401): "unauthorized access" for every failure above.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized()

    claims = verify(credentials.credentials)
    email = (claims.get("email") or "").strip().lower()
    if not email:
        raise Unauthorized()

    user = user_repo.get_by_email(session, email)
    identity = Identity(
        email=email,
        subject=claims.get("sub"),
        role=user.role if user else "user",
        claims=claims,
    )
    request.state.identity = identity
    return identity
