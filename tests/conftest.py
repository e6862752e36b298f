import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from modelmatrix.core.auth import get_token_verifier
from modelmatrix.core.config import Settings
from modelmatrix.core.errors import Unauthorized
from modelmatrix.database import DocumentStore
from modelmatrix.main import create_app
from modelmatrix.models.model import AIModel
from modelmatrix.models.user import User

ALICE = "alice@example.com"
BOB = "bob@example.com"
ADMIN = "admin@example.com"

TOKENS = {
    "alice-token": {"sub": "alice-id", "email": ALICE},
    "bob-token": {"sub": "bob-id", "email": BOB},
    "admin-token": {"sub": "admin-id", "email": ADMIN},
    "no-email-token": {"sub": "ghost-id"},
}


def fake_verifier(token: str) -> dict:
    try:
        return TOKENS[token]
    except KeyError:
        raise Unauthorized()


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        SUPABASE_URL="http://localhost:54321",
        SUPABASE_KEY="test-anon-key",
        SUPABASE_JWT_SECRET=None,
    )


@pytest.fixture
def store():
    return DocumentStore(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def app(settings, store):
    app = create_app(settings=settings, store=store)
    app.dependency_overrides[get_token_verifier] = lambda: fake_verifier
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    # Entering the context runs the lifespan, which opens the store
    with TestClient(app) as c:
        yield c


@pytest.fixture
def session(client, store):
    with store.session() as s:
        yield s


@pytest.fixture
def admin_user(session):
    user = User(email=ADMIN, name="Admin", role="admin")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def make_model(session):
    """Insert a model directly, with controllable created_at."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    counter = {"n": 0}

    def _make(name="Vision Transformer", framework="PyTorch", owner=ALICE, **extra):
        counter["n"] += 1
        model = AIModel(
            name=name,
            framework=framework,
            use_case=extra.pop("use_case", "image classification"),
            image=extra.pop("image", "https://img.example.com/m.png"),
            created_by=owner,
            created_at=extra.pop("created_at", base + timedelta(minutes=counter["n"])),
            **extra,
        )
        session.add(model)
        session.commit()
        session.refresh(model)
        return model

    return _make
