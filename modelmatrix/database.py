# modelmatrix/database.py
import logging
from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import Depends, Request
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine

logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# Postgres connection defaults
#
# - sslmode=require   : enforce SSL when running in the cloud
# - pool_size=1       : keep a single connection to the pooler
# - max_overflow=0    : do not open extra connections beyond the pool
# - pool_pre_ping=True: validate connections before using them
#
# Hosted poolers in session mode cap the number of clients; the
# SQLAlchemy default pool (5+) hits "max clients reached" quickly.
# ---------------------------------------------------------

POSTGRES_ENGINE_OPTIONS: dict[str, Any] = {
    "pool_pre_ping": True,
    "pool_size": 1,
    "max_overflow": 0,
}


def _with_sslmode(url: str) -> str:
    """Append sslmode=require to Postgres URLs that don't set it."""
    if not url.startswith("postgres") or "sslmode=" in url:
        return url
    return url + ("&" if "?" in url else "?") + "sslmode=require"


class DocumentStore:
    """
    Handle to the document store.

    Holds one engine for the process lifetime. Collections (models,
    purchases, users) are the SQLModel tables registered in
    `modelmatrix.models`.

    Lifecycle:
      - open()  at process start: connect, ping, create missing tables
      - close() on shutdown: dispose pooled connections

    Usage:

        store = DocumentStore(settings.DATABASE_URL)
        store.open()
        with store.session() as session:
            ...
        store.close()
    """

    def __init__(self, url: str, **engine_options: Any):
        self.url = _with_sslmode(url)
        if not engine_options and self.url.startswith("postgres"):
            engine_options = dict(POSTGRES_ENGINE_OPTIONS)
        self.engine_options = engine_options
        self._engine: Engine | None = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("DocumentStore is not open")
        return self._engine

    def open(self) -> None:
        if self._engine is not None:
            return

        # Import models so SQLModel metadata is populated before create_all()
        from modelmatrix.models import model as _model_models  # noqa: F401
        from modelmatrix.models import purchase as _purchase_models  # noqa: F401
        from modelmatrix.models import user as _user_models  # noqa: F401

        engine = create_engine(self.url, echo=False, **self.engine_options)
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        SQLModel.metadata.create_all(engine)
        self._engine = engine
        logger.info("Document store opened (%s)", engine.url.get_backend_name())

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        logger.info("Document store closed")

    @contextmanager
    def session(self) -> Iterator[Session]:
        with Session(self.engine) as session:
            yield session


def get_store(request: Request) -> DocumentStore:
    """FastAPI dependency returning the store opened by the app lifespan."""
    return request.app.state.store


def get_session(store: DocumentStore = Depends(get_store)):
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with store.session() as session:
        yield session
