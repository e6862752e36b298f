# modelmatrix/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from modelmatrix.core.auth import build_token_verifier
from modelmatrix.core.config import Settings, get_settings
from modelmatrix.core.errors import APIError
from modelmatrix.database import DocumentStore
from modelmatrix.schemas.common import ErrorEnvelope

# Routers
from modelmatrix.routers.admin import router as admin_router
from modelmatrix.routers.me import router as me_router
from modelmatrix.routers.models import router as models_router
from modelmatrix.routers.users import router as users_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorEnvelope(message=message).model_dump(),
    )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return _error_response(exc.status_code, exc.message)


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return _error_response(status.HTTP_502_BAD_GATEWAY, "upstream service failure")


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "invalid request") if errors else "invalid request"
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, message)


def create_app(
    settings: Settings | None = None,
    store: DocumentStore | None = None,
) -> FastAPI:
    """
    Build the API.

    Args:
        settings: defaults to the cached env settings.
        store: defaults to a DocumentStore on settings.DATABASE_URL.
    """
    settings = settings or get_settings()
    store = store or DocumentStore(settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        Startup:
          - Open the document store (ping + create missing collections).

        Shutdown:
          - Close the store.
        """
        logger.info("🔄 Startup: opening document store...")
        try:
            store.open()
            logger.info("✅ Startup: store connection OK, collections verified.")
        except Exception as e:
            logger.error(f"❌ Startup: store connection FAILED: {e}")
            raise
        yield
        store.close()
        logger.info("👋 Shutdown: store closed.")

    app = FastAPI(
        title=settings.PROJECT_NAME or "ModelMatrix API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.token_verifier = build_token_verifier(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(users_router)
    app.include_router(admin_router)
    app.include_router(models_router)
    app.include_router(me_router)

    @app.get("/", response_class=PlainTextResponse)
    def root():
        """Health check endpoint."""
        return "server is running"

    return app
