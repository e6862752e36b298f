# modelmatrix/core/config.py
from functools import lru_cache
from fastapi import Request
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (store connection string)
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)

    Optional:
      - SUPABASE_JWT_SECRET: verify tokens locally instead of asking Supabase
      - PORT, UNIT_PRICE, RECENT_MODELS_LIMIT, CORS_ORIGINS
    """

    PROJECT_NAME: str = "ModelMatrix API"
    PORT: int = 5000

    DATABASE_URL: str

    # Identity provider
    SUPABASE_URL: str
    SUPABASE_KEY: str

    # Local JWT verification (skips the round-trip to Supabase when set)
    SUPABASE_JWT_SECRET: str | None = None
    SUPABASE_JWT_ALG: str = "HS256"

    # Placeholder price used for the admin revenue figure
    UNIT_PRICE: float = 10.0
    RECENT_MODELS_LIMIT: int = 6

    CORS_ORIGINS: list[str] = ["*"]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()


def get_app_settings(request: Request) -> Settings:
    """FastAPI dependency returning the settings the app was built with."""
    return request.app.state.settings
