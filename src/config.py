"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file)."""

    # --- App ---
    app_name: str = "CycleCast"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"  # development | staging | production

    # --- Supabase ---
    supabase_db_url: str  # direct postgres connection string for asyncpg
    supabase_jwt_secret: str  # verifies service-role bearer tokens
    db_pool_min_size: int = 2
    db_pool_max_size: int = 20

    # --- Predictions ---
    timezone: str = "UTC"  # IANA zone used to derive "today"
    prediction_log_window_entries: int = 90  # most recent log rows read per person
    prediction_idempotent_writes: bool = False  # one row per (person, day)
    prediction_max_concurrent: int = 5

    # --- Notifications ---
    email_service_url: str = ""  # unset → messages are logged, not sent
    email_api_key: str = ""
    email_timeout_seconds: float = 10.0

    # --- CORS ---
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
