"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "DASH Import Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://dash@localhost:5432/dash"
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "dash-import"
    import_source: str = "chatgpt"
    import_max_tasks_warning: int = 10
    import_max_daily_minutes_warning: int = 120
    scheduler_enabled: bool = False
    scheduler_timezone: str = "UTC"
    week_progression_day: str = "mon"
    week_progression_hour: int = 4
    week_progression_minute: int = 0
    jobs_run_on_startup: bool = False
    notifications_enabled: bool = False
    notifications_provider: str = "noop"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
