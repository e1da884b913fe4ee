# familyhub/settings/config.py  (Pydantic v2)
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ---------- Storage ----------
    # Default is a process-local in-memory SQLite database; state is lost on restart.
    DATABASE_URL: str = "sqlite+aiosqlite://"
    RUN_DB_CREATE_ALL: bool = True

    # ---------- Auth / session ----------
    SECRET: str = ""
    SESSION_COOKIE_NAME: str = "familyhub_session"
    SESSION_TTL_SECONDS: int = 3600 * 24
    COOKIE_SECURE: bool = False

    # ---------- HTTP ----------
    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    # ---------- Google Calendar ----------
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None
    GOOGLE_REDIRECT_URI: Optional[str] = None
    GOOGLE_CALENDAR_ID: str = "primary"

    # ---------- pydantic-settings config ----------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # allow lower/upper env names
        extra="ignore",
    )


settings = Settings()
