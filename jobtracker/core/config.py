"""Runtime configuration loaded from the environment and ``.env`` files."""
import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class Settings(BaseModel):
    """Application settings.

    Attributes:
        database_url: SQLAlchemy URL of the application store
        secret_key: Shared secret used to verify bearer tokens
        jwt_algorithm: Algorithm the identity provider signs tokens with
        cors_origins: Origins allowed to call the API
        upcoming_days_default: Window used when no ``days`` is given for
            upcoming reminder queries
        lock_timeout_seconds: Longest wait for the per-application lock
    """
    database_url: str = "sqlite:///jobtracker.db"
    secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    upcoming_days_default: int = 7
    lock_timeout_seconds: float = 10.0

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        defaults = cls()
        return cls(
            database_url=os.getenv("DATABASE_URL", defaults.database_url),
            secret_key=os.getenv("SECRET_KEY", defaults.secret_key),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", defaults.jwt_algorithm),
            cors_origins=[
                origin.strip()
                for origin in os.getenv("CORS_ORIGINS", "*").split(",")
                if origin.strip()
            ],
            upcoming_days_default=int(
                os.getenv("UPCOMING_DAYS_DEFAULT", defaults.upcoming_days_default)
            ),
            lock_timeout_seconds=float(
                os.getenv("LOCK_TIMEOUT_SECONDS", defaults.lock_timeout_seconds)
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings.from_env()
