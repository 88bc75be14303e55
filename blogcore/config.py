# blogcore/config.py
import os
from dotenv import load_dotenv

# .env is loaded as soon as this module is imported
load_dotenv()


def _env_true(v: str | None) -> bool:
    return str(v).lower() in {"1", "true", "yes", "y"}


class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./blog.db")
    SQL_ECHO: bool = _env_true(os.getenv("SQL_ECHO", "0"))
    DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "300"))
    SKIP_DB_INIT: bool = _env_true(os.getenv("SKIP_DB_INIT"))

    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "").rstrip("/")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # category lookups are cached in-process for this long
    CATEGORY_CACHE_TTL_SECONDS: float = float(os.getenv("CATEGORY_CACHE_TTL_SECONDS", "300"))

    # behavior events older than this are dropped by the sweep
    BEHAVIOR_RETENTION_DAYS: int = int(os.getenv("BEHAVIOR_RETENTION_DAYS", "30"))
    ANALYTICS_SWEEP_INTERVAL_SECONDS: float = float(
        os.getenv("ANALYTICS_SWEEP_INTERVAL_SECONDS", "300")
    )

    RECOMMENDATION_CANDIDATES: int = int(os.getenv("RECOMMENDATION_CANDIDATES", "100"))
    RECOMMENDATION_LIMIT: int = int(os.getenv("RECOMMENDATION_LIMIT", "5"))


settings = Settings()
