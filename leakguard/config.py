"""
Application configuration. Loads from environment variables.
Secrets and sensitive config must never be hardcoded.
"""

import os

from dotenv import load_dotenv

load_dotenv()
from functools import lru_cache


@lru_cache(maxsize=1)
def get_settings() -> "Settings":
    """Return cached settings instance."""
    return Settings()


class Settings:
    """Application settings loaded from environment."""

    # App
    app_name: str = "LeakGuard"
    debug: bool = False

    # Database (postgresql+psycopg for psycopg3; sqlite:// accepted for local runs and tests)
    database_url: str = "postgresql+psycopg://localhost:5432/leakguard_dev"
    db_connect_timeout: int = 10  # seconds

    # Security
    internal_job_token: str = ""  # Required for /internal/* endpoints

    # Pattern detector windows
    integrity_conversation_lookback_days: int = 60
    integrity_conversation_limit: int = 30
    integrity_date_proximity_days: int = 14
    integrity_prior_quote_limit: int = 60
    # Statement timeout for detector reads; 0 = no timeout. PostgreSQL only.
    integrity_scan_timeout_ms: int = 5000

    # Fallbacks when no marketplace_integrity_config row exists
    integrity_medium_risk_threshold: int = 35
    integrity_high_risk_threshold: int = 70
    integrity_repeat_offender_window_days: int = 180
    integrity_repeat_offender_case_threshold: int = 2
    integrity_repeat_offender_score_boost: int = 20

    def __init__(self) -> None:
        self.app_name = os.getenv("APP_NAME", self.app_name)
        self.debug = os.getenv("DEBUG", "false").lower() == "true"

        default_user = os.getenv("PGUSER") or os.getenv("USER") or "postgres"
        default_url = (
            f"postgresql+psycopg://{default_user}:"
            f"{os.getenv('PGPASSWORD', '')}@"
            f"{os.getenv('PGHOST', 'localhost')}:"
            f"{os.getenv('PGPORT', '5432')}/"
            f"{os.getenv('PGDATABASE', 'leakguard_dev')}"
        )
        raw_url = os.getenv("DATABASE_URL", default_url)
        # Ensure psycopg3 driver if URL uses generic postgresql://
        if raw_url.startswith("postgresql://") and not raw_url.startswith("postgresql+psycopg"):
            raw_url = raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
        self.database_url = raw_url
        self.db_connect_timeout = int(os.getenv("DB_CONNECT_TIMEOUT", str(self.db_connect_timeout)))

        self.internal_job_token = os.getenv("INTERNAL_JOB_TOKEN", "")

        self.integrity_conversation_lookback_days = _env_int(
            "INTEGRITY_CONVERSATION_LOOKBACK_DAYS", self.integrity_conversation_lookback_days
        )
        self.integrity_conversation_limit = _env_int(
            "INTEGRITY_CONVERSATION_LIMIT", self.integrity_conversation_limit
        )
        self.integrity_date_proximity_days = _env_int(
            "INTEGRITY_DATE_PROXIMITY_DAYS", self.integrity_date_proximity_days
        )
        self.integrity_prior_quote_limit = _env_int(
            "INTEGRITY_PRIOR_QUOTE_LIMIT", self.integrity_prior_quote_limit
        )
        self.integrity_scan_timeout_ms = _env_int(
            "INTEGRITY_SCAN_TIMEOUT_MS", self.integrity_scan_timeout_ms
        )

        self.integrity_medium_risk_threshold = _env_int(
            "INTEGRITY_MEDIUM_RISK_THRESHOLD", self.integrity_medium_risk_threshold
        )
        self.integrity_high_risk_threshold = _env_int(
            "INTEGRITY_HIGH_RISK_THRESHOLD", self.integrity_high_risk_threshold
        )
        self.integrity_repeat_offender_window_days = _env_int(
            "INTEGRITY_REPEAT_OFFENDER_WINDOW_DAYS", self.integrity_repeat_offender_window_days
        )
        self.integrity_repeat_offender_case_threshold = _env_int(
            "INTEGRITY_REPEAT_OFFENDER_CASE_THRESHOLD",
            self.integrity_repeat_offender_case_threshold,
        )
        self.integrity_repeat_offender_score_boost = _env_int(
            "INTEGRITY_REPEAT_OFFENDER_SCORE_BOOST", self.integrity_repeat_offender_score_boost
        )


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))
