"""
Configuration tests.
"""

import pytest

from leakguard.config import Settings, get_settings


def test_get_settings_returns_settings() -> None:
    """get_settings returns a Settings instance."""
    settings = get_settings()
    assert isinstance(settings, Settings)


def test_settings_has_required_attributes() -> None:
    """Settings has all required attributes."""
    settings = get_settings()
    assert hasattr(settings, "app_name")
    assert hasattr(settings, "database_url")
    assert hasattr(settings, "internal_job_token")
    assert settings.app_name == "LeakGuard"


def test_integrity_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Detector windows and band fallbacks default to the documented values."""
    for name in (
        "INTEGRITY_CONVERSATION_LOOKBACK_DAYS",
        "INTEGRITY_CONVERSATION_LIMIT",
        "INTEGRITY_DATE_PROXIMITY_DAYS",
        "INTEGRITY_MEDIUM_RISK_THRESHOLD",
        "INTEGRITY_HIGH_RISK_THRESHOLD",
        "INTEGRITY_REPEAT_OFFENDER_WINDOW_DAYS",
        "INTEGRITY_REPEAT_OFFENDER_CASE_THRESHOLD",
        "INTEGRITY_REPEAT_OFFENDER_SCORE_BOOST",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = Settings()
    assert settings.integrity_conversation_lookback_days == 60
    assert settings.integrity_conversation_limit == 30
    assert settings.integrity_date_proximity_days == 14
    assert settings.integrity_medium_risk_threshold == 35
    assert settings.integrity_high_risk_threshold == 70
    assert settings.integrity_repeat_offender_window_days == 180
    assert settings.integrity_repeat_offender_case_threshold == 2
    assert settings.integrity_repeat_offender_score_boost == 20


def test_integrity_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Integrity windows load from env."""
    monkeypatch.setenv("INTEGRITY_CONVERSATION_LIMIT", "10")
    monkeypatch.setenv("INTEGRITY_HIGH_RISK_THRESHOLD", "400")
    monkeypatch.setenv("INTEGRITY_SCAN_TIMEOUT_MS", "0")
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.integrity_conversation_limit == 10
        assert settings.integrity_high_risk_threshold == 400
        assert settings.integrity_scan_timeout_ms == 0
    finally:
        get_settings.cache_clear()


def test_database_url_uses_psycopg_driver(monkeypatch: pytest.MonkeyPatch) -> None:
    """Generic postgresql:// URLs are rewritten to the psycopg3 driver."""
    monkeypatch.setenv("DATABASE_URL", "postgresql://user:pw@db:5432/leakguard")
    settings = Settings()
    assert settings.database_url == "postgresql+psycopg://user:pw@db:5432/leakguard"


def test_debug_flag_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEBUG", "True")
    assert Settings().debug is True
    monkeypatch.setenv("DEBUG", "no")
    assert Settings().debug is False


@pytest.mark.parametrize(("medium", "high"), [("70", "35"), ("50", "50"), ("-1", "70")])
def test_invalid_band_thresholds_fail_startup_validation(
    monkeypatch: pytest.MonkeyPatch, medium: str, high: str
) -> None:
    from leakguard.main import validate_integrity_settings

    monkeypatch.setenv("INTEGRITY_MEDIUM_RISK_THRESHOLD", medium)
    monkeypatch.setenv("INTEGRITY_HIGH_RISK_THRESHOLD", high)
    get_settings.cache_clear()
    try:
        with pytest.raises(ValueError, match="INTEGRITY_MEDIUM_RISK_THRESHOLD"):
            validate_integrity_settings()
    finally:
        get_settings.cache_clear()


def test_default_band_thresholds_pass_startup_validation() -> None:
    from leakguard.main import validate_integrity_settings

    validate_integrity_settings()
