"""Tests for settings and shared dependencies."""
import pytest
from pydantic import ValidationError

from intervention_service.core.config import Settings
from intervention_service.core.dependencies import analysis_cache_key, upload_digest


def test_defaults():
    settings = Settings()

    assert settings.GRACE_PERIOD_WEEKS == 3
    assert settings.AT_RISK_MAX_WEEKS_BEHIND == 3
    assert settings.COURSE_TOTAL_WEEKS == {"developer fundamentals": 10}
    assert settings.MAX_PROGRAM_WEEK == 11
    assert not settings.is_production()


def test_cors_origins_accepts_comma_list():
    settings = Settings(CORS_ORIGINS="http://a.test, http://b.test")

    assert settings.CORS_ORIGINS == ["http://a.test", "http://b.test"]


def test_environment_is_validated():
    with pytest.raises(ValidationError):
        Settings(ENVIRONMENT="qa")


def test_cache_key_scopes_week_and_course():
    digest = upload_digest(b"Email\na@x.com\n")

    assert digest == upload_digest(b"Email\na@x.com\n")
    assert analysis_cache_key(digest, 4, None) == f"analysis:{digest}:4:*"
    assert analysis_cache_key(digest, 4, "Web") != analysis_cache_key(digest, 5, "Web")
