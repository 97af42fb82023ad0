"""
Tests for environment validation.
"""

import pytest

from app.core import env_validator
from app.core.env_validator import get_environment_info, validate_environment_variables


def test_get_environment_info():
    """Test getting environment configuration information."""
    info = get_environment_info()

    assert isinstance(info, dict)
    assert info["environment"] == "test"
    for key in ["firebase_configured", "redis_configured", "secret_key_configured", "session_cookie_secure"]:
        assert isinstance(info[key], bool)
    assert info["secret_key_configured"] is True
    assert info["session_cookie_secure"] is False


def test_validate_environment_variables():
    """Test environment variable validation (non-strict mode)."""
    is_valid, errors = validate_environment_variables(strict=False)
    assert isinstance(is_valid, bool)
    assert isinstance(errors, list)
    # In test mode, validation should pass (skip validation)
    assert is_valid is True


def test_validate_environment_variables_reports_missing(monkeypatch):
    """Outside tests, missing required settings are reported."""
    monkeypatch.setattr(env_validator.config, "ENVIRONMENT", "production")
    monkeypatch.delenv("PYTEST_CURRENT_TEST", raising=False)
    monkeypatch.setattr(env_validator.config, "FIREBASE_PROJECT_ID", "")
    monkeypatch.delenv("FIREBASE_PROJECT_ID", raising=False)

    is_valid, errors = validate_environment_variables(strict=False)

    assert is_valid is False
    assert any("FIREBASE_PROJECT_ID" in e for e in errors)


def test_validate_environment_variables_strict_exits(monkeypatch):
    """Strict mode stops the process when required settings are missing."""
    monkeypatch.setattr(env_validator.config, "ENVIRONMENT", "production")
    monkeypatch.delenv("PYTEST_CURRENT_TEST", raising=False)
    monkeypatch.setattr(env_validator.config, "SECRET_KEY", "")
    monkeypatch.delenv("SECRET_KEY", raising=False)

    with pytest.raises(SystemExit):
        validate_environment_variables(strict=True)
