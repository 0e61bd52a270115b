"""
Tests for profile service settings and the in-memory session registry.
"""

import logging
from datetime import timedelta
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from profile_service.config import (
    MAX_OCR_DOCUMENT_BYTES,
    ProfileServiceSettings,
    validate_config_on_startup,
)
from profile_service.sessions import SessionNotFoundError, SessionRegistry
from src.common.config import Config


class TestProfileServiceSettings:

    def test_environment_is_normalized(self):
        assert ProfileServiceSettings(environment="Staging").environment == "staging"

    def test_unknown_environment(self):
        with pytest.raises(ValidationError):
            ProfileServiceSettings(environment="qa")

    @pytest.mark.parametrize("secret", ["short", "aaaaaaaaaaaaaaaaaaaa", "12345678901234567"])
    def test_weak_secrets_rejected(self, secret):
        with pytest.raises(ValidationError):
            ProfileServiceSettings(service_api_secret=secret)

    def test_cors_origins_list(self):
        settings = ProfileServiceSettings(cors_origins="https://a.test, https://b.test,")

        assert settings.cors_origins_list == ["https://a.test", "https://b.test"]

    def test_production_requires_secret(self):
        settings = ProfileServiceSettings(environment="production", service_api_secret=None)

        issues = settings.validate_production_config()

        assert "CRITICAL: SERVICE_API_SECRET required in production" in issues
        assert settings.auth_required is True

    def test_missing_ocr_key_is_a_warning(self):
        issues = ProfileServiceSettings().validate_production_config(ocr_configured=False)

        assert any("MISTRAL_API_KEY" in issue for issue in issues)
        assert not any(issue.startswith("CRITICAL") for issue in issues)

    def test_upload_limit_above_ocr_limit(self):
        settings = ProfileServiceSettings(max_upload_bytes=MAX_OCR_DOCUMENT_BYTES + 1)

        assert any("OCR document limit" in issue for issue in settings.validate_production_config())

    @pytest.mark.parametrize("minutes", [0, 24 * 60 + 1])
    def test_session_ttl_bounds(self, minutes):
        with pytest.raises(ValidationError):
            ProfileServiceSettings(session_ttl_minutes=minutes)


class TestStartupValidation:

    def _run_with(self, environment):
        settings = ProfileServiceSettings(
            environment=environment, service_api_secret="test-secret-key-1234"
        )
        with patch("profile_service.config.get_settings", return_value=settings):
            validate_config_on_startup()

    def test_pipeline_config_requires_mongodb_uri(self):
        with patch.object(Config, "MONGODB_URI", ""):
            with pytest.raises(ValueError, match="MONGODB_URI"):
                Config.validate()

    def test_signed_url_expiry_must_be_positive(self):
        with patch.object(Config, "OCR_SIGNED_URL_EXPIRY_HOURS", 0):
            with pytest.raises(ValueError, match="OCR_SIGNED_URL_EXPIRY_HOURS"):
                Config.validate()

    def test_production_refuses_to_start_without_pipeline_keys(self):
        with patch.object(Config, "MONGODB_URI", ""):
            with pytest.raises(ValueError, match="MONGODB_URI"):
                self._run_with("production")

    def test_development_only_warns(self, caplog):
        with patch.object(Config, "MONGODB_URI", ""):
            with caplog.at_level(logging.WARNING, logger="profile_service.config"):
                self._run_with("development")

        assert any("MONGODB_URI" in r.getMessage() for r in caplog.records)

    def test_complete_config_passes_in_production(self):
        with patch.object(Config, "MONGODB_URI", "mongodb://db:27017"), \
                patch.object(Config, "MISTRAL_API_KEY", "mistral-key"):
            self._run_with("production")


class TestSessionRegistry:

    @pytest.fixture
    def registry(self):
        return SessionRegistry(ttl_minutes=30)

    def test_owner_scoped_lookup(self, registry):
        session = registry.create("user-1")

        assert registry.get(session.id, "user-1") is session
        with pytest.raises(SessionNotFoundError):
            registry.get(session.id, "user-2")

    def test_discard(self, registry):
        session = registry.create("user-1")

        registry.discard(session.id, "user-1")

        assert len(registry) == 0
        with pytest.raises(SessionNotFoundError):
            registry.get(session.id, "user-1")

    def test_untouched_sessions_expire(self, registry):
        stale = registry.create("user-1")
        fresh = registry.create("user-1")
        entry = registry._entries[stale.id]
        later = entry.touched_at + timedelta(minutes=31)
        registry._entries[fresh.id].touched_at = later

        assert registry.purge_expired(now=later) == [stale.id]
        assert len(registry) == 1

    def test_each_session_has_its_own_lock(self, registry):
        first = registry.create("user-1")
        second = registry.create("user-1")

        entry = registry.get_entry(first.id, "user-1")

        assert entry.session is first
        assert entry.lock is not registry.get_entry(second.id, "user-1").lock
