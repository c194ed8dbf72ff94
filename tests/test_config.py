"""
Tests for Endor settings.
"""

from endor.config import EndorSettings, get_settings, load_settings


class TestEndorSettings:
    """Tests for EndorSettings defaults."""

    def test_defaults(self):
        settings = EndorSettings()

        assert settings.microservice_id == "endor-service"
        assert settings.server_port == 8080
        assert settings.session_cookie_name == "sessionId"
        assert settings.hybrid_resources_enabled is True
        assert settings.is_development

    def test_secret_uri_is_masked(self):
        settings = EndorSettings(document_db_uri="mongodb://user:pass@db:27017")

        assert "pass" not in repr(settings)
        assert settings.document_db_uri.get_secret_value() == "mongodb://user:pass@db:27017"


class TestLoadSettings:
    """Tests for environment loading."""

    def test_empty_environment_gives_defaults(self):
        assert load_settings({}) == EndorSettings()

    def test_prefixed_variables(self):
        settings = load_settings(
            {
                "ENDOR_MICROSERVICE_ID": "customers-service",
                "ENDOR_ENVIRONMENT": "production",
                "ENDOR_SERVER_PORT": "9090",
                "ENDOR_DOCUMENT_DB_NAME": "crm",
                "ENDOR_READ_TIMEOUT_SECONDS": "2.5",
                "ENDOR_HYBRID_RESOURCES_ENABLED": "false",
                "ENDOR_LOG_TYPE": "TEXT",
            }
        )

        assert settings.microservice_id == "customers-service"
        assert not settings.is_development
        assert settings.server_port == 9090
        assert settings.document_db_name == "crm"
        assert settings.read_timeout_seconds == 2.5
        assert settings.hybrid_resources_enabled is False
        assert settings.log_type == "TEXT"

    def test_unprefixed_variables_are_ignored(self):
        assert load_settings({"MICROSERVICE_ID": "other"}).microservice_id == "endor-service"

    def test_get_settings_is_cached(self, monkeypatch):
        get_settings.cache_clear()
        monkeypatch.setenv("ENDOR_MICROSERVICE_ID", "cached-service")
        try:
            assert get_settings() is get_settings()
            assert get_settings().microservice_id == "cached-service"
        finally:
            get_settings.cache_clear()
