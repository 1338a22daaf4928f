"""
Tests for configuration and environments.
"""

import pytest

from mpesa_sdk.config import Config
from mpesa_sdk.environment import Environment
from mpesa_sdk.exceptions import ConfigurationError


class TestEnvironment:
    def test_base_urls(self):
        assert Environment.SANDBOX.base_url == "https://sandbox.safaricom.co.ke"
        assert Environment.PRODUCTION.base_url == "https://api.safaricom.co.ke"

    def test_certificates_differ(self):
        assert Environment.SANDBOX.certificate_file != Environment.PRODUCTION.certificate_file

    def test_parse(self):
        assert Environment.parse("Production") is Environment.PRODUCTION
        assert Environment.parse(" sandbox ") is Environment.SANDBOX
        assert Environment.parse(Environment.SANDBOX) is Environment.SANDBOX

    def test_parse_unknown(self):
        with pytest.raises(ConfigurationError, match="Unknown environment"):
            Environment.parse("staging")

        with pytest.raises(ConfigurationError):
            Environment.parse(None)


class TestConfig:
    def test_config_from_env(self, monkeypatch):
        """Test configuration from environment variables."""
        monkeypatch.setenv("MPESA_CONSUMER_KEY", "env_key")
        monkeypatch.setenv("MPESA_CONSUMER_SECRET", "env_secret")
        monkeypatch.setenv("MPESA_INITIATOR_PASSWORD", "env_password")
        monkeypatch.setenv("MPESA_ENVIRONMENT", "production")
        monkeypatch.setenv("MPESA_TIMEOUT", "12.5")
        monkeypatch.delenv("MPESA_SANDBOX_CERTIFICATE_PATH", raising=False)
        monkeypatch.delenv("MPESA_PRODUCTION_CERTIFICATE_PATH", raising=False)

        config = Config.from_env()

        assert config.consumer_key == "env_key"
        assert config.consumer_secret.get_secret_value() == "env_secret"
        assert config.initiator_password.get_secret_value() == "env_password"
        assert config.environment is Environment.PRODUCTION
        assert config.timeout == 12.5
        assert config.certificate_paths == {}
        assert config.certificate_path is None

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("MPESA_CONSUMER_KEY", "env_key")
        monkeypatch.setenv("MPESA_CONSUMER_SECRET", "env_secret")
        monkeypatch.delenv("MPESA_ENVIRONMENT", raising=False)

        config = Config.from_env(consumer_key="explicit")

        assert config.consumer_key == "explicit"
        assert config.environment is Environment.SANDBOX

    def test_invalid_timeout_env(self, monkeypatch):
        monkeypatch.setenv("MPESA_CONSUMER_KEY", "k")
        monkeypatch.setenv("MPESA_CONSUMER_SECRET", "s")
        monkeypatch.setenv("MPESA_TIMEOUT", "soon")

        with pytest.raises(ConfigurationError, match="MPESA_TIMEOUT"):
            Config.from_env()

    def test_consumer_key_required(self):
        with pytest.raises(ConfigurationError, match="MPESA_CONSUMER_KEY is required"):
            Config(consumer_key="", consumer_secret="s")

    def test_consumer_secret_required(self):
        with pytest.raises(ConfigurationError, match="MPESA_CONSUMER_SECRET is required"):
            Config(consumer_key="k")

    def test_unknown_environment_is_construction_error(self):
        with pytest.raises(ConfigurationError):
            Config(consumer_key="k", consumer_secret="s", environment="staging")

    def test_missing_certificate_path(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Certificate file not found for sandbox"):
            Config(
                consumer_key="k",
                consumer_secret="s",
                certificate_paths={"sandbox": str(tmp_path / "absent.cer")},
            )

    def test_certificate_override_is_per_environment(self, certificate_path):
        config = Config(
            consumer_key="k",
            consumer_secret="s",
            certificate_paths={"Sandbox": certificate_path},
        )

        assert config.certificate_path == certificate_path
        production = config.model_copy(update={"environment": Environment.PRODUCTION})
        assert production.certificate_path is None

    def test_certificate_overrides_from_env(self, monkeypatch, certificate_path):
        monkeypatch.setenv("MPESA_CONSUMER_KEY", "k")
        monkeypatch.setenv("MPESA_CONSUMER_SECRET", "s")
        monkeypatch.setenv("MPESA_ENVIRONMENT", "production")
        monkeypatch.setenv("MPESA_PRODUCTION_CERTIFICATE_PATH", certificate_path)
        monkeypatch.delenv("MPESA_SANDBOX_CERTIFICATE_PATH", raising=False)

        config = Config.from_env()

        assert config.certificate_paths == {Environment.PRODUCTION: certificate_path}
        assert config.certificate_path == certificate_path

    def test_certificate_override_for_unknown_environment(self, certificate_path):
        with pytest.raises(ConfigurationError, match="Unknown environment"):
            Config(
                consumer_key="k",
                consumer_secret="s",
                certificate_paths={"staging": certificate_path},
            )

    def test_repr_redacts_secrets(self):
        config = Config(consumer_key="k", consumer_secret="top-secret", initiator_password="pw!")

        assert "top-secret" not in repr(config)
        assert "pw!" not in repr(config)

    def test_identity_is_immutable(self, config):
        identity = config.identity

        with pytest.raises(Exception):
            identity.consumer_key = "other"

        assert identity.environment is Environment.SANDBOX
