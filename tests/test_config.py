"""Tests for configuration loading."""

import pytest

from pylogto.config import Config, load_config
from pylogto.exceptions import LogtoConfigError

ENV = {
    "LOGTO_ENDPOINT": "https://abc123.logto.app/",
    "LOGTO_M2M_CLIENT_ID": "client",
    "LOGTO_M2M_CLIENT_SECRET": "secret",
}


class TestConfigFromEnv:
    """Tests for Config.from_env."""

    def test_defaults(self):
        """Test endpoint normalization, tenant derivation and default path."""
        config = Config.from_env(ENV)

        assert config.endpoint == "https://abc123.logto.app"
        assert config.tenant_id == "abc123"
        assert config.email_templates_path == "email-templates"
        assert config.resource == "https://abc123.logto.app/api"

    def test_explicit_tenant_for_custom_domain(self):
        """Test LOGTO_TENANT_ID is used for custom domains."""
        env = {
            **ENV,
            "LOGTO_ENDPOINT": "https://auth.example.com",
            "LOGTO_TENANT_ID": "tenant42",
        }

        config = Config.from_env(env)

        assert config.tenant_id == "tenant42"
        assert config.resource == "https://tenant42.logto.app/api"

    def test_custom_domain_without_tenant_fails(self):
        """Test a custom domain without LOGTO_TENANT_ID is rejected."""
        env = {**ENV, "LOGTO_ENDPOINT": "https://auth.example.com"}

        with pytest.raises(LogtoConfigError, match="Cannot extract tenant-id"):
            Config.from_env(env)

    @pytest.mark.parametrize(
        "name", ["LOGTO_ENDPOINT", "LOGTO_M2M_CLIENT_ID", "LOGTO_M2M_CLIENT_SECRET"]
    )
    def test_missing_required_variable(self, name):
        """Test each required variable is named when missing."""
        env = {k: v for k, v in ENV.items() if k != name}

        with pytest.raises(LogtoConfigError, match=f"Missing required env var: {name}"):
            Config.from_env(env)

    def test_templates_path_is_trimmed(self):
        """Test slashes around LOGTO_EMAIL_TEMPLATES_PATH are removed."""
        env = {**ENV, "LOGTO_EMAIL_TEMPLATES_PATH": "/custom/templates/"}

        assert Config.from_env(env).email_templates_path == "custom/templates"


class TestLoadConfig:
    """Tests for load_config."""

    def test_reads_env_file(self, tmp_path):
        """Test values come from the .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text(
            "LOGTO_ENDPOINT=https://fromfile.logto.app\n"
            "LOGTO_M2M_CLIENT_ID=file-client\n"
            "LOGTO_M2M_CLIENT_SECRET=file-secret\n"
        )

        config = load_config(env_file, environ={})

        assert config.tenant_id == "fromfile"
        assert config.client_id == "file-client"

    def test_environment_wins_over_env_file(self, tmp_path):
        """Test process environment values take precedence."""
        env_file = tmp_path / ".env"
        env_file.write_text(
            "LOGTO_ENDPOINT=https://fromfile.logto.app\n"
            "LOGTO_M2M_CLIENT_ID=file-client\n"
            "LOGTO_M2M_CLIENT_SECRET=file-secret\n"
        )

        config = load_config(env_file, environ={"LOGTO_M2M_CLIENT_ID": "env-client"})

        assert config.client_id == "env-client"
        assert config.client_secret == "file-secret"

    def test_missing_env_file_is_ignored(self, tmp_path):
        """Test a missing .env file falls back to the environment."""
        config = load_config(tmp_path / "missing.env", environ=ENV)

        assert config.client_id == "client"
