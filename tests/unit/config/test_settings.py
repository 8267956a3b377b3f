"""
Unit tests for configuration resolution.

Tests precedence of flags, environment variables, .env file and defaults.

Usage:
    pytest tests/unit/config
"""

from importlib import metadata

import pytest
from pydantic import ValidationError

from otlpinf import __version__
from otlpinf.config import (
    Config,
    FlagOverrides,
    config_keys,
    env_var_name,
    resolve_config,
)
from otlpinf.domain.exceptions import ConfigDecodeError


class TestResolveConfig:
    """Unit tests for resolve_config."""

    # ================================================================
    # Defaults
    # ================================================================

    def test_defaults(self):
        """Test defaults apply when nothing is set."""
        config = resolve_config()

        assert config.otlp_inf.debug is False
        assert config.otlp_inf.server_host == "localhost"
        assert config.otlp_inf.server_port == 10222

    def test_version_is_build_version(self):
        """Test version comes from the package."""
        config = resolve_config()

        assert config.version == __version__

    def test_version_not_read_from_environment(self, monkeypatch):
        """Test VERSION variable does not override build version."""
        monkeypatch.setenv("VERSION", "9.9.9")

        config = resolve_config()

        assert config.version == __version__

    # ================================================================
    # Port scenarios
    # ================================================================

    def test_env_port_without_flag(self, monkeypatch):
        """Test environment port applies when flag not given."""
        monkeypatch.setenv("OTLP_INF_SERVER_PORT", "9000")

        config = resolve_config(FlagOverrides())

        assert config.otlp_inf.server_port == 9000

    def test_flag_port_beats_env(self, monkeypatch):
        """Test explicit flag overrides environment."""
        monkeypatch.setenv("OTLP_INF_SERVER_PORT", "9000")

        config = resolve_config(FlagOverrides(server_port=8080))

        assert config.otlp_inf.server_port == 8080

    def test_empty_env_treated_as_unset(self, monkeypatch):
        """Test an empty environment variable falls back to the default."""
        monkeypatch.setenv("OTLP_INF_SERVER_PORT", "")
        monkeypatch.setenv("OTLP_INF_SERVER_HOST", "")

        config = resolve_config()

        assert config.otlp_inf.server_port == 10222
        assert config.otlp_inf.server_host == "localhost"

    def test_empty_env_does_not_mask_dotenv(self, isolated_env, monkeypatch):
        """Test an empty environment variable leaves the .env value in place."""
        (isolated_env / ".env").write_text("OTLP_INF_SERVER_PORT=7000\n")
        monkeypatch.setenv("OTLP_INF_SERVER_PORT", "")

        config = resolve_config()

        assert config.otlp_inf.server_port == 7000

    def test_default_port_without_env_or_flag(self):
        """Test default port when neither env nor flag set."""
        config = resolve_config(FlagOverrides())

        assert config.otlp_inf.server_port == 10222

    # ================================================================
    # Precedence
    # ================================================================

    @pytest.mark.parametrize(
        "env_value,flag_value,expected",
        [
            (None, None, "localhost"),
            ("env-host", None, "env-host"),
            (None, "flag-host", "flag-host"),
            ("env-host", "flag-host", "flag-host"),
        ],
    )
    def test_host_precedence(self, monkeypatch, env_value, flag_value, expected):
        """Test flag > env > default for server_host."""
        if env_value is not None:
            monkeypatch.setenv("OTLP_INF_SERVER_HOST", env_value)

        config = resolve_config(FlagOverrides(server_host=flag_value))

        assert config.otlp_inf.server_host == expected

    def test_debug_from_env(self, monkeypatch):
        """Test debug enabled from environment."""
        monkeypatch.setenv("OTLP_INF_DEBUG", "true")

        config = resolve_config()

        assert config.otlp_inf.debug is True

    def test_explicit_false_flag_beats_env(self, monkeypatch):
        """Test an explicitly given false flag still overrides environment."""
        monkeypatch.setenv("OTLP_INF_DEBUG", "true")

        config = resolve_config(FlagOverrides(debug=False))

        assert config.otlp_inf.debug is False

    def test_flags_merge_with_env_per_key(self, monkeypatch):
        """Test flags override only the keys they set."""
        monkeypatch.setenv("OTLP_INF_SERVER_HOST", "env-host")
        monkeypatch.setenv("OTLP_INF_SERVER_PORT", "9000")

        config = resolve_config(FlagOverrides(server_port=8080))

        assert config.otlp_inf.server_host == "env-host"
        assert config.otlp_inf.server_port == 8080

    # ================================================================
    # .env file
    # ================================================================

    def test_dotenv_file_overrides_defaults(self, isolated_env):
        """Test .env in working directory is read."""
        (isolated_env / ".env").write_text("OTLP_INF_SERVER_HOST=dotenv-host\n")

        config = resolve_config()

        assert config.otlp_inf.server_host == "dotenv-host"

    def test_environment_beats_dotenv_file(self, isolated_env, monkeypatch):
        """Test process environment wins over .env."""
        (isolated_env / ".env").write_text("OTLP_INF_SERVER_PORT=7000\n")
        monkeypatch.setenv("OTLP_INF_SERVER_PORT", "9000")

        config = resolve_config()

        assert config.otlp_inf.server_port == 9000

    # ================================================================
    # Decode failures
    # ================================================================

    @pytest.mark.parametrize(
        "name,value",
        [
            ("OTLP_INF_SERVER_PORT", "abc"),
            ("OTLP_INF_SERVER_PORT", "-1"),
            ("OTLP_INF_DEBUG", "maybe"),
        ],
    )
    def test_invalid_env_raises_decode_error(self, monkeypatch, name, value):
        """Test type mismatch raises ConfigDecodeError with cause."""
        monkeypatch.setenv(name, value)

        with pytest.raises(ConfigDecodeError) as exc_info:
            resolve_config()

        assert isinstance(exc_info.value.cause, ValidationError)
        assert exc_info.value.__cause__ is exc_info.value.cause
        assert "start up error (config)" in str(exc_info.value)

    # ================================================================
    # Immutability
    # ================================================================

    def test_config_is_frozen(self):
        """Test resolved config cannot be mutated."""
        config = resolve_config()

        with pytest.raises(ValidationError):
            config.version = "changed"

        with pytest.raises(ValidationError):
            config.otlp_inf.server_port = 1


class TestVersion:
    """Unit tests for the build version."""

    def test_distribution_version_matches_package(self):
        """Test installed metadata reports the package version."""
        assert metadata.version("otlpinf") == __version__


class TestConfigKeys:
    """Unit tests for key and environment name mapping."""

    def test_env_var_name(self):
        """Test dotted key maps to underscore env name."""
        assert env_var_name("otlp_inf.server_port") == "OTLP_INF_SERVER_PORT"
        assert env_var_name("otlp_inf.debug") == "OTLP_INF_DEBUG"

    def test_config_keys(self):
        """Test overridable keys are flattened and exclude version."""
        assert config_keys(Config) == [
            "otlp_inf.debug",
            "otlp_inf.server_host",
            "otlp_inf.server_port",
        ]


class TestFlagOverrides:
    """Unit tests for FlagOverrides."""

    def test_empty_overrides(self):
        """Test no flags produce no init kwargs."""
        assert FlagOverrides().as_settings() == {}

    def test_only_given_flags_included(self):
        """Test None values are dropped."""
        overrides = FlagOverrides(debug=False, server_port=8080)

        assert overrides.as_settings() == {
            "otlp_inf": {"debug": False, "server_port": 8080}
        }
