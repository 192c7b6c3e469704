"""
Tests for configuration loading and validation.
"""

import logging

import pytest

from procauth.core.config import Config
from procauth.types import ConfigurationError
from procauth.util.config import (
    get_bool_config,
    get_config_value,
    load_config_from_env,
    load_config_file,
    merge_configs,
    save_config_file,
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove PROCAUTH_* variables of the calling environment"""
    for key in ("PROCAUTH_LOG_LEVEL", "PROCAUTH_LOG_FORMAT", "PROCAUTH_WARN_ON_PROFILE_FALLBACK",
                "PROCAUTH_DEFAULT_RESOURCE_FORMAT"):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestConfig:
    """Test the Config dataclass"""

    def test_defaults(self):
        config = Config()

        assert config.log_level == "INFO"
        assert config.warn_on_profile_fallback is True
        assert config.default_resource_format == "json"
        assert config.log_level_value == logging.INFO
        assert config.validate()

    def test_from_env(self, clean_env):
        """Test PROCAUTH_* variables override defaults"""
        clean_env.setenv("PROCAUTH_LOG_LEVEL", "debug")
        clean_env.setenv("PROCAUTH_WARN_ON_PROFILE_FALLBACK", "false")
        clean_env.setenv("PROCAUTH_DEFAULT_RESOURCE_FORMAT", "YAML")

        config = Config.from_env()

        assert config.log_level == "DEBUG"
        assert config.warn_on_profile_fallback is False
        assert config.default_resource_format == "yaml"
        assert config.validate()

    def test_from_env_defaults(self, clean_env):
        assert Config.from_env() == Config()

    def test_from_file(self, tmp_path):
        path = tmp_path / "procauth.yaml"
        path.write_text("log_level: WARNING\nwarn_on_profile_fallback: false\n", encoding="utf-8")

        config = Config.from_file(str(path))

        assert config.log_level == "WARNING"
        assert config.warn_on_profile_fallback is False
        assert config.default_resource_format == "json"

    def test_save_and_load(self, tmp_path):
        path = str(tmp_path / "procauth.json")
        config = Config(log_level="ERROR", default_resource_format="yaml")

        config.save(path)

        assert Config.from_file(path) == config

    def test_from_file_unknown_key(self, tmp_path):
        path = tmp_path / "procauth.json"
        path.write_text('{"log_level": "INFO", "redis_url": "redis://"}', encoding="utf-8")

        with pytest.raises(ConfigurationError) as exc_info:
            Config.from_file(str(path))

        assert exc_info.value.config_key == "redis_url"

    @pytest.mark.parametrize("name, content", [
        ("procauth.json", "{broken"),
        ("procauth.yaml", "- a\n- b\n"),
        ("procauth.ini", "[procauth]"),
    ])
    def test_from_file_malformed(self, tmp_path, name, content):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigurationError):
            Config.from_file(str(path))

    @pytest.mark.parametrize("kwargs, key", [
        ({'log_level': "VERBOSE"}, 'log_level'),
        ({'log_format': ""}, 'log_format'),
        ({'warn_on_profile_fallback': "yes"}, 'warn_on_profile_fallback'),
        ({'default_resource_format': "xml"}, 'default_resource_format'),
    ])
    def test_validate(self, kwargs, key):
        """Test invalid values raise ConfigurationError naming the key"""
        with pytest.raises(ConfigurationError) as exc_info:
            Config(**kwargs).validate()

        assert exc_info.value.details['config_key'] == key
        assert str(exc_info.value).startswith("configuration_error: ")


class TestConfigUtilities:
    """Test the environment and file helpers"""

    def test_load_config_from_env(self, clean_env):
        clean_env.setenv("PROCAUTH_LOG_LEVEL", "DEBUG")

        assert load_config_from_env()["log_level"] == "DEBUG"

    def test_get_config_value(self, clean_env):
        clean_env.setenv("PROCAUTH_LOG_LEVEL", "DEBUG")

        assert get_config_value("log_level") == "DEBUG"
        assert get_config_value("missing", "fallback") == "fallback"

    @pytest.mark.parametrize("value, expected", [
        ("true", True), ("1", True), ("on", True), ("false", False), ("0", False), ("no", False),
    ])
    def test_get_bool_config(self, clean_env, value, expected):
        clean_env.setenv("PROCAUTH_WARN_ON_PROFILE_FALLBACK", value)

        assert get_bool_config("warn_on_profile_fallback", not expected) is expected

    def test_merge_configs(self):
        assert merge_configs({'a': 1, 'b': 1}, None, {'b': 2}) == {'a': 1, 'b': 2}

    def test_file_round_trip(self, tmp_path):
        path = str(tmp_path / "sub" / "config.yml")

        save_config_file({'log_level': 'INFO'}, path)

        assert load_config_file(path) == {'log_level': 'INFO'}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config_file(str(tmp_path / "missing.yaml"))
