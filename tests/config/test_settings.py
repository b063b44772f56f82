"""Tests for configuration loading and paths."""

import pytest

from llmusage.config import paths
from llmusage.config.settings import (
    Config,
    FetchConfig,
    get_config,
    load_config,
    reload_config,
    save_config,
)


class TestPaths:
    """Tests for config paths."""

    def test_env_override(self, isolated_config):
        assert paths.config_dir() == isolated_config
        assert paths.config_file() == isolated_config / "config.toml"
        assert paths.credentials_file() == isolated_config / "credentials.json"

    def test_claude_cli_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert paths.claude_cli_credentials_file() == tmp_path / ".claude" / ".credentials.json"


class TestConfig:
    """Tests for the Config struct."""

    def test_defaults(self):
        config = Config()
        assert config.enabled_providers == []
        assert config.log_level == "warning"
        assert config.fetch.timeout == 30.0
        assert config.fetch.max_concurrent == 5
        assert config.display.bar_width == 20
        assert config.credentials.use_keyring is False

    def test_empty_enables_everything(self):
        assert Config().is_provider_enabled("kimi")

    def test_enabled_providers(self):
        config = Config(enabled_providers=["claude"])
        assert config.is_provider_enabled("claude")
        assert not config.is_provider_enabled("kimi")


class TestLoadConfig:
    """Tests for loading config from TOML and the environment."""

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "missing.toml") == Config()

    def test_load_toml(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            'enabled_providers = ["kimi"]\n'
            "\n"
            "[fetch]\n"
            "timeout = 5.0\n"
            "max_concurrent = 2\n"
            "\n"
            "[display]\n"
            "show_extra = false\n"
        )

        config = load_config(path)

        assert config.enabled_providers == ["kimi"]
        assert config.fetch == FetchConfig(timeout=5.0, max_concurrent=2)
        assert config.display.show_extra is False
        assert config.display.bar_width == 20

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LLMUSAGE_ENABLED_PROVIDERS", "claude, zai,")
        monkeypatch.setenv("LLMUSAGE_LOG_LEVEL", "DEBUG")

        config = load_config(tmp_path / "missing.toml")

        assert config.enabled_providers == ["claude", "zai"]
        assert config.log_level == "debug"

    def test_invalid_type_raises(self, tmp_path):
        import msgspec

        path = tmp_path / "config.toml"
        path.write_text('[fetch]\ntimeout = "soon"\n')

        with pytest.raises(msgspec.ValidationError):
            load_config(path)


class TestSaveConfig:
    """Tests for saving config."""

    def test_save_and_reload(self, isolated_config):
        save_config(Config(enabled_providers=["kimi"], fetch=FetchConfig(timeout=12.0)))

        assert (isolated_config / "config.toml").exists()
        assert get_config().enabled_providers == ["kimi"]

        reloaded = reload_config()
        assert reloaded.enabled_providers == ["kimi"]
        assert reloaded.fetch.timeout == 12.0

    def test_get_config_is_cached(self):
        assert get_config() is get_config()
