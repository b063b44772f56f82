"""User settings for llmusage, read from config.toml.

Every section is optional; missing keys fall back to the defaults below.
LLMUSAGE_* environment variables win over the file.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

import msgspec
import tomli_w

FETCH_TIMEOUT_SECONDS = 30.0
FETCH_CONCURRENCY = 5
BAR_WIDTH = 20
LOG_LEVEL = "warning"


class DisplayConfig(msgspec.Struct, omit_defaults=True):
    """How the pretty renderer lays out windows."""

    bar_width: int = BAR_WIDTH
    show_extra: bool = True


class FetchConfig(msgspec.Struct, omit_defaults=True):
    """Per-provider timeout and the aggregator's concurrency bound."""

    timeout: float = FETCH_TIMEOUT_SECONDS
    max_concurrent: int = FETCH_CONCURRENCY


class CredentialsConfig(msgspec.Struct, omit_defaults=True):
    use_keyring: bool = False


class Config(msgspec.Struct, omit_defaults=True):
    """Top-level settings."""

    enabled_providers: list[str] = []
    log_level: str = LOG_LEVEL
    display: DisplayConfig = msgspec.field(default_factory=DisplayConfig)
    fetch: FetchConfig = msgspec.field(default_factory=FetchConfig)
    credentials: CredentialsConfig = msgspec.field(default_factory=CredentialsConfig)

    def is_provider_enabled(self, provider_id: str) -> bool:
        """True when no allow-list is set or the provider is on it."""
        return not self.enabled_providers or provider_id in self.enabled_providers


def convert_config(data: dict) -> Config:
    """Validate raw TOML data into a Config.

    Raises:
        msgspec.ValidationError: If a value has the wrong type
    """
    return msgspec.convert(data, type=Config)


def _read_toml(path: Path) -> dict:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return {}


def _with_env(config: Config) -> Config:
    """Layer LLMUSAGE_ENABLED_PROVIDERS and LLMUSAGE_LOG_LEVEL over config."""
    changes = {}

    providers = os.environ.get("LLMUSAGE_ENABLED_PROVIDERS")
    if providers is not None:
        changes["enabled_providers"] = [p.strip() for p in providers.split(",") if p.strip()]

    log_level = os.environ.get("LLMUSAGE_LOG_LEVEL")
    if log_level:
        changes["log_level"] = log_level.lower()

    return msgspec.structs.replace(config, **changes) if changes else config


def load_config(path: Path | None = None) -> Config:
    """Read settings from path (default: config.toml in the config dir)."""
    from .paths import config_file

    return _with_env(convert_config(_read_toml(path or config_file())))


def save_config(config: Config, path: Path | None = None) -> None:
    """Write settings as TOML and make them the active config."""
    from .paths import config_file

    global _config

    target = path or config_file()
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("wb") as f:
        tomli_w.dump(msgspec.to_builtins(config), f)
    _config = config


_config: Config | None = None


def get_config() -> Config:
    """Return the active config, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Drop the cached config and read it again."""
    global _config
    _config = load_config()
    return _config
