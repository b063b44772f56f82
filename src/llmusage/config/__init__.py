"""Configuration management for llmusage."""

from llmusage.config.credentials import (
    DEFAULT_ACCOUNT,
    Credential,
    CredentialStore,
    InMemoryCredentialStore,
    check_credential_permissions,
    write_credential,
)
from llmusage.config.keyring import (
    delete_from_keyring,
    get_from_keyring,
    keyring_key,
    store_in_keyring,
    use_keyring,
)
from llmusage.config.paths import (
    claude_cli_credentials_file,
    config_dir,
    config_file,
    credentials_file,
)
from llmusage.config.settings import (
    Config,
    CredentialsConfig,
    DisplayConfig,
    FetchConfig,
    get_config,
    load_config,
    reload_config,
    save_config,
)

__all__ = [
    # paths
    "config_dir",
    "config_file",
    "credentials_file",
    "claude_cli_credentials_file",
    # settings
    "Config",
    "CredentialsConfig",
    "DisplayConfig",
    "FetchConfig",
    "get_config",
    "load_config",
    "reload_config",
    "save_config",
    # credentials
    "DEFAULT_ACCOUNT",
    "Credential",
    "CredentialStore",
    "InMemoryCredentialStore",
    "check_credential_permissions",
    "write_credential",
    # keyring
    "use_keyring",
    "keyring_key",
    "store_in_keyring",
    "get_from_keyring",
    "delete_from_keyring",
]
