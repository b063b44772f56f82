"""Credential storage for llmusage.

Credentials are kept per provider and per account in a single JSON file with
0o600 permissions. Insertion order is preserved and defines the order in
which accounts are queried and displayed.
"""

from __future__ import annotations

import stat
from datetime import UTC
from datetime import datetime
from datetime import timedelta
from pathlib import Path

import msgspec
import structlog

from llmusage.config.keyring import delete_from_keyring
from llmusage.config.keyring import get_from_keyring
from llmusage.config.keyring import store_in_keyring
from llmusage.config.keyring import use_keyring
from llmusage.config.paths import claude_cli_credentials_file
from llmusage.config.paths import credentials_file
from llmusage.errors.types import CredentialStoreError

logger = structlog.get_logger()

DEFAULT_ACCOUNT = "default"


class Credential(msgspec.Struct, frozen=True, omit_defaults=True):
    """A stored secret (OAuth access token or API key)."""

    secret: str
    expires_at: datetime | None = None
    refresh_token: str | None = None
    in_keyring: bool = False  # Secret lives in the system keyring

    def expiry(self) -> datetime | None:
        """Return expires_at, reading a timezone-less value as UTC."""
        if self.expires_at is None or self.expires_at.tzinfo is not None:
            return self.expires_at
        return self.expires_at.replace(tzinfo=UTC)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check if the credential's expiry has passed."""
        expiry = self.expiry()
        if expiry is None:
            return False
        now = now or datetime.now(UTC)
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        return now >= expiry

    def expires_in(self) -> timedelta | None:
        """Return time until expiry, negative once expired."""
        expiry = self.expiry()
        if expiry is None:
            return None
        return expiry - datetime.now(UTC)


class CredentialFile(msgspec.Struct, omit_defaults=True):
    """On-disk layout of the credential store."""

    version: int = 1
    providers: dict[str, dict[str, Credential]] = msgspec.field(default_factory=dict)


def write_credential(path: Path, content: bytes) -> None:
    """Securely write credential to file with 0o600 permissions."""
    path.parent.mkdir(parents=True, exist_ok=True)

    # Write to temp file first, then rename for atomicity
    temp_path = path.with_suffix(".tmp")
    temp_path.write_bytes(content)
    temp_path.chmod(stat.S_IRUSR | stat.S_IWUSR)  # 0o600
    temp_path.replace(path)


def check_credential_permissions(path: Path) -> bool:
    """Verify credential file has secure permissions (0o600 or stricter)."""
    if not path.exists():
        return True

    mode = path.stat().st_mode
    return not (mode & (stat.S_IRGRP | stat.S_IWGRP | stat.S_IROTH | stat.S_IWOTH))


class CredentialStore:
    """File-backed credential store with an explicit open/close lifecycle.

    Usage:
        with CredentialStore() as store:
            credential = store.resolve("claude", "default")
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or credentials_file()
        self._data: CredentialFile | None = None
        self._dirty = False

    def __enter__(self) -> CredentialStore:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._data is not None

    def open(self) -> None:
        """Load the store into memory."""
        self._data = self._load()
        self._dirty = False

    def close(self) -> None:
        """Persist pending changes and release the in-memory state."""
        if self._data is not None and self._dirty:
            self._save(self._data)
        self._data = None
        self._dirty = False

    def _load(self) -> CredentialFile:
        if not self.path.exists():
            return CredentialFile()

        if not check_credential_permissions(self.path):
            raise CredentialStoreError(
                f"{self.path} is readable by other users; run 'chmod 600 {self.path}'"
            )

        try:
            return msgspec.json.decode(self.path.read_bytes(), type=CredentialFile)
        except msgspec.DecodeError as e:
            raise CredentialStoreError(f"corrupt credential store {self.path}: {e}") from e

    def _save(self, data: CredentialFile) -> None:
        write_credential(self.path, msgspec.json.encode(data))
        logger.debug("credential_store_saved", path=str(self.path))

    def _providers(self) -> dict[str, dict[str, Credential]]:
        if self._data is None:
            raise CredentialStoreError("credential store is not open")
        return self._data.providers

    def accounts(self, provider_id: str | None = None) -> list[tuple[str, str]]:
        """Return (provider, account) pairs in configuration order."""
        return [
            (pid, account)
            for pid, accounts in self._providers().items()
            if provider_id is None or pid == provider_id
            for account in accounts
        ]

    def resolve(self, provider_id: str, account: str = DEFAULT_ACCOUNT) -> Credential | None:
        """Return the credential for an account, or None if not stored."""
        credential = self._providers().get(provider_id, {}).get(account)
        if credential is None or not credential.in_keyring:
            return credential

        secret = get_from_keyring(provider_id, account)
        if secret is None:
            logger.warning("keyring_secret_missing", provider=provider_id, account=account)
            return None
        return msgspec.structs.replace(credential, secret=secret)

    def add(
        self,
        provider_id: str,
        account: str,
        credential: Credential,
        replace: bool = False,
    ) -> None:
        """Store a credential for a new account.

        Raises:
            CredentialStoreError: If the account exists and replace is False
        """
        if not account:
            raise CredentialStoreError("account name cannot be empty")
        if not credential.secret:
            raise CredentialStoreError("credential cannot be empty")

        accounts = self._providers().setdefault(provider_id, {})
        if account in accounts and not replace:
            raise CredentialStoreError(
                f"account '{account}' already exists for {provider_id}"
            )

        if use_keyring() and store_in_keyring(provider_id, account, credential.secret):
            credential = msgspec.structs.replace(credential, secret="", in_keyring=True)

        accounts[account] = credential
        self._dirty = True

    def rename(self, provider_id: str, old_name: str, new_name: str) -> None:
        """Rename an account, keeping its position."""
        if not new_name:
            raise CredentialStoreError("account name cannot be empty")

        accounts = self._providers().get(provider_id, {})
        if old_name not in accounts:
            raise CredentialStoreError(f"account '{old_name}' not found for {provider_id}")
        if new_name in accounts:
            raise CredentialStoreError(
                f"account '{new_name}' already exists for {provider_id}"
            )

        credential = accounts[old_name]
        if credential.in_keyring:
            secret = get_from_keyring(provider_id, old_name)
            if secret is None or not store_in_keyring(provider_id, new_name, secret):
                raise CredentialStoreError(f"failed to move keyring secret for '{old_name}'")
            delete_from_keyring(provider_id, old_name)

        self._providers()[provider_id] = {
            (new_name if name == old_name else name): value
            for name, value in accounts.items()
        }
        self._dirty = True

    def remove(self, provider_id: str, account: str) -> None:
        """Remove an account; drops the provider once it has no accounts."""
        providers = self._providers()
        accounts = providers.get(provider_id, {})
        if account not in accounts:
            raise CredentialStoreError(f"account '{account}' not found for {provider_id}")

        credential = accounts.pop(account)
        if credential.in_keyring:
            delete_from_keyring(provider_id, account)
        if not accounts:
            del providers[provider_id]
        self._dirty = True

    def migrate_claude_cli(
        self,
        path: Path | None = None,
        account: str = DEFAULT_ACCOUNT,
    ) -> Credential:
        """Import the Claude CLI's OAuth credentials as a claude account.

        Reads {"claudeAiOauth": {"accessToken", "refreshToken", "expiresAt"}}
        where expiresAt is a millisecond epoch timestamp. An existing account
        with the same name is replaced.
        """
        source = path or claude_cli_credentials_file()
        if not source.exists():
            raise CredentialStoreError(
                f"credentials file not found at {source} - "
                "please run 'claude' first to authenticate"
            )

        try:
            data = msgspec.json.decode(source.read_bytes())
        except msgspec.DecodeError as e:
            raise CredentialStoreError(f"failed to parse credentials: {e}") from e

        oauth = data.get("claudeAiOauth") if isinstance(data, dict) else None
        if not isinstance(oauth, dict):
            raise CredentialStoreError(
                "no OAuth credentials found - please run 'claude' to authenticate"
            )

        access_token = oauth.get("accessToken")
        if not access_token:
            raise CredentialStoreError("no access token found in credentials")

        expires_at = None
        if isinstance(oauth.get("expiresAt"), (int, float)):
            expires_at = datetime.fromtimestamp(oauth["expiresAt"] / 1000, tz=UTC)

        credential = Credential(
            secret=access_token,
            expires_at=expires_at,
            refresh_token=oauth.get("refreshToken"),
        )
        self.add("claude", account, credential, replace=True)
        logger.info("claude_cli_migrated", account=account, source=str(source))
        return credential


class InMemoryCredentialStore(CredentialStore):
    """Credential store that never touches the filesystem."""

    def __init__(self, providers: dict[str, dict[str, Credential]] | None = None) -> None:
        super().__init__(path=Path("/dev/null"))
        self._initial = providers or {}

    def _load(self) -> CredentialFile:
        return CredentialFile(
            providers={pid: dict(accounts) for pid, accounts in self._initial.items()}
        )

    def _save(self, data: CredentialFile) -> None:
        self._initial = data.providers
