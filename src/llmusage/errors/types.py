"""Error types and classifications."""

from __future__ import annotations

from enum import StrEnum


class ErrorCategory(StrEnum):
    """Why a provider produced no usable windows."""

    NOT_CONFIGURED = "not_configured"
    CREDENTIAL_EXPIRED = "credential_expired"
    TRANSPORT = "transport"
    PARSE = "parse"
    NOT_IMPLEMENTED = "not_implemented"
    UNKNOWN = "unknown"


class LLMUsageError(Exception):
    """Base class for llmusage errors."""


class ProviderError(LLMUsageError):
    """A failure scoped to a single provider fetch."""

    category: ErrorCategory = ErrorCategory.UNKNOWN


class NotConfiguredError(ProviderError):
    """No stored credential for the requested account."""

    category = ErrorCategory.NOT_CONFIGURED


class CredentialExpiredError(ProviderError):
    """The stored credential's expiry has passed."""

    category = ErrorCategory.CREDENTIAL_EXPIRED


class TransportError(ProviderError):
    """Network failure, non-2xx status or malformed top-level payload."""

    category = ErrorCategory.TRANSPORT

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(ProviderError):
    """The payload decoded but does not have the expected shape."""

    category = ErrorCategory.PARSE


class NotImplementedProviderError(ProviderError):
    """Provider recognized but its integration is incomplete."""

    category = ErrorCategory.NOT_IMPLEMENTED


class CredentialStoreError(LLMUsageError):
    """Invalid operation against the credential store."""


class AdapterRegistrationError(RuntimeError):
    """A registered provider constructor did not produce an adapter.

    This is a programming error and aborts the whole run.
    """
