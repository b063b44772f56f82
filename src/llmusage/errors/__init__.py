"""Error handling for llmusage."""

from llmusage.errors.classify import classify_exception
from llmusage.errors.classify import describe_exception
from llmusage.errors.http import extract_error_message
from llmusage.errors.types import (
    AdapterRegistrationError,
    CredentialExpiredError,
    CredentialStoreError,
    ErrorCategory,
    LLMUsageError,
    NotConfiguredError,
    NotImplementedProviderError,
    ParseError,
    ProviderError,
    TransportError,
)

__all__ = [
    # Core types
    "ErrorCategory",
    "LLMUsageError",
    "ProviderError",
    "NotConfiguredError",
    "CredentialExpiredError",
    "TransportError",
    "ParseError",
    "NotImplementedProviderError",
    "CredentialStoreError",
    "AdapterRegistrationError",
    # Classification
    "classify_exception",
    "describe_exception",
    # HTTP utilities
    "extract_error_message",
]
