"""Base provider protocol and metadata for llmusage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Literal

from msgspec import Struct, field

from llmusage.config.credentials import Credential
from llmusage.models import ExtraUsage, UsageWindow


class ProviderMetadata(Struct, frozen=True):
    """Metadata about a provider."""

    id: str
    name: str
    description: str
    homepage: str
    credential_kind: Literal["oauth", "apikey"] = "apikey"


class ParsedUsage(Struct, frozen=True):
    """Normalized result of one provider fetch."""

    windows: tuple[UsageWindow, ...] = ()
    extra: dict[str, ExtraUsage] = field(default_factory=dict)


class Provider(ABC):
    """Abstract base class for all providers.

    Each provider must:
    1. Define metadata as a ClassVar
    2. Implement fetch_payload() to retrieve the raw provider response
    3. Implement parse_usage() to normalize that response into windows

    The aggregator only ever calls fetch_usage(), so new providers need no
    changes outside their own package and the registry.
    """

    # Subclasses must define this
    metadata: ClassVar[ProviderMetadata]

    def __init__(self, credential: Credential) -> None:
        self.credential = credential

    @property
    def id(self) -> str:
        """Get provider ID."""
        return self.metadata.id

    @property
    def name(self) -> str:
        """Get provider display name."""
        return self.metadata.name

    @abstractmethod
    async def fetch_payload(self) -> dict:
        """Fetch the raw, decoded provider response.

        Raises:
            TransportError: If the request fails
        """

    @abstractmethod
    def parse_usage(self, payload: dict) -> ParsedUsage:
        """Normalize a raw provider response into usage windows."""

    async def fetch_usage(self) -> ParsedUsage:
        """Fetch and normalize current usage."""
        payload = await self.fetch_payload()
        return self.parse_usage(payload)
