"""Kimi (Moonshot) coding plan provider for llmusage."""

from __future__ import annotations

from llmusage.providers.base import ParsedUsage
from llmusage.providers.base import Provider
from llmusage.providers.base import ProviderMetadata
from llmusage.providers.kimi.api import fetch_usages
from llmusage.providers.kimi.api import parse_usages


class KimiProvider(Provider):
    """Provider for Kimi coding plan quota and rate limits."""

    metadata = ProviderMetadata(
        id="kimi",
        name="Kimi",
        description="Moonshot's Kimi coding plan",
        homepage="https://www.kimi.com",
        credential_kind="apikey",
    )

    async def fetch_payload(self) -> dict:
        return await fetch_usages(self.credential.secret)

    def parse_usage(self, payload: dict) -> ParsedUsage:
        return parse_usages(payload)
