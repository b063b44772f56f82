"""Claude (Anthropic) provider for llmusage."""

from __future__ import annotations

from llmusage.providers.base import ParsedUsage
from llmusage.providers.base import Provider
from llmusage.providers.base import ProviderMetadata
from llmusage.providers.claude.oauth import fetch_oauth_usage
from llmusage.providers.claude.oauth import parse_oauth_usage


class ClaudeProvider(Provider):
    """Provider for Claude Pro/Max subscription usage."""

    metadata = ProviderMetadata(
        id="claude",
        name="Claude",
        description="Anthropic's Claude AI assistant (Pro/Max subscription)",
        homepage="https://claude.ai",
        credential_kind="oauth",
    )

    async def fetch_payload(self) -> dict:
        return await fetch_oauth_usage(self.credential.secret)

    def parse_usage(self, payload: dict) -> ParsedUsage:
        return parse_oauth_usage(payload)
