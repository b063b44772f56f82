"""Z.AI provider for llmusage.

The rate-limit endpoint behind https://z.ai/manage-apikey/rate-limits is not
integrated yet, so every fetch fails with a not-implemented error.
"""

from __future__ import annotations

from llmusage.errors.types import NotImplementedProviderError
from llmusage.providers.base import ParsedUsage
from llmusage.providers.base import Provider
from llmusage.providers.base import ProviderMetadata

NOT_IMPLEMENTED_MESSAGE = "Z.AI provider not yet implemented"


class ZaiProvider(Provider):
    """Placeholder provider for Z.AI."""

    metadata = ProviderMetadata(
        id="zai",
        name="Z.AI",
        description="Zhipu's Z.AI GLM coding plan",
        homepage="https://z.ai",
        credential_kind="apikey",
    )

    async def fetch_payload(self) -> dict:
        raise NotImplementedProviderError(NOT_IMPLEMENTED_MESSAGE)

    def parse_usage(self, payload: dict) -> ParsedUsage:
        raise NotImplementedProviderError(NOT_IMPLEMENTED_MESSAGE)
