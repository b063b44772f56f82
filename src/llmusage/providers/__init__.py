"""Provider adapters and the registry that maps IDs to them.

Registration order is the order providers are offered in setup and listed
in help text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from llmusage.config.credentials import Credential

_REGISTRY: dict[str, type[Provider]] = {}


def register_provider(cls: type[Provider]) -> type[Provider]:
    """Add an adapter class to the registry under its metadata ID.

    Raises:
        ValueError: If the class has no metadata
    """
    metadata = getattr(cls, "metadata", None)
    if metadata is None:
        raise ValueError(f"{cls.__name__} has no metadata; cannot register it")
    _REGISTRY[metadata.id] = cls
    return cls


def get_provider(provider_id: str) -> type[Provider] | None:
    return _REGISTRY.get(provider_id)


def get_all_providers() -> dict[str, type[Provider]]:
    """Snapshot of the registry, usable as the aggregator's constructor map."""
    return _REGISTRY.copy()


def list_provider_ids() -> list[str]:
    return [*_REGISTRY]


def provider_name(provider_id: str) -> str:
    """Display name for an ID; unknown IDs are shown upper-cased."""
    cls = _REGISTRY.get(provider_id)
    return cls.metadata.name if cls is not None else provider_id.upper()


def create_provider(provider_id: str, credential: Credential) -> Provider:
    """Instantiate the adapter registered for provider_id.

    Raises:
        ValueError: If nothing is registered under provider_id
    """
    cls = _REGISTRY.get(provider_id)
    if cls is None:
        raise ValueError(f"Unknown provider: {provider_id}")
    return cls(credential)


# Adapters import the models and transport, so they load after the registry
from llmusage.providers.base import ParsedUsage, Provider, ProviderMetadata  # noqa: E402
from llmusage.providers.claude import ClaudeProvider  # noqa: E402
from llmusage.providers.kimi import KimiProvider  # noqa: E402
from llmusage.providers.zai import ZaiProvider  # noqa: E402

for _cls in (ClaudeProvider, KimiProvider, ZaiProvider):
    register_provider(_cls)
del _cls

__all__ = [
    "ClaudeProvider",
    "KimiProvider",
    "ParsedUsage",
    "Provider",
    "ProviderMetadata",
    "ZaiProvider",
    "create_provider",
    "get_all_providers",
    "get_provider",
    "list_provider_ids",
    "provider_name",
    "register_provider",
]
