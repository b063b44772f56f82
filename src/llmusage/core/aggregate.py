"""Multi-provider usage aggregation.

Every configured (provider, account) pair yields exactly one Usage entry,
in configuration order, whatever happens to the individual fetches.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping, Sequence

import msgspec
import structlog

from llmusage.config.credentials import DEFAULT_ACCOUNT
from llmusage.config.credentials import Credential
from llmusage.config.credentials import CredentialStore
from llmusage.config.settings import get_config
from llmusage.errors.classify import classify_exception
from llmusage.errors.classify import describe_exception
from llmusage.errors.types import AdapterRegistrationError
from llmusage.errors.types import ErrorCategory
from llmusage.models import Usage
from llmusage.models import UsageStats
from llmusage.providers import get_all_providers
from llmusage.providers.base import Provider

logger = structlog.get_logger()

ProviderConstructor = Callable[[Credential], Provider]


class AccountEntry(msgspec.Struct, frozen=True):
    """One configured provider account to fetch."""

    provider_id: str
    account: str = DEFAULT_ACCOUNT
    credential: Credential | None = None


def _display_name(constructor: ProviderConstructor, provider_id: str) -> str:
    metadata = getattr(constructor, "metadata", None)
    return metadata.name if metadata is not None else provider_id


async def fetch_entry(
    entry: AccountEntry,
    registry: Mapping[str, ProviderConstructor],
    timeout: float,
) -> Usage:
    """Fetch one account, capturing any failure in the returned Usage.

    Raises:
        AdapterRegistrationError: If a registered constructor returns None
    """
    provider_id, account = entry.provider_id, entry.account
    log = logger.bind(provider=provider_id, account=account)

    constructor = registry.get(provider_id)
    if constructor is None:
        log.warning("provider_unknown")
        return Usage.failed(
            provider_id, f"{provider_id}: unknown provider", ErrorCategory.NOT_CONFIGURED, account
        )

    name = _display_name(constructor, provider_id)
    if entry.credential is None:
        return Usage.failed(
            provider_id, f"{name}: not configured", ErrorCategory.NOT_CONFIGURED, account
        )
    if entry.credential.is_expired():
        return Usage.failed(
            provider_id,
            f"{name}: credential expired",
            ErrorCategory.CREDENTIAL_EXPIRED,
            account,
        )

    try:
        provider = constructor(entry.credential)
    except Exception as e:
        log.warning("provider_init_failed", error=str(e))
        return Usage.failed(
            provider_id, f"{name}: {describe_exception(e)}", classify_exception(e), account
        )

    if provider is None:
        raise AdapterRegistrationError(f"constructor for '{provider_id}' returned no adapter")

    log.debug("provider_fetch_start")
    try:
        parsed = await asyncio.wait_for(provider.fetch_usage(), timeout=timeout)
    except Exception as e:
        category = classify_exception(e)
        log.warning("provider_fetch_failed", category=str(category), error=describe_exception(e))
        return Usage.failed(provider_id, f"{name}: {describe_exception(e)}", category, account)

    log.debug("provider_fetch_done", windows=len(parsed.windows))
    return Usage(
        provider=provider_id,
        account=account,
        windows=parsed.windows,
        extra=parsed.extra,
    )


async def aggregate(
    entries: Sequence[AccountEntry],
    registry: Mapping[str, ProviderConstructor] | None = None,
    timeout: float | None = None,
    max_concurrent: int | None = None,
) -> UsageStats:
    """Fetch every entry and collect the results in entry order.

    Fetches run concurrently, bounded by max_concurrent; asyncio.gather
    keeps results aligned with the input order.
    """
    config = get_config()
    if registry is None:
        registry = get_all_providers()
    if timeout is None:
        timeout = config.fetch.timeout
    if max_concurrent is None:
        max_concurrent = config.fetch.max_concurrent

    semaphore = asyncio.Semaphore(max(1, max_concurrent))

    async def bounded_fetch(entry: AccountEntry) -> Usage:
        async with semaphore:
            return await fetch_entry(entry, registry, timeout)

    results = await asyncio.gather(*(bounded_fetch(entry) for entry in entries))
    return UsageStats(providers=tuple(results))


def configured_entries(
    store: CredentialStore,
    provider_filter: str | None = None,
) -> list[AccountEntry]:
    """Build the ordered entry list from an open credential store.

    Providers named explicitly (by filter or enabled_providers) without any
    stored account still get an entry, which then reports "not configured".
    """
    config = get_config()
    entries = []
    for provider_id, account in store.accounts(provider_filter):
        if provider_filter is None and not config.is_provider_enabled(provider_id):
            continue
        entries.append(
            AccountEntry(
                provider_id=provider_id,
                account=account,
                credential=store.resolve(provider_id, account),
            )
        )

    requested = [provider_filter] if provider_filter else config.enabled_providers
    seen = {entry.provider_id for entry in entries}
    for provider_id in requested:
        if provider_id not in seen:
            entries.append(AccountEntry(provider_id=provider_id))
            seen.add(provider_id)

    return entries


async def fetch_configured_usage(
    store: CredentialStore,
    provider_filter: str | None = None,
) -> UsageStats:
    """Fetch usage for every stored account (or one provider's accounts)."""
    return await aggregate(configured_entries(store, provider_filter))
