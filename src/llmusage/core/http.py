"""Shared async HTTP transport for provider adapters."""

from contextlib import asynccontextmanager

import httpx
import structlog

from llmusage import __version__
from llmusage.config.settings import get_config
from llmusage.errors.http import extract_error_message
from llmusage.errors.types import TransportError

logger = structlog.get_logger()

USER_AGENT = f"llmusage/{__version__}"
CONNECT_TIMEOUT = 10.0

# One pooled client per process, created lazily
_client: httpx.AsyncClient | None = None


def get_timeout_config() -> httpx.Timeout:
    """Build request timeouts from the fetch settings."""
    return httpx.Timeout(get_config().fetch.timeout, connect=CONNECT_TIMEOUT)


def _new_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=get_timeout_config(),
        limits=httpx.Limits(max_connections=20, max_keepalive_connections=5),
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        follow_redirects=True,
    )


@asynccontextmanager
async def get_http_client():
    """Yield the pooled client; leaving the block does not close it.

    Usage:
        async with get_http_client() as client:
            response = await client.get(url)
    """
    global _client
    if _client is None:
        _client = _new_client()
    yield _client


async def cleanup() -> None:
    """Close the pooled client. Call once the run is over."""
    global _client
    client, _client = _client, None
    if client is not None:
        await client.aclose()


async def request_json(url: str, headers: dict[str, str] | None = None) -> dict:
    """GET url and return its JSON object body.

    Raises:
        TransportError: On network failure, non-2xx status, or a body that
            is not a JSON object
    """
    logger.debug("http_request", url=url)
    try:
        async with get_http_client() as client:
            response = await client.get(url, headers=headers)
    except httpx.TimeoutException as e:
        raise TransportError(f"request timed out: {url}") from e
    except httpx.HTTPError as e:
        raise TransportError(f"request failed: {e}") from e

    if not response.is_success:
        raise TransportError(
            f"API request failed with status {response.status_code}: "
            f"{extract_error_message(response)}",
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError as e:
        raise TransportError("invalid JSON in response body") from e

    if not isinstance(data, dict):
        raise TransportError("unexpected response payload")
    return data
