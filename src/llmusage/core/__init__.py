"""Core orchestration and utilities for llmusage."""

from llmusage.core.aggregate import (
    AccountEntry,
    aggregate,
    configured_entries,
    fetch_configured_usage,
    fetch_entry,
)
from llmusage.core.http import cleanup, get_http_client, get_timeout_config, request_json

__all__ = [
    # http
    "get_http_client",
    "cleanup",
    "get_timeout_config",
    "request_json",
    # aggregate
    "AccountEntry",
    "aggregate",
    "configured_entries",
    "fetch_configured_usage",
    "fetch_entry",
]
