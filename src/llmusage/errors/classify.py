"""Exception classification for per-provider error capture."""

from __future__ import annotations

import asyncio

import httpx

from llmusage.errors.types import ErrorCategory
from llmusage.errors.types import ProviderError


def classify_exception(e: BaseException) -> ErrorCategory:
    """Map any exception raised during a fetch to an error category."""
    if isinstance(e, ProviderError):
        return e.category

    if isinstance(e, (httpx.HTTPError, asyncio.TimeoutError, TimeoutError)):
        return ErrorCategory.TRANSPORT

    if isinstance(e, (KeyError, TypeError, ValueError)):
        return ErrorCategory.PARSE

    return ErrorCategory.UNKNOWN


def describe_exception(e: BaseException) -> str:
    """Return a short human-readable reason for an exception."""
    if isinstance(e, (asyncio.TimeoutError, TimeoutError)):
        return "fetch timed out"
    if isinstance(e, httpx.TimeoutException):
        return "request timed out"
    if isinstance(e, httpx.ConnectError):
        return "failed to connect to server"

    message = str(e)
    if not message:
        return type(e).__name__
    return message
