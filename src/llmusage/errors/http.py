"""HTTP error helpers for provider transports."""

from __future__ import annotations

import httpx


def extract_error_message(response: httpx.Response) -> str:
    """Extract a meaningful error message from an HTTP response.

    Args:
        response: HTTP response with error status

    Returns:
        Extracted error message
    """
    status = response.status_code

    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("error", "message", "detail", "error_description"):
            if key not in body:
                continue
            value = body[key]
            if isinstance(value, str):
                return value
            if isinstance(value, dict):
                # Anthropic nests {"error": {"type": ..., "message": ...}}
                for nested_key in ("message", "description"):
                    if nested_key in value:
                        return str(value[nested_key])

    text = response.text.strip()
    if text and len(text) < 200:
        return text

    return f"HTTP {status}"
