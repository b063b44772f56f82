"""Usage endpoint and normalization for the Kimi provider.

Kimi reports usage as a list of scopes, each with a quota detail and any
number of nested rate-limit buckets. All amounts arrive as strings:

{
    "usages": [
        {
            "scope": "FEATURE_CODING",
            "detail": {"limit": "100", "used": "13", "remaining": "87",
                       "resetTime": "2026-02-06T08:31:59.863136Z"},
            "limits": [
                {
                    "window": {"duration": 300, "timeUnit": "TIME_UNIT_MINUTE"},
                    "detail": {"limit": "100", "used": "65", "remaining": "35",
                               "resetTime": "2026-01-30T13:31:59.863136Z"}
                }
            ]
        }
    ]
}
"""

from __future__ import annotations

import re
from datetime import datetime

import structlog

from llmusage.core.http import request_json
from llmusage.errors.types import ParseError
from llmusage.models import UsageWindow
from llmusage.providers.base import ParsedUsage

logger = structlog.get_logger()

USAGE_URL = "https://api.kimi.com/coding/v1/usages"
TIME_UNIT_PREFIX = "TIME_UNIT_"

# fromisoformat only takes microseconds; providers may send nanoseconds
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


async def fetch_usages(api_key: str) -> dict:
    """Fetch the raw usage response with an API key."""
    return await request_json(
        USAGE_URL,
        headers={"Authorization": f"Bearer {api_key}"},
    )


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp with optional fraction and offset.

    Returns None for empty or unparsable values and for values without a
    timezone offset.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(_FRACTION_RE.sub(r"\1", value))
    except ValueError:
        return None
    # A reset time without an offset is ambiguous
    if parsed.tzinfo is None:
        return None
    return parsed


def _parse_amount(value: object) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def format_scope_label(scope: str) -> str:
    """Convert FEATURE_CODING to "Feature Coding"."""
    return " ".join(part[:1].upper() + part[1:].lower() for part in scope.split("_"))


def format_duration_label(duration: int, time_unit: str) -> str:
    """Convert (5, "TIME_UNIT_MINUTES") to "5-Minute Rate Limit".

    Only a single trailing "s" is dropped; irregular plurals are not handled.
    """
    unit = time_unit.removeprefix(TIME_UNIT_PREFIX).lower().removesuffix("s")
    unit = unit[:1].upper() + unit[1:]
    return f"{duration}-{unit} Rate Limit"


def parse_detail(label: str, detail: dict | None) -> UsageWindow | None:
    """Build a window from a limit/used/resetTime detail.

    Returns None when limit or used is not numeric. A zero limit gives a
    non-finite utilization, which renderers show as N/A.
    """
    if not isinstance(detail, dict):
        detail = {}
    limit = _parse_amount(detail.get("limit"))
    used = _parse_amount(detail.get("used"))
    if limit is None or used is None:
        logger.debug(
            "kimi_window_skipped",
            label=label,
            limit=detail.get("limit"),
            used=detail.get("used"),
        )
        return None

    if limit == 0:
        utilization = float("nan") if used == 0 else float("inf")
    else:
        utilization = used / limit * 100

    return UsageWindow(
        label=label,
        utilization=utilization,
        resets_at=parse_timestamp(detail.get("resetTime")),
        limit=limit,
        used=used,
        remaining=limit - used,
    )


def parse_limit(limit: object) -> UsageWindow | None:
    """Build a rate-limit window from a {"window", "detail"} entry.

    Returns None for malformed entries, including a non-integer duration.
    """
    if not isinstance(limit, dict):
        logger.debug("kimi_window_skipped", entry=limit)
        return None

    window = limit.get("window")
    if not isinstance(window, dict):
        window = {}
    try:
        duration = int(window.get("duration") or 0)
    except (TypeError, ValueError, OverflowError):
        logger.debug("kimi_window_skipped", duration=window.get("duration"))
        return None

    label = format_duration_label(duration, str(window.get("timeUnit", "")))
    return parse_detail(label, limit.get("detail"))


def parse_usages(data: dict) -> ParsedUsage:
    """Normalize a Kimi usage response.

    Each item contributes its scope window followed by its rate-limit
    windows, in payload order.
    """
    items = data.get("usages") or []
    if not isinstance(items, list):
        raise ParseError("'usages' is not a list")

    windows = []
    for item in items:
        if not isinstance(item, dict):
            continue

        scope_window = parse_detail(
            format_scope_label(str(item.get("scope", ""))), item.get("detail")
        )
        if scope_window is not None:
            windows.append(scope_window)

        limits = item.get("limits")
        for limit in limits if isinstance(limits, list) else []:
            limit_window = parse_limit(limit)
            if limit_window is not None:
                windows.append(limit_window)

    logger.debug("kimi_usage_parsed", windows=len(windows))
    return ParsedUsage(windows=tuple(windows))
