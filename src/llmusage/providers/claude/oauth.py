"""OAuth usage endpoint for the Claude provider."""

from __future__ import annotations

from datetime import datetime

import msgspec
import structlog

from llmusage.core.http import request_json
from llmusage.errors.types import ParseError
from llmusage.models import ExtraUsage, UsageWindow
from llmusage.providers.base import ParsedUsage

logger = structlog.get_logger()

USAGE_URL = "https://api.anthropic.com/api/oauth/usage"
BETA_HEADER = "oauth-2025-04-20"

# Named windows in display priority order
WINDOW_LABELS: tuple[tuple[str, str], ...] = (
    ("five_hour", "5-Hour"),
    ("seven_day", "7-Day"),
    ("seven_day_sonnet", "7-Day Sonnet"),
    ("seven_day_opus", "7-Day Opus"),
    ("seven_day_oauth_apps", "7-Day OAuth Apps"),
    ("iguana_necktie", "Iguana Necktie"),
)


class OAuthWindow(msgspec.Struct):
    utilization: float
    resets_at: datetime | None = None


class OAuthExtraUsage(msgspec.Struct):
    is_enabled: bool = False
    monthly_limit: float | None = None
    used_credits: float | None = None
    utilization: float | None = None


async def fetch_oauth_usage(access_token: str) -> dict:
    """Fetch the raw usage response with an OAuth access token."""
    return await request_json(
        USAGE_URL,
        headers={
            "Authorization": f"Bearer {access_token}",
            "anthropic-beta": BETA_HEADER,
        },
    )


def parse_oauth_usage(data: dict) -> ParsedUsage:
    """Parse usage response from OAuth endpoint.

    Actual API format:
    {
        "five_hour": { "utilization": 12.0, "resets_at": "2026-01-17T06:59:59.846865+00:00" },
        "seven_day": { "utilization": 27.0, "resets_at": "2026-01-22T18:59:59.846886+00:00" },
        "seven_day_sonnet": { "utilization": 3.0, "resets_at": "..." },
        "seven_day_opus": null,
        "extra_usage": { "is_enabled": false, ... }
    }
    """
    windows = []
    for key, label in WINDOW_LABELS:
        raw = data.get(key)
        if raw is None:
            continue

        try:
            window = msgspec.convert(raw, type=OAuthWindow)
        except msgspec.ValidationError as e:
            raise ParseError(f"invalid '{key}' window: {e}") from e

        windows.append(
            UsageWindow(
                label=label,
                utilization=window.utilization,
                resets_at=window.resets_at,
            )
        )

    extra = {}
    raw_extra = data.get("extra_usage")
    if raw_extra is not None:
        try:
            extra_usage = msgspec.convert(raw_extra, type=OAuthExtraUsage)
        except msgspec.ValidationError as e:
            raise ParseError(f"invalid 'extra_usage': {e}") from e

        if extra_usage.is_enabled:
            extra["extra_usage"] = ExtraUsage(
                is_enabled=True,
                monthly_limit=extra_usage.monthly_limit,
                used_credits=extra_usage.used_credits,
                utilization=extra_usage.utilization,
            )

    logger.debug("claude_usage_parsed", windows=len(windows), extra=sorted(extra))
    return ParsedUsage(windows=tuple(windows), extra=extra)
