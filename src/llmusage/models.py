"""Data models for llmusage.

Defines the normalized structures every provider adapter produces, and the
accessors renderers use to summarize them. Providers report very different
shapes (named OAuth windows, string-encoded rate-limit buckets); these models
are the common ground.
"""

from __future__ import annotations

import math
from datetime import UTC
from datetime import datetime
from datetime import timedelta
from enum import StrEnum

import msgspec

from llmusage.errors.types import ErrorCategory

# Severity thresholds, inclusive at the lower bound
CRITICAL_THRESHOLD = 90.0
WARNING_THRESHOLD = 75.0


class UsageWindow(msgspec.Struct, frozen=True):
    """One observed quota or rate-limit period."""

    label: str  # Derived display label (e.g., "5-Hour", "5-Minute Rate Limit")
    utilization: float  # Percentage, not clamped; may be non-finite
    resets_at: datetime | None = None
    limit: float | None = None  # Absolute quantities, when reported
    used: float | None = None
    remaining: float | None = None

    def time_until_reset(self) -> timedelta | None:
        """Return time remaining until reset.

        The result is negative once the reset time has passed.
        """
        if self.resets_at is None:
            return None
        now = datetime.now(self.resets_at.tzinfo)
        return self.resets_at - now

    def has_usable_utilization(self) -> bool:
        """Return False for NaN/inf utilization (e.g. a zero-limit bucket)."""
        return math.isfinite(self.utilization)


class ExtraUsage(msgspec.Struct, frozen=True):
    """Extra usage credits reported alongside the regular windows."""

    is_enabled: bool
    monthly_limit: float | None = None
    used_credits: float | None = None
    utilization: float | None = None

    def remaining(self) -> float | None:
        """Return remaining credits, if both amounts are known."""
        if self.monthly_limit is None or self.used_credits is None:
            return None
        return self.monthly_limit - self.used_credits


class UsageError(msgspec.Struct, frozen=True):
    """Why a provider entry carries no usable windows."""

    message: str
    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __str__(self) -> str:
        return self.message


class Usage(msgspec.Struct, frozen=True):
    """One provider account's fetch outcome."""

    provider: str  # Provider identifier (e.g., "claude", "kimi")
    account: str | None = None
    windows: tuple[UsageWindow, ...] = ()
    extra: dict[str, ExtraUsage] = msgspec.field(default_factory=dict)
    error: UsageError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(
        cls,
        provider: str,
        message: str,
        category: ErrorCategory,
        account: str | None = None,
    ) -> Usage:
        """Factory for an error-carrying entry."""
        return cls(
            provider=provider,
            account=account,
            error=UsageError(message=message, category=category),
        )


class Severity(StrEnum):
    """Severity bands derived from peak utilization."""

    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


def classify(max_utilization: float) -> Severity:
    """Map a peak utilization to its severity band."""
    if max_utilization >= CRITICAL_THRESHOLD:
        return Severity.CRITICAL
    if max_utilization >= WARNING_THRESHOLD:
        return Severity.WARNING
    return Severity.NORMAL


class UsageStats(msgspec.Struct, frozen=True):
    """Usage for every configured provider account, in configuration order."""

    providers: tuple[Usage, ...] = ()
    fetched_at: datetime = msgspec.field(default_factory=lambda: datetime.now(UTC))

    def max_utilization(self) -> float:
        """Return the highest utilization across error-free providers.

        Providers carrying an error contribute nothing, even if they still
        hold windows. Non-finite utilizations are ignored.
        """
        max_util = 0.0
        for usage in self.providers:
            if usage.error is not None:
                continue
            for window in usage.windows:
                if window.has_usable_utilization() and window.utilization > max_util:
                    max_util = window.utilization
        return max_util

    def severity(self) -> Severity:
        """Return the severity band for the current peak utilization."""
        return classify(self.max_utilization())

    def provider_by_id(self, provider_id: str) -> Usage | None:
        """Return the first entry for a provider, or None."""
        for usage in self.providers:
            if usage.provider == provider_id:
                return usage
        return None

    def failed_providers(self) -> list[Usage]:
        return [usage for usage in self.providers if usage.error is not None]


def format_duration(delta: timedelta) -> str:
    """Format a reset countdown ("2d 3h", "45m"); negative means expired."""
    if delta < timedelta(0):
        return "expired"

    total_seconds = int(delta.total_seconds())
    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes = remainder // 60

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0 or not parts:
        parts.append(f"{minutes}m")
    return " ".join(parts)
