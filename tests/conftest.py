"""Pytest configuration and shared fixtures for llmusage tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from llmusage.config import settings
from llmusage.config.credentials import Credential, InMemoryCredentialStore
from llmusage.errors.types import ErrorCategory
from llmusage.models import ExtraUsage, Usage, UsageError, UsageStats, UsageWindow


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config at a temp dir and reset the config singleton."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("LLMUSAGE_CONFIG_DIR", str(config_dir))
    monkeypatch.delenv("LLMUSAGE_ENABLED_PROVIDERS", raising=False)
    monkeypatch.delenv("LLMUSAGE_LOG_LEVEL", raising=False)
    monkeypatch.setattr(settings, "_config", None)
    return config_dir


@pytest.fixture
def utc_now() -> datetime:
    return datetime.now(UTC)


@pytest.fixture
def valid_credential(utc_now: datetime) -> Credential:
    """Credential that expires in one hour."""
    return Credential(secret="sk-test", expires_at=utc_now + timedelta(hours=1))


@pytest.fixture
def expired_credential(utc_now: datetime) -> Credential:
    return Credential(secret="sk-old", expires_at=utc_now - timedelta(minutes=5))


@pytest.fixture
def memory_store(valid_credential: Credential) -> InMemoryCredentialStore:
    """In-memory store with one claude and one kimi account."""
    return InMemoryCredentialStore(
        {
            "claude": {"work": valid_credential},
            "kimi": {"default": Credential(secret="kimi-key")},
        }
    )


@pytest.fixture
def sample_windows(utc_now: datetime) -> tuple[UsageWindow, ...]:
    return (
        UsageWindow(label="5-Hour", utilization=42.0, resets_at=utc_now + timedelta(hours=2)),
        UsageWindow(label="7-Day", utilization=80.5, resets_at=utc_now + timedelta(days=3)),
        UsageWindow(label="7-Day Sonnet", utilization=12.0),
    )


@pytest.fixture
def sample_stats(sample_windows: tuple[UsageWindow, ...]) -> UsageStats:
    """Two providers: claude succeeded, kimi failed."""
    return UsageStats(
        providers=(
            Usage(
                provider="claude",
                account="work",
                windows=sample_windows,
                extra={
                    "extra_usage": ExtraUsage(
                        is_enabled=True,
                        monthly_limit=50.0,
                        used_credits=12.5,
                        utilization=25.0,
                    )
                },
            ),
            Usage(
                provider="kimi",
                account="default",
                error=UsageError(
                    message="Kimi: API request failed with status 500: boom",
                    category=ErrorCategory.TRANSPORT,
                ),
            ),
        )
    )


@pytest.fixture
def claude_payload() -> dict:
    """Claude OAuth usage endpoint response."""
    return {
        "five_hour": {"utilization": 12.0, "resets_at": "2026-01-17T06:59:59.846865+00:00"},
        "seven_day": {"utilization": 27.0, "resets_at": "2026-01-22T18:59:59.846886+00:00"},
        "seven_day_sonnet": {"utilization": 3.0, "resets_at": None},
        "seven_day_opus": None,
        "seven_day_oauth_apps": None,
        "iguana_necktie": None,
        "extra_usage": {
            "is_enabled": True,
            "monthly_limit": 100.0,
            "used_credits": 25.5,
            "utilization": 25.5,
        },
    }


@pytest.fixture
def kimi_payload() -> dict:
    """Kimi usages endpoint response."""
    return {
        "usages": [
            {
                "scope": "FEATURE_CODING",
                "detail": {
                    "limit": "100",
                    "used": "42",
                    "remaining": "58",
                    "resetTime": "2026-02-06T08:31:59.863136Z",
                },
                "limits": [
                    {
                        "window": {"duration": 5, "timeUnit": "TIME_UNIT_MINUTES"},
                        "detail": {
                            "limit": "20",
                            "used": "5",
                            "remaining": "15",
                            "resetTime": "2026-01-30T13:31:59.863136+08:00",
                        },
                    },
                    {
                        "window": {"duration": 300, "timeUnit": "TIME_UNIT_MINUTE"},
                        "detail": {"limit": "abc", "used": "1"},
                    },
                ],
            }
        ]
    }
