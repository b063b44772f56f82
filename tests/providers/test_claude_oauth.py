"""Tests for the Claude OAuth usage endpoint."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import pytest

from llmusage.config.credentials import Credential
from llmusage.errors.types import ParseError
from llmusage.providers.claude import ClaudeProvider
from llmusage.providers.claude.oauth import BETA_HEADER, USAGE_URL, parse_oauth_usage


class TestParseOAuthUsage:
    """Tests for parse_oauth_usage."""

    def test_windows_in_fixed_order(self, claude_payload):
        parsed = parse_oauth_usage(claude_payload)

        assert [w.label for w in parsed.windows] == ["5-Hour", "7-Day", "7-Day Sonnet"]
        assert [w.utilization for w in parsed.windows] == [12.0, 27.0, 3.0]

    def test_order_independent_of_payload_order(self):
        data = {
            "seven_day_opus": {"utilization": 5.0},
            "five_hour": {"utilization": 1.0},
        }
        parsed = parse_oauth_usage(data)
        assert [w.label for w in parsed.windows] == ["5-Hour", "7-Day Opus"]

    def test_reset_times(self, claude_payload):
        parsed = parse_oauth_usage(claude_payload)

        assert parsed.windows[0].resets_at == datetime(
            2026, 1, 17, 6, 59, 59, 846865, tzinfo=UTC
        )
        assert parsed.windows[2].resets_at is None

    def test_null_and_absent_windows_omitted(self):
        parsed = parse_oauth_usage({"five_hour": None, "iguana_necktie": {"utilization": 9.0}})
        assert [w.label for w in parsed.windows] == ["Iguana Necktie"]

    def test_all_six_windows(self):
        keys = [
            "five_hour",
            "seven_day",
            "seven_day_sonnet",
            "seven_day_opus",
            "seven_day_oauth_apps",
            "iguana_necktie",
        ]
        parsed = parse_oauth_usage({key: {"utilization": 1.0} for key in keys})
        assert len(parsed.windows) == 6

    def test_extra_usage_enabled(self, claude_payload):
        extra = parse_oauth_usage(claude_payload).extra["extra_usage"]

        assert extra.is_enabled
        assert extra.monthly_limit == 100.0
        assert extra.used_credits == 25.5
        assert extra.utilization == 25.5

    def test_extra_usage_disabled_is_dropped(self, claude_payload):
        claude_payload["extra_usage"] = {"is_enabled": False, "monthly_limit": None}
        assert parse_oauth_usage(claude_payload).extra == {}

    def test_no_absolute_quantities(self, claude_payload):
        window = parse_oauth_usage(claude_payload).windows[0]
        assert window.limit is None
        assert window.used is None
        assert window.remaining is None

    def test_invalid_window_raises(self):
        with pytest.raises(ParseError, match="five_hour"):
            parse_oauth_usage({"five_hour": {"utilization": "lots"}})

    def test_empty_payload(self):
        parsed = parse_oauth_usage({})
        assert parsed.windows == ()
        assert parsed.extra == {}


class TestClaudeProvider:
    """Tests for ClaudeProvider."""

    def test_metadata(self):
        assert ClaudeProvider.metadata.id == "claude"
        assert ClaudeProvider.metadata.credential_kind == "oauth"

    @pytest.mark.asyncio
    async def test_fetch_usage_sends_oauth_headers(self, claude_payload):
        provider = ClaudeProvider(Credential(secret="oauth-token"))

        with patch(
            "llmusage.providers.claude.oauth.request_json",
            new=AsyncMock(return_value=claude_payload),
        ) as mock_request:
            parsed = await provider.fetch_usage()

        mock_request.assert_awaited_once_with(
            USAGE_URL,
            headers={"Authorization": "Bearer oauth-token", "anthropic-beta": BETA_HEADER},
        )
        assert len(parsed.windows) == 3
