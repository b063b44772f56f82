"""Tests for the pretty, JSON and waybar renderers."""

import json
import math
from io import StringIO

import pytest
from rich.console import Console

from llmusage.display.json import decode_stats, encode_stats, output_json
from llmusage.display.rich import (
    format_reset,
    format_utilization,
    render_stats,
    render_usage_bar,
)
from llmusage.display.waybar import build_waybar, build_waybar_error, output_waybar
from llmusage.errors.types import ErrorCategory
from llmusage.models import Usage, UsageStats, UsageWindow


@pytest.fixture
def zero_limit_stats():
    return UsageStats(
        providers=(
            Usage(
                provider="kimi",
                account="default",
                windows=(
                    UsageWindow(label="Feature Coding", utilization=math.nan, limit=0.0, used=0.0),
                    UsageWindow(label="5-Minute Rate Limit", utilization=20.0),
                ),
            ),
        )
    )


def render_text(stats: UsageStats, **kwargs) -> str:
    console = Console(file=StringIO(), width=120, color_system=None)
    render_stats(console, stats, **kwargs)
    return console.file.getvalue()


class TestRichRenderer:
    """Tests for the pretty terminal renderer."""

    def test_providers_in_order(self, sample_stats):
        output = render_text(sample_stats)

        assert "LLM Usage Statistics" in output
        assert output.index("Claude (work)") < output.index("Kimi (default)")

    def test_windows_and_error_line(self, sample_stats):
        output = render_text(sample_stats)

        assert "5-Hour" in output
        assert "42.0%" in output
        assert "80.5%" in output
        assert "Error: Kimi: API request failed with status 500: boom" in output

    def test_extra_usage(self, sample_stats):
        assert "Extra Usage Credits" in render_text(sample_stats)
        assert "$12.50 / $50.00" in render_text(sample_stats)
        assert "Extra Usage Credits" not in render_text(sample_stats, show_extra=False)

    def test_non_finite_shown_as_na(self, zero_limit_stats):
        output = render_text(zero_limit_stats)

        assert "N/A" in output
        assert "nan" not in output.lower()
        assert "20.0%" in output

    def test_usage_bar(self):
        assert render_usage_bar(50.0, width=10).plain == "█" * 5 + "░" * 5
        assert render_usage_bar(150.0, width=10).plain == "█" * 10
        assert render_usage_bar(-5.0, width=10).plain == "░" * 10
        assert render_usage_bar(math.nan, width=10).plain == "░" * 10
        assert render_usage_bar(math.inf, width=10).plain == "░" * 10

    def test_format_utilization(self):
        assert format_utilization(UsageWindow(label="x", utilization=12.345)) == "12.3%"
        assert format_utilization(UsageWindow(label="x", utilization=12.6), 0) == "13%"
        assert format_utilization(UsageWindow(label="x", utilization=math.inf)) == "N/A"

    def test_format_reset(self, sample_windows):
        assert format_reset(sample_windows[0]).startswith("in 1h")
        assert format_reset(sample_windows[2]) == "N/A"


class TestJsonRenderer:
    """Tests for JSON output."""

    def test_round_trip(self, sample_stats):
        decoded = decode_stats(encode_stats(sample_stats))

        assert [u.provider for u in decoded.providers] == ["claude", "kimi"]
        assert [w.label for w in decoded.providers[0].windows] == [
            "5-Hour",
            "7-Day",
            "7-Day Sonnet",
        ]
        assert [w.utilization for w in decoded.providers[0].windows] == [42.0, 80.5, 12.0]
        assert decoded.providers[1].error.category == ErrorCategory.TRANSPORT
        assert decoded.providers[0].extra["extra_usage"].used_credits == 12.5

    def test_summary_fields(self, sample_stats):
        data = json.loads(encode_stats(sample_stats))

        assert data["max_utilization"] == 80.5
        assert data["severity"] == "warning"
        assert data["providers"][1]["error"]["category"] == "transport"

    def test_non_finite_encoded_as_null(self, zero_limit_stats):
        data = json.loads(encode_stats(zero_limit_stats))
        assert data["providers"][0]["windows"][0]["utilization"] is None

        decoded = decode_stats(encode_stats(zero_limit_stats))
        assert math.isnan(decoded.providers[0].windows[0].utilization)

    def test_output_json(self, sample_stats, capsys):
        output_json(sample_stats)

        data = json.loads(capsys.readouterr().out)
        assert [p["provider"] for p in data["providers"]] == ["claude", "kimi"]


class TestWaybarRenderer:
    """Tests for waybar output."""

    def test_build(self, sample_stats):
        output = build_waybar(sample_stats)

        assert output.text == "C:42%"
        assert output.class_ == "warning"
        assert output.percentage == 80
        assert output.tooltip.startswith("LLM Usage")
        assert "Claude (work) 7-Day: 80.5%" in output.tooltip
        assert "Kimi (default): Error" in output.tooltip

    def test_critical_class(self):
        stats = UsageStats(
            providers=(
                Usage(provider="claude", windows=(UsageWindow(label="5-Hour", utilization=95.0),)),
            )
        )
        assert build_waybar(stats).class_ == "critical"

    def test_non_finite_first_window(self, zero_limit_stats):
        output = build_waybar(zero_limit_stats)
        assert output.text == "K:N/A"
        assert output.percentage == 20

    def test_error_output(self):
        output = build_waybar_error("corrupt credential store")
        assert output.class_ == "error"
        assert output.tooltip == "corrupt credential store"

    def test_class_key_in_json(self, sample_stats, capsys):
        output_waybar(build_waybar(sample_stats))

        data = json.loads(capsys.readouterr().out)
        assert set(data) == {"text", "tooltip", "class", "percentage"}
        assert data["class"] == "warning"
