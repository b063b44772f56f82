"""Waybar custom module output for llmusage."""

from __future__ import annotations

import sys

import msgspec

from llmusage.display.rich import format_utilization
from llmusage.models import UsageStats
from llmusage.models import format_duration
from llmusage.providers import provider_name

TOOLTIP_TITLE = "LLM Usage"


class WaybarOutput(msgspec.Struct, frozen=True):
    """The JSON object expected by waybar custom modules."""

    text: str
    tooltip: str
    class_: str = msgspec.field(name="class")
    percentage: int = 0


def _short_name(provider_id: str) -> str:
    return provider_name(provider_id)[:1].upper()


def build_waybar(stats: UsageStats) -> WaybarOutput:
    """Build the compact bar text and the detailed tooltip."""
    text_parts = []
    for usage in stats.providers:
        if usage.error is None and usage.windows:
            # The first window is the provider's primary scope
            text_parts.append(
                f"{_short_name(usage.provider)}:{format_utilization(usage.windows[0], 0)}"
            )

    lines = [TOOLTIP_TITLE, ""]
    for usage in stats.providers:
        name = provider_name(usage.provider)
        if usage.account:
            name = f"{name} ({usage.account})"

        if usage.error is not None:
            lines.append(f"{name}: Error")
            continue

        for window in usage.windows:
            line = f"{name} {window.label}: {format_utilization(window)}"
            if (delta := window.time_until_reset()) is not None:
                line += f" (resets in {format_duration(delta)})"
            lines.append(line)

    return WaybarOutput(
        text=" ".join(text_parts),
        tooltip="\n".join(lines),
        class_=str(stats.severity()),
        percentage=int(stats.max_utilization()),
    )


def build_waybar_error(message: str) -> WaybarOutput:
    """Widget output for a run that failed before any provider was fetched."""
    return WaybarOutput(text="LLM: Error", tooltip=message, class_="error", percentage=0)


def output_waybar(output: WaybarOutput) -> None:
    """Write one waybar JSON line to stdout."""
    sys.stdout.buffer.write(msgspec.json.encode(output))
    sys.stdout.buffer.write(b"\n")
    sys.stdout.flush()
