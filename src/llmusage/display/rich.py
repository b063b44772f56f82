"""Rich-based rendering for llmusage."""

from __future__ import annotations

import math

from rich.console import Console, ConsoleOptions, RenderResult
from rich.table import Table
from rich.text import Text

from llmusage.models import ExtraUsage, Severity, Usage, UsageStats, UsageWindow
from llmusage.models import classify, format_duration
from llmusage.providers import provider_name

BAR_FULL = "█"
BAR_EMPTY = "░"

SEVERITY_COLORS = {
    Severity.NORMAL: "green",
    Severity.WARNING: "yellow",
    Severity.CRITICAL: "red",
}


def render_usage_bar(utilization: float, width: int = 20, color: str | None = None) -> Text:
    """Render a usage progress bar.

    Args:
        utilization: Usage percentage, clamped to 0-100 for drawing;
            non-finite values draw an empty bar
        width: Bar width in characters
        color: Optional color override

    Returns:
        Rich Text with the progress bar
    """
    if not math.isfinite(utilization):
        filled = 0
    else:
        filled = int(max(0.0, min(utilization, 100.0)) / 100 * width)
    bar = BAR_FULL * filled + BAR_EMPTY * (width - filled)
    return Text(bar, style=color or "default")


def format_utilization(window: UsageWindow, precision: int = 1) -> str:
    """Format a window's utilization, "N/A" when it is not finite."""
    if not window.has_usable_utilization():
        return "N/A"
    return f"{window.utilization:.{precision}f}%"


def format_reset(window: UsageWindow) -> str:
    """Format the reset countdown ("in 2h 5m", "expired", "N/A")."""
    delta = window.time_until_reset()
    if delta is None:
        return "N/A"
    formatted = format_duration(delta)
    return formatted if formatted == "expired" else f"in {formatted}"


def format_window_row(window: UsageWindow, bar_width: int = 20) -> tuple[Text, Text, Text]:
    """Format one window as (label, bar + percentage, reset) cells."""
    if window.has_usable_utilization():
        color = SEVERITY_COLORS[classify(window.utilization)]
    else:
        color = "dim"

    usage = render_usage_bar(window.utilization, width=bar_width, color=color)
    usage.append(f"  {format_utilization(window)}", style="bold")

    if window.limit is not None and window.used is not None:
        usage.append(f"  ({window.used:g}/{window.limit:g})", style="dim")

    return Text(window.label), usage, Text(format_reset(window), style="dim")


def format_extra_usage(extra: ExtraUsage, bar_width: int = 20) -> Text:
    """Format extra usage credits for display."""
    text = Text("Extra Usage Credits: ", style="bold")
    if extra.utilization is not None:
        text.append_text(render_usage_bar(extra.utilization, width=bar_width, color="yellow"))
        text.append(f"  {extra.utilization:.1f}%")
    if extra.used_credits is not None and extra.monthly_limit is not None:
        text.append(f"  ${extra.used_credits:.2f} / ${extra.monthly_limit:.2f}", style="dim")
    return text


def provider_title(usage: Usage) -> str:
    """Return "<Name>" or "<Name> (<account>)"."""
    name = provider_name(usage.provider)
    if usage.account:
        return f"{name} ({usage.account})"
    return name


class UsageStatsDisplay:
    """Rich renderable showing every provider account in order.

    Providers with an error get a single error line; the rest list their
    windows, then any extra usage credits.
    """

    def __init__(self, stats: UsageStats, bar_width: int = 20, show_extra: bool = True):
        self.stats = stats
        self.bar_width = bar_width
        self.show_extra = show_extra

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        yield Text("LLM Usage Statistics", style="bold")
        yield Text("━" * 40, style="dim")

        for usage in self.stats.providers:
            yield Text()
            yield Text(provider_title(usage), style="bold cyan")

            if usage.error is not None:
                yield Text(f"  Error: {usage.error.message}", style="red")
                continue

            if not usage.windows:
                yield Text("  No usage reported", style="dim")

            grid = Table.grid(padding=(0, 2))
            grid.add_column(min_width=20)
            grid.add_column()
            grid.add_column(justify="right")
            for window in usage.windows:
                label, bar, reset = format_window_row(window, self.bar_width)
                grid.add_row(Text("  ").append_text(label), bar, reset)
            yield grid

            if self.show_extra and (extra := usage.extra.get("extra_usage")) is not None:
                yield Text("  ").append_text(format_extra_usage(extra, self.bar_width))


def render_stats(
    console: Console,
    stats: UsageStats,
    bar_width: int = 20,
    show_extra: bool = True,
) -> None:
    """Print stats to a console."""
    console.print(UsageStatsDisplay(stats, bar_width=bar_width, show_extra=show_extra))
