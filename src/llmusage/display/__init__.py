"""Display utilities for llmusage.

This module provides rendering for terminal (Rich-based), JSON and waybar
output modes. All of them consume a UsageStats and nothing else.
"""
from __future__ import annotations

from llmusage.display.json import decode_stats
from llmusage.display.json import encode_stats
from llmusage.display.json import output_json
from llmusage.display.rich import UsageStatsDisplay
from llmusage.display.rich import format_utilization
from llmusage.display.rich import render_stats
from llmusage.display.rich import render_usage_bar
from llmusage.display.waybar import WaybarOutput
from llmusage.display.waybar import build_waybar
from llmusage.display.waybar import build_waybar_error
from llmusage.display.waybar import output_waybar

__all__ = [
    # Rich rendering
    "UsageStatsDisplay",
    "render_stats",
    "render_usage_bar",
    "format_utilization",
    # JSON output
    "encode_stats",
    "decode_stats",
    "output_json",
    # Waybar output
    "WaybarOutput",
    "build_waybar",
    "build_waybar_error",
    "output_waybar",
]
