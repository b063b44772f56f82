"""JSON output utilities for llmusage."""

from __future__ import annotations

import math
import sys

import msgspec

from llmusage.models import UsageStats

__all__ = [
    "stats_to_builtins",
    "encode_stats",
    "decode_stats",
    "output_json",
]


def stats_to_builtins(stats: UsageStats) -> dict:
    """Convert stats to plain builtins, adding the summary fields."""
    data = msgspec.to_builtins(stats)
    data["max_utilization"] = stats.max_utilization()
    data["severity"] = str(stats.severity())
    return data


def encode_stats(stats: UsageStats) -> bytes:
    """Encode stats as JSON bytes.

    Non-finite utilizations (zero-limit buckets) are encoded as null.
    """
    return msgspec.json.encode(stats_to_builtins(stats))


def decode_stats(json_bytes: bytes) -> UsageStats:
    """Decode JSON produced by encode_stats back into UsageStats.

    A null utilization decodes as NaN.
    """
    data = msgspec.json.decode(json_bytes)
    for provider in data.get("providers", []):
        for window in provider.get("windows", []):
            if window.get("utilization") is None:
                window["utilization"] = math.nan
    return msgspec.convert(data, type=UsageStats)


def output_json(stats: UsageStats, indent: int = 2) -> None:
    """Output stats as pretty-printed JSON to stdout."""
    formatted = msgspec.json.format(encode_stats(stats), indent=indent)
    sys.stdout.buffer.write(formatted)
    sys.stdout.buffer.write(b"\n")
    sys.stdout.flush()
