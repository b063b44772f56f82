"""llmusage: Track usage across LLM provider accounts."""

from __future__ import annotations

__version__ = "0.1.0"

from llmusage.models import ExtraUsage
from llmusage.models import Severity
from llmusage.models import Usage
from llmusage.models import UsageError
from llmusage.models import UsageStats
from llmusage.models import UsageWindow
from llmusage.models import classify
from llmusage.models import format_duration

__all__ = [
    "__version__",
    "UsageWindow",
    "ExtraUsage",
    "UsageError",
    "Usage",
    "UsageStats",
    "Severity",
    "classify",
    "format_duration",
]


def main() -> None:
    """Entry point for the llmusage CLI."""
    from llmusage.cli.app import run_app

    run_app()
