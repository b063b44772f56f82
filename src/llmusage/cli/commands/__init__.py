"""CLI commands for llmusage."""

from llmusage.cli.commands import setup
from llmusage.cli.commands import usage

__all__ = [
    "setup",
    "usage",
]
