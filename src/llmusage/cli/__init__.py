"""CLI framework for llmusage."""
from __future__ import annotations

from llmusage.cli.app import ExitCode
from llmusage.cli.app import app
from llmusage.cli.app import run_app

__all__ = ["app", "run_app", "ExitCode"]
