"""Async wrapper for Typer to support async commands."""

import asyncio
import inspect
from collections.abc import Callable
from functools import wraps
from typing import Any

import typer


def _async_command_wrapper(f: Callable) -> Callable:
    """Wrap an async function to run synchronously with asyncio.run."""

    @wraps(f)
    def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
        return asyncio.run(f(*args, **kwargs))

    return sync_wrapper


class ATyper(typer.Typer):
    """Typer subclass whose commands may be coroutine functions.

    The undecorated coroutine function is returned from the decorator, so
    commands can still be awaited directly (e.g. from tests).
    """

    def command(self, name: str | None = None, **kwargs: Any) -> Any:  # type: ignore[override]
        """Register a command, wrapping async functions for execution."""

        def decorator(f: Callable) -> Callable:
            if inspect.iscoroutinefunction(f):
                typer.Typer.command(self, name, **kwargs)(_async_command_wrapper(f))
            else:
                typer.Typer.command(self, name, **kwargs)(f)
            return f

        return decorator
