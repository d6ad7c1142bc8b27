"""
Controller Runner for CLI.

Builds the application controller for one command, runs the command's
coroutine against it, and prints domain errors before exiting non-zero.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer
from rich.console import Console

from notu.core.config import get_client_config
from notu.core.exceptions import ApplicationError
from notu.core.logging import get_logger, log_with_source
from notu.services.app import AppController

logger = get_logger(__name__)
console = Console()

T = TypeVar("T")

# Module-level controller instance
_app: AppController | None = None


def get_app() -> AppController:
    """Get or create the controller for this invocation."""
    global _app
    if _app is None:
        _app = AppController(get_client_config())
    return _app


async def close_app() -> None:
    """Close the controller."""
    global _app
    if _app:
        await _app.close()
        _app = None


def run(action: Callable[[AppController], Awaitable[T]], *, start: bool = True) -> T:
    """
    Run one command against a fresh controller.

    Args:
        action: Coroutine function taking the controller
        start: Restore session and load notes before the action

    Raises:
        typer.Exit: With code 1 when a domain error reaches the CLI
    """
    return asyncio.run(_run(action, start))


async def _run(action: Callable[[AppController], Awaitable[T]], start: bool) -> T:
    app = get_app()
    try:
        if start:
            await app.start()
        return await action(app)
    except ApplicationError as e:
        log_with_source(logger, "cli", "debug", "Command failed", error_code=e.code)
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)
    finally:
        report_notice(app)
        await close_app()


def report_notice(app: AppController) -> None:
    """Print the session notice left by a forced logout, if any."""
    if app.notice:
        console.print(f"[yellow]{app.notice}[/yellow]")


def require_login(app: AppController) -> None:
    if not app.sync_enabled:
        console.print("[red]Sync is disabled. Set NOTU_API_URL to use your account.[/red]")
        raise typer.Exit(1)
    if not app.is_authenticated:
        console.print("[red]Not logged in. Run: notu login[/red]")
        raise typer.Exit(1)
