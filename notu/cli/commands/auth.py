"""
Account Commands.

Sign in, register, sign out and show the signed-in identity.
"""

import typer
from rich.console import Console
from rich.panel import Panel

from notu.cli.client import require_login, run
from notu.schemas.user import UserIdentity
from notu.services.app import AppController

console = Console()


def login(
    email: str = typer.Option(..., "--email", "-e", prompt=True, help="Account e-mail"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True, help="Account password"),
) -> None:
    """
    Sign in and sync notes.

    Examples:
        notu login --email me@example.com
    """

    async def _login(app: AppController) -> UserIdentity:
        return await app.login(email, password)

    user = run(_login, start=False)
    console.print(f"[green]Signed in as {user.name or user.email}[/green]")


def register(
    name: str = typer.Option(..., "--name", "-n", prompt=True, help="Display name"),
    email: str = typer.Option(..., "--email", "-e", prompt=True, help="Account e-mail"),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True, help="Account password",
    ),
) -> None:
    """Create an account and sign in."""

    async def _register(app: AppController) -> UserIdentity:
        return await app.register(name, email, password)

    user = run(_register, start=False)
    console.print(f"[green]Welcome, {user.name or user.email}[/green]")


def logout() -> None:
    """Sign out and forget the local copy of your notes."""

    async def _logout(app: AppController) -> None:
        await app.logout()

    run(_logout, start=False)
    console.print("Signed out.")


def whoami() -> None:
    """Show the signed-in account."""

    async def _whoami(app: AppController) -> UserIdentity | None:
        require_login(app)
        return app.user

    user = run(_whoami)
    if user is None:
        console.print("[yellow]Signed in, but the profile could not be loaded.[/yellow]")
        return

    console.print(Panel(
        f"[bold]{user.name or '-'}[/bold]\n"
        f"E-mail: {user.email}\n"
        f"Bio: {user.bio or '-'}\n"
        f"Private: {'yes' if user.is_private else 'no'}",
        title="Account",
    ))
