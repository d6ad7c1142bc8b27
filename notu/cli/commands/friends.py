"""
Friends Commands.

Friend list, incoming requests and user search.
"""

import typer
from rich.console import Console
from rich.table import Table

from notu.cli.client import require_login, run
from notu.schemas.user import UserSummary
from notu.services.app import AppController
from notu.services.friends import FriendsController

app = typer.Typer(help="Friends and friend requests")
console = Console()


def _display_users(title: str, users: list[UserSummary]) -> None:
    table = Table(title=title, show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("E-mail")
    table.add_column("Status")

    for user in users:
        status = "friend" if user.is_friend else "pending" if user.is_pending else ""
        table.add_row(user.id, user.name, user.email or "-", status)

    console.print(table)
    if not users:
        console.print("[dim]Nobody here yet.[/dim]")


def _friends(action):
    """Run an action against a loaded-on-demand friends controller."""

    async def _run(app_: AppController):
        require_login(app_)
        return await action(app_.friends)

    return run(_run, start=False)


def _finish(friends: FriendsController, ok: bool, message: str) -> None:
    if not ok:
        console.print(f"[red]Error: {friends.error or 'request failed'}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]{message}[/green]")


@app.command("list")
def list_friends() -> None:
    """Show your friends."""

    async def _list(friends: FriendsController) -> FriendsController:
        await friends.load()
        return friends

    friends = _friends(_list)
    _display_users("Friends", friends.friends)
    if friends.error:
        console.print(f"[yellow]{friends.error}[/yellow]")


@app.command()
def requests() -> None:
    """Show incoming friend requests."""

    async def _requests(friends: FriendsController) -> FriendsController:
        await friends.load()
        return friends

    friends = _friends(_requests)
    _display_users("Friend requests", friends.requests)


@app.command()
def search(query: str = typer.Argument(..., help="Name or e-mail, at least 2 characters")) -> None:
    """
    Search for users.

    Examples:
        notu friends search ana
    """

    async def _search(friends: FriendsController) -> tuple[FriendsController, list[UserSummary]]:
        return friends, await friends.search(query)

    friends, results = _friends(_search)
    if friends.error:
        console.print(f"[red]Error: {friends.error}[/red]")
        raise typer.Exit(1)
    _display_users(f"Users matching '{query}'", results)


@app.command()
def add(user_id: str = typer.Argument(..., help="User ID")) -> None:
    """Send a friend request."""

    async def _add(friends: FriendsController) -> tuple[FriendsController, bool]:
        return friends, await friends.send_request(user_id)

    _finish(*_friends(_add), "Friend request sent")


@app.command()
def accept(user_id: str = typer.Argument(..., help="User ID")) -> None:
    """Accept a friend request."""

    async def _accept(friends: FriendsController) -> tuple[FriendsController, bool]:
        return friends, await friends.accept(user_id)

    _finish(*_friends(_accept), "Friend request accepted")


@app.command()
def decline(user_id: str = typer.Argument(..., help="User ID")) -> None:
    """Decline a friend request."""

    async def _decline(friends: FriendsController) -> tuple[FriendsController, bool]:
        return friends, await friends.decline(user_id)

    _finish(*_friends(_decline), "Friend request declined")


@app.command()
def remove(user_id: str = typer.Argument(..., help="User ID")) -> None:
    """Remove a friend."""

    async def _remove(friends: FriendsController) -> tuple[FriendsController, bool]:
        return friends, await friends.remove(user_id)

    _finish(*_friends(_remove), "Friend removed")
