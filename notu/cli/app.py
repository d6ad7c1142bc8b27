"""
Notu CLI.

Personal notes from the terminal. Works offline against the local cache,
or against your account when sync is enabled (NOTU_API_URL).

Usage:
    notu --help                                # Show help

    # Account
    notu login --email me@example.com
    notu register
    notu whoami
    notu logout

    # Notes
    notu list [--archived | --trash] [--sort recency|title|color] [--search text]
    notu add --title "Groceries" --content "eggs, milk"
    notu edit NOTE_ID --title "New title"
    notu pin NOTE_ID
    notu archive NOTE_ID
    notu delete NOTE_ID [--permanent]
    notu restore NOTE_ID
    notu empty-trash
    notu sync

    # Friends
    notu friends list | requests | search QUERY | add | accept | decline | remove USER_ID

    # Configuration
    notu config [--language id|en] [--dark/--light]

Options:
    --verbose, -v     Enable verbose output
    --debug, -d       Enable debug mode (detailed logging)
    --help            Show help message
"""

import typer
from rich.console import Console

from notu.cli.commands import auth, friends_app, notes, system
from notu.core.config import validate_project_root
from notu.core.logging import setup_logging

# Create main app
app = typer.Typer(
    name="notu",
    help="Notu - personal notes with optional sync and friends.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

# Account
app.command()(auth.login)
app.command()(auth.register)
app.command()(auth.logout)
app.command()(auth.whoami)

# Notes
app.command("list")(notes.list_notes)
app.command()(notes.add)
app.command()(notes.edit)
app.command()(notes.delete)
app.command()(notes.restore)
app.command("empty-trash")(notes.empty_trash)
app.command()(notes.pin)
app.command()(notes.archive)
app.command()(notes.sync)

# Command groups
app.add_typer(friends_app, name="friends")

app.command()(system.config)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    Notu CLI.

    Notes, archive and trash, sync and friends.
    Built with Typer for type-safe commands and Rich for formatted output.
    """
    validate_project_root()

    # Configure logging based on flags
    if debug:
        setup_logging(level="DEBUG", format_type="console")
        console.print("[dim]Debug mode enabled[/dim]")
    elif verbose:
        setup_logging(level="INFO", format_type="console")
    else:
        setup_logging()


if __name__ == "__main__":
    app()
