"""
System Commands.

Effective configuration and interface preferences.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from notu.cli.client import run
from notu.core.config import get_app_config
from notu.core.i18n import SUPPORTED_LANGUAGES
from notu.services.app import AppController

console = Console()


def config(
    language: Optional[str] = typer.Option(None, "--language", "-l", help=f"Interface language ({'/'.join(SUPPORTED_LANGUAGES)})"),
    dark: Optional[bool] = typer.Option(None, "--dark/--light", help="Dark or light theme"),
    toggle_theme: bool = typer.Option(False, "--toggle-theme", help="Switch between dark and light"),
    toggle_language: bool = typer.Option(False, "--toggle-language", help="Switch between Indonesian and English"),
) -> None:
    """
    Show the effective configuration, or change a preference.

    Examples:
        notu config
        notu config --language en
        notu config --dark
        notu config --toggle-language
    """
    if (language is not None and toggle_language) or (dark is not None and toggle_theme):
        console.print("[red]Set a preference or toggle it, not both[/red]")
        raise typer.Exit(1)
    if language is not None and language not in SUPPORTED_LANGUAGES:
        console.print(f"[red]Unknown language: {language}[/red]")
        console.print(f"Available languages: {', '.join(SUPPORTED_LANGUAGES)}")
        raise typer.Exit(1)

    async def _config(app: AppController) -> AppController:
        if language is not None:
            app.preferences.language = language
        if dark is not None:
            app.preferences.dark_mode = dark
        if toggle_theme:
            app.preferences.toggle_dark_mode()
        if toggle_language:
            app.preferences.toggle_language()
        return app

    app = run(_config, start=False)

    table = Table(title="Client Settings", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("API URL", app.config.base_url)
    table.add_row("Timeout", f"{app.config.timeout:g}s")
    table.add_row("Sync", "enabled" if app.sync_enabled else "disabled (offline)")
    table.add_row("Storage", str(app.config.storage_dir))
    table.add_row("Language", app.preferences.language)
    table.add_row("Theme", "dark" if app.preferences.dark_mode else "light")
    console.print(table)

    _display_config_section("logging", get_app_config().logging.model_dump())


def _display_config_section(name: str, data: dict) -> None:
    """Display a configuration section as a tree."""
    tree = Tree(f"[bold cyan]{name}[/bold cyan]")

    def add_items(parent: Tree, items: dict) -> None:
        for key, value in items.items():
            if isinstance(value, dict):
                branch = parent.add(f"[cyan]{key}[/cyan]")
                add_items(branch, value)
            else:
                parent.add(f"[cyan]{key}[/cyan]: {value}")

    add_items(tree, data)
    console.print(tree)
