"""
Terminal Client.

Typer commands with Rich output on top of the application controller.

Architecture:
- CLI is a thin presentation layer
- All state handling lives in notu.services
- One AppController per invocation, closed on exit

Usage:
    notu --help
    notu login --email me@example.com
    notu list --archived --sort title
    notu add --title "Groceries" --content "eggs, milk"
"""
