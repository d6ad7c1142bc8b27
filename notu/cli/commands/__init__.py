"""
CLI Commands.

Organized by feature area.
"""

from notu.cli.commands import auth, notes, system
from notu.cli.commands.friends import app as friends_app

__all__ = [
    "auth",
    "friends_app",
    "notes",
    "system",
]
