"""
Notu Client.

- core/: Configuration, logging, errors, shared utilities
- schemas/: Pydantic models for the wire and the local cache
- storage/: Durable key-value store, credential store, note cache, preferences
- client/: Transport, session manager, domain API client
- events/: In-process event bus (session lifecycle signals)
- services/: Application, notes and friends controllers
- cli/: Terminal client (Typer + Rich)
"""

__version__ = "0.1.0"
