"""
Client Package.

Layers, leaf first:
- transport: one HTTP call, JSON encoding, error body decoding (httpx)
- session: bearer credentials, expiry detection, single refresh + retry
- api: typed auth/notes/friends operations
"""

from notu.client.api import ApiClient
from notu.client.session import SessionManager
from notu.client.transport import HttpTransport

__all__ = ["ApiClient", "HttpTransport", "SessionManager"]
