"""
Storage Package.

Durable client-side state. Each concern owns one key in the key-value store:

    credentials  - access/refresh pair (CredentialStore)
    user         - cached identity (CredentialStore)
    notes        - note collection mirror (LocalNoteCache)
    dark_mode    - preference (Preferences)
    language     - preference (Preferences)
"""

from notu.storage.cache import LocalNoteCache
from notu.storage.credentials import CredentialStore
from notu.storage.preferences import Preferences
from notu.storage.store import KeyValueStore

__all__ = ["CredentialStore", "KeyValueStore", "LocalNoteCache", "Preferences"]
