"""
Services Package.

State controllers built on the domain client:
- app: composition root, identity, session-ended handling
- notes: note collection, partitions, sort/search, optimistic mutations
- friends: friends, requests, search, public profiles
"""

from notu.services.app import AppController
from notu.services.friends import FriendsController
from notu.services.notes import NotesController, sort_notes

__all__ = ["AppController", "FriendsController", "NotesController", "sort_notes"]
