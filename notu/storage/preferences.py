"""
Preferences.

Device-level settings: dark mode and interface language.
"""

from notu.core.i18n import SUPPORTED_LANGUAGES
from notu.storage.store import KeyValueStore

DARK_MODE_KEY = "dark_mode"
LANGUAGE_KEY = "language"


class Preferences:
    """Dark-mode flag and language, each under its own key."""

    def __init__(self, store: KeyValueStore, default_language: str = "id") -> None:
        self._store = store
        self.default_language = default_language

    @property
    def dark_mode(self) -> bool:
        return bool(self._store.get(DARK_MODE_KEY, default=False))

    @dark_mode.setter
    def dark_mode(self, enabled: bool) -> None:
        self._store.set(DARK_MODE_KEY, bool(enabled))

    def toggle_dark_mode(self) -> bool:
        self.dark_mode = not self.dark_mode
        return self.dark_mode

    @property
    def language(self) -> str:
        value = self._store.get(LANGUAGE_KEY)
        return value if value in SUPPORTED_LANGUAGES else self.default_language

    @language.setter
    def language(self, value: str) -> None:
        if value not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language: {value}")
        self._store.set(LANGUAGE_KEY, value)

    def toggle_language(self) -> str:
        self.language = "en" if self.language == "id" else "id"
        return self.language

    def reset(self) -> None:
        self._store.remove(DARK_MODE_KEY)
        self._store.remove(LANGUAGE_KEY)
