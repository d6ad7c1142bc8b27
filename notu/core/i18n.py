"""
Strings emitted by the client core.

Only the handful of user-facing strings produced below the presentation
layer live here: the untitled-note placeholder and the failure labels a
controller attaches to an error. Indonesian is the fallback language.
"""

import re

SUPPORTED_LANGUAGES = ("id", "en")
FALLBACK_LANGUAGE = "id"

TRANSLATIONS: dict[str, dict[str, str]] = {
    "id": {
        "untitled": "Tanpa Judul",
        "syncFailed": "Gagal sinkronisasi",
        "saveFailed": "Gagal menyimpan",
        "deleteFailed": "Gagal menghapus",
        "restoreFailed": "Gagal memulihkan",
        "sessionExpired": "Sesi berakhir, silakan masuk lagi",
        "friendsFailed": "Gagal memuat teman",
        "notesCount": "{n} catatan",
    },
    "en": {
        "untitled": "Untitled",
        "syncFailed": "Failed to sync",
        "saveFailed": "Failed to save",
        "deleteFailed": "Failed to delete",
        "restoreFailed": "Failed to restore",
        "sessionExpired": "Session expired, please sign in again",
        "friendsFailed": "Failed to load friends",
        "notesCount": "{n} note{s}",
    },
}

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def get_translation(lang: str, key: str, **params: object) -> str:
    """
    Look up `key` for `lang`, then the fallback language, then the key itself.

    `{name}` placeholders are filled from params; `{s}` expands to "s" unless
    `n` is one.
    """
    text = (
        TRANSLATIONS.get(lang, {}).get(key)
        or TRANSLATIONS[FALLBACK_LANGUAGE].get(key)
        or key
    )

    def _fill(match: re.Match[str]) -> str:
        name = match.group(1)
        if name == "s":
            n = params.get("n", 0)
            return "" if n == 1 else "s"
        return str(params.get(name, ""))

    return _PLACEHOLDER.sub(_fill, text)
