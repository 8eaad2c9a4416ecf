# emoji_index/shared/locales.py
"""Locale identifier helpers shared by sources and the locale manager."""

import locale as _locale
import os
from typing import List, Optional

DEFAULT_LOCALE = "en"

# Locales CLDR is known to carry annotations for; used when the live listing
# cannot be fetched.
COMMON_LOCALES: List[str] = [
    "en", "es", "fr", "de", "it", "pt", "ja", "ko", "zh", "zh-Hant",
    "ar", "ru", "hi", "th", "vi", "id", "ms", "tr", "pl", "nl",
]


def normalize_locale(identifier: Optional[str]) -> str:
    """
    Canonical form used for identifiers and file names: hyphen separated,
    encoding/modifier suffixes dropped ("en_US.UTF-8" -> "en-US").
    """
    if not isinstance(identifier, str):
        return DEFAULT_LOCALE
    ident = identifier.strip().split(".")[0].split("@")[0].replace("_", "-")
    if not ident or ident.upper() in {"C", "POSIX"}:
        return DEFAULT_LOCALE
    return ident


def language_code(identifier: Optional[str]) -> str:
    return normalize_locale(identifier).split("-")[0].lower()


def system_locale() -> str:
    """Best-effort process locale (LC_ALL / LC_MESSAGES / LANG), else English."""
    for var in ("LC_ALL", "LC_MESSAGES", "LANG"):
        value = os.environ.get(var)
        if value:
            return normalize_locale(value)
    try:
        current = _locale.getlocale()[0]
    except ValueError:
        current = None
    return normalize_locale(current)


__all__ = [
    "DEFAULT_LOCALE",
    "COMMON_LOCALES",
    "normalize_locale",
    "language_code",
    "system_locale",
]
