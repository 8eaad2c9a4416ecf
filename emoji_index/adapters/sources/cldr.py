# emoji_index/adapters/sources/cldr.py
"""
Unicode CLDR annotations data source.

CLDR provides localized emoji names (``tts``) and keywords (``default``) for
100+ languages but no categories and no canonical order, so this source is
normally blended with gemoji (see ``BlendedEmojiDataSource``).

Locales
=======
The list of annotation locales is read from the GitHub contents API and kept
in-process for 7 days. Any failure falls back to ``COMMON_LOCALES``.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Dict, List, Optional, Tuple

import structlog
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from emoji_index.adapters.sources.http import JsonHttpClient
from emoji_index.core.domain.exceptions import DecodingFailedError, EmojiIndexError, EmptyDataError
from emoji_index.core.domain.models import UNKNOWN_CATEGORY, EmojiRawEntry, has_skin_tone_modifier
from emoji_index.core.ports import EmojiDataSource
from emoji_index.shared.locales import COMMON_LOCALES, DEFAULT_LOCALE, language_code, normalize_locale

logger = structlog.get_logger()

CLDR_BASE_URL = (
    "https://raw.githubusercontent.com/unicode-org/cldr-json/main/"
    "cldr-json/cldr-annotations-full/annotations"
)
CLDR_API_URL = (
    "https://api.github.com/repos/unicode-org/cldr-json/contents/"
    "cldr-json/cldr-annotations-full/annotations"
)

LOCALES_MAX_AGE = 7 * 24 * 60 * 60.0

# ---------------------------------------------------------------------------
# Available-locales cache (process wide)
# ---------------------------------------------------------------------------

_LOCALES_CACHE: Dict[str, Tuple[List[str], float]] = {}
_LOCALES_LOCK = threading.RLock()


def cached_locales() -> Optional[List[str]]:
    """Locales from the last successful listing, if still fresh."""
    with _LOCALES_LOCK:
        hit = _LOCALES_CACHE.get("locales")
        if hit is None:
            return None
        locales, stored_at = hit
        if time.monotonic() - stored_at >= LOCALES_MAX_AGE:
            return None
        return list(locales)


def clear_locales_cache() -> None:
    with _LOCALES_LOCK:
        _LOCALES_CACHE.clear()


async def fetch_available_locales(http: Optional[JsonHttpClient] = None) -> List[str]:
    """
    List CLDR annotation locales. Never raises: falls back to the
    common-locale list on any error.
    """
    cached = cached_locales()
    if cached is not None:
        return cached

    http = http or JsonHttpClient()
    try:
        items = await http.get_json(CLDR_API_URL, headers={"Accept": "application/vnd.github.v3+json"})
        locales = sorted(
            str(item["name"])
            for item in items
            if isinstance(item, dict) and item.get("type") == "dir" and item.get("name")
        )
    except (EmojiIndexError, TypeError, KeyError) as e:
        logger.warning("cldr_locales_fetch_failed", error=str(e))
        return list(COMMON_LOCALES)

    if not locales:
        return list(COMMON_LOCALES)

    with _LOCALES_LOCK:
        _LOCALES_CACHE["locales"] = (locales, time.monotonic())
    return list(locales)


# ---------------------------------------------------------------------------
# Annotation payload
# ---------------------------------------------------------------------------

class CLDRAnnotation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    default: Optional[List[str]] = None
    tts: Optional[List[str]] = None


_ANNOTATIONS = TypeAdapter(Dict[str, CLDRAnnotation])


def parse_annotations(payload: Any) -> Dict[str, CLDRAnnotation]:
    """Extract ``annotations.annotations`` from a CLDR annotations.json document."""
    try:
        inner = payload["annotations"]["annotations"]
    except (TypeError, KeyError) as e:
        raise DecodingFailedError(f"Unexpected CLDR document shape: missing {e}") from e
    try:
        return _ANNOTATIONS.validate_python(inner)
    except ValidationError as e:
        raise DecodingFailedError(f"Failed to decode CLDR annotations: {e}") from e


def annotations_to_entries(annotations: Dict[str, CLDRAnnotation]) -> List[EmojiRawEntry]:
    entries: List[EmojiRawEntry] = []
    for character, annotation in annotations.items():
        if not character or has_skin_tone_modifier(character):
            continue
        name = annotation.tts[0] if annotation.tts else character
        entries.append(
            EmojiRawEntry(
                character=character,
                name=name,
                category=UNKNOWN_CATEGORY,
                keywords=list(annotation.default or []),
            )
        )
    return sorted(entries, key=lambda e: e.character)


# ---------------------------------------------------------------------------
# Source
# ---------------------------------------------------------------------------

class CLDREmojiDataSource(EmojiDataSource):
    """Localized names and keywords from Unicode CLDR."""

    def __init__(self, locale: str = DEFAULT_LOCALE, http: Optional[JsonHttpClient] = None):
        self.locale = normalize_locale(locale)
        self.http = http or JsonHttpClient()
        self.identifier = f"cldr-{self.locale}"
        self.display_name = f"Unicode CLDR ({self.locale})"

    def best_available_locale(self, available: Optional[List[str]] = None) -> str:
        """Exact identifier, then language subtag, then English."""
        available = available if available is not None else (cached_locales() or COMMON_LOCALES)
        if self.locale in available:
            return self.locale
        lang = language_code(self.locale)
        if lang in available:
            return lang
        return DEFAULT_LOCALE

    @property
    def remote_url(self) -> Optional[str]:
        return f"{CLDR_BASE_URL}/{self.best_available_locale()}/annotations.json"

    async def fetch(self) -> List[EmojiRawEntry]:
        payload = await self.http.get_json(self.remote_url)
        entries = annotations_to_entries(parse_annotations(payload))
        if not entries:
            raise EmptyDataError(f"CLDR returned no annotations for {self.locale}")
        logger.debug("cldr_fetched", locale=self.locale, count=len(entries))
        return entries


__all__ = [
    "CLDR_BASE_URL",
    "CLDR_API_URL",
    "CLDRAnnotation",
    "CLDREmojiDataSource",
    "annotations_to_entries",
    "cached_locales",
    "clear_locales_cache",
    "fetch_available_locales",
    "parse_annotations",
]
