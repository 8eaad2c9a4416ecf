# emoji_index/services/locale_manager.py
"""Locale preference and data-source selection."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import structlog

from emoji_index.adapters.persistence.usage_store import JsonPreferences
from emoji_index.adapters.sources import apple
from emoji_index.adapters.sources.apple import AppleEmojiDataSource
from emoji_index.adapters.sources.blended import BlendedEmojiDataSource
from emoji_index.adapters.sources.cldr import CLDREmojiDataSource
from emoji_index.adapters.sources.gemoji import GemojiDataSource
from emoji_index.adapters.sources.http import JsonHttpClient
from emoji_index.core.ports import EmojiDataSource
from emoji_index.shared.locales import COMMON_LOCALES, normalize_locale, system_locale

logger = structlog.get_logger()

PREFERRED_LOCALE_KEY = "preferred_locale"


def recommended_data_source(
    locale: str,
    platform: str = sys.platform,
    prefer_apple: bool = True,
    http: Optional[JsonHttpClient] = None,
    framework_path: Path = apple.FRAMEWORK_PATH,
) -> EmojiDataSource:
    """
    Apple names blended over Gemoji on macOS (when CoreEmoji is present and
    preferred), otherwise CLDR names blended over Gemoji.
    """
    locale = normalize_locale(locale)
    gemoji = GemojiDataSource(http=http)
    if prefer_apple and apple.is_available(platform, framework_path):
        localized: EmojiDataSource = AppleEmojiDataSource(locale, platform=platform, framework_path=framework_path)
    else:
        localized = CLDREmojiDataSource(locale, http=http)
    return BlendedEmojiDataSource(localized, gemoji)


class EmojiLocaleManager:

    def __init__(
        self,
        preferences: Optional[JsonPreferences] = None,
        *,
        platform: str = sys.platform,
        prefer_apple: bool = True,
        framework_path: Path = apple.FRAMEWORK_PATH,
        http: Optional[JsonHttpClient] = None,
    ):
        self.preferences = preferences
        self.platform = platform
        self.prefer_apple = prefer_apple
        self.framework_path = Path(framework_path)
        self.http = http
        self._preferred: Optional[str] = None
        if preferences is not None:
            stored = preferences.get(PREFERRED_LOCALE_KEY)
            if isinstance(stored, str) and stored.strip():
                self._preferred = normalize_locale(stored)

    @property
    def preferred_locale(self) -> Optional[str]:
        return self._preferred

    @preferred_locale.setter
    def preferred_locale(self, locale: Optional[str]) -> None:
        self._preferred = normalize_locale(locale) if locale else None
        if self.preferences is not None:
            self.preferences.set(PREFERRED_LOCALE_KEY, self._preferred)
        logger.info("preferred_locale_changed", locale=self._preferred)

    @property
    def effective_locale(self) -> str:
        """The preferred locale, else the process locale."""
        return self._preferred or system_locale()

    @property
    def is_localization_available(self) -> bool:
        # CLDR covers every platform.
        return True

    @property
    def is_apple_localization_available(self) -> bool:
        return apple.is_available(self.platform, self.framework_path)

    @property
    def cldr_locales(self) -> List[str]:
        return sorted(COMMON_LOCALES)

    @property
    def apple_locales(self) -> List[str]:
        return apple.available_locales(self.platform, self.framework_path)

    @property
    def available_locales(self) -> List[str]:
        if self.prefer_apple and self.is_apple_localization_available:
            locales = self.apple_locales
            if locales:
                return locales
        return self.cldr_locales

    def recommended_data_source(self, locale: Optional[str] = None) -> EmojiDataSource:
        return recommended_data_source(
            locale or self.effective_locale,
            platform=self.platform,
            prefer_apple=self.prefer_apple,
            http=self.http,
            framework_path=self.framework_path,
        )


__all__ = ["EmojiLocaleManager", "PREFERRED_LOCALE_KEY", "recommended_data_source"]
