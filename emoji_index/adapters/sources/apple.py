# emoji_index/adapters/sources/apple.py
"""
Localized emoji names from macOS's private CoreEmoji framework.

Only usable on macOS with the framework present. Anywhere else ``fetch()``
raises ``SourceUnavailableError`` instead of returning an empty batch, so the
load pipeline can fall back correctly.
"""

import asyncio
import plistlib
import re
import sys
from pathlib import Path
from typing import Dict, List, Optional

import structlog

from emoji_index.core.domain.exceptions import SourceUnavailableError
from emoji_index.core.domain.models import UNKNOWN_CATEGORY, EmojiRawEntry, has_skin_tone_modifier
from emoji_index.core.ports import EmojiDataSource
from emoji_index.shared.locales import DEFAULT_LOCALE, language_code, normalize_locale

logger = structlog.get_logger()

FRAMEWORK_PATH = Path("/System/Library/PrivateFrameworks/CoreEmoji.framework/Versions/A/Resources")

_NON_ALNUM = re.compile(r"[^\w]+", re.UNICODE)


def is_available(platform: str = sys.platform, framework_path: Path = FRAMEWORK_PATH) -> bool:
    return platform == "darwin" and framework_path.is_dir()


def available_locales(platform: str = sys.platform, framework_path: Path = FRAMEWORK_PATH) -> List[str]:
    """Locales with an ``.lproj`` bundle in CoreEmoji, sorted. Empty off macOS."""
    if not is_available(platform, framework_path):
        return []
    return sorted(
        normalize_locale(p.name[: -len(".lproj")])
        for p in framework_path.iterdir()
        if p.name.endswith(".lproj")
    )


def _keywords_from_name(name: str) -> List[str]:
    return [w for w in _NON_ALNUM.split(name.lower()) if w and w != "_"]


class AppleEmojiDataSource(EmojiDataSource):

    def __init__(
        self,
        locale: str = DEFAULT_LOCALE,
        platform: str = sys.platform,
        framework_path: Path = FRAMEWORK_PATH,
    ):
        self.locale = normalize_locale(locale)
        self.platform = platform
        self.framework_path = Path(framework_path)
        self.identifier = f"apple-{self.locale}"
        self.display_name = f"Apple ({self.locale})"

    def _candidate_dirs(self) -> List[str]:
        underscored = self.locale.replace("-", "_")
        candidates = [underscored, language_code(self.locale), DEFAULT_LOCALE]
        seen: List[str] = []
        for c in candidates:
            if c not in seen:
                seen.append(c)
        return seen

    def _load_localized_names(self) -> Optional[Dict[str, str]]:
        for candidate in self._candidate_dirs():
            path = self.framework_path / f"{candidate}.lproj" / "AppleName.strings"
            if not path.is_file():
                continue
            try:
                with path.open("rb") as f:
                    data = plistlib.load(f)
            except (plistlib.InvalidFileException, OSError, ValueError) as e:
                logger.warning("apple_names_unreadable", path=str(path), error=str(e))
                continue
            if isinstance(data, dict):
                return {str(k): str(v) for k, v in data.items()}
        return None

    def _fetch_sync(self) -> List[EmojiRawEntry]:
        if not is_available(self.platform, self.framework_path):
            raise SourceUnavailableError("CoreEmoji framework not found")

        names = self._load_localized_names()
        if names is None:
            raise SourceUnavailableError(f"Could not load emoji names for locale {self.locale}")

        return [
            EmojiRawEntry(
                character=character,
                name=name,
                category=UNKNOWN_CATEGORY,
                keywords=_keywords_from_name(name),
            )
            for character, name in names.items()
            if character and not has_skin_tone_modifier(character)
        ]

    async def fetch(self) -> List[EmojiRawEntry]:
        return await asyncio.to_thread(self._fetch_sync)


__all__ = ["FRAMEWORK_PATH", "AppleEmojiDataSource", "available_locales", "is_available"]
