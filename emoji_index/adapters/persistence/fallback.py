# emoji_index/adapters/persistence/fallback.py
"""
Read-only offline snapshots used when no cache exists.

Selection order
---------------
1. An explicit file path supplied by the caller.
2. ``emoji-fallback-<locale>.json`` (full locale, then language subtag).
3. ``emoji-fallback.json`` (English/default).

The first file that exists is used; the schema is the cache file schema.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import aiofiles
import structlog

from emoji_index.adapters.persistence.codec import decode_entries
from emoji_index.core.domain.exceptions import CacheReadError
from emoji_index.core.domain.models import EmojiRawEntry
from emoji_index.shared.locales import language_code, normalize_locale

logger = structlog.get_logger()

BUNDLED_FALLBACK_DIR = Path(__file__).resolve().parents[2] / "data"
DEFAULT_FALLBACK_NAME = "emoji-fallback.json"


def fallback_filename(locale: Optional[str]) -> str:
    """File name the CLI writes for ``locale``; English maps to the default name."""
    if not locale or normalize_locale(locale) == "en":
        return DEFAULT_FALLBACK_NAME
    return f"emoji-fallback-{normalize_locale(locale)}.json"


class FallbackLoader:

    def __init__(
        self,
        fallback_dir: Optional[Path | str] = BUNDLED_FALLBACK_DIR,
        explicit_path: Optional[Path | str] = None,
    ):
        self.fallback_dir = Path(fallback_dir) if fallback_dir else None
        self.explicit_path = Path(explicit_path) if explicit_path else None

    def candidates(self, locale: Optional[str]) -> List[Path]:
        paths: List[Path] = []
        if self.explicit_path is not None:
            paths.append(self.explicit_path)
        if self.fallback_dir is not None:
            if locale:
                paths.append(self.fallback_dir / f"emoji-fallback-{normalize_locale(locale)}.json")
                paths.append(self.fallback_dir / f"emoji-fallback-{language_code(locale)}.json")
            paths.append(self.fallback_dir / DEFAULT_FALLBACK_NAME)

        unique: List[Path] = []
        for p in paths:
            if p not in unique:
                unique.append(p)
        return unique

    def resolve(self, locale: Optional[str]) -> Optional[Path]:
        for path in self.candidates(locale):
            if path.is_file():
                return path
        return None

    async def load(self, locale: Optional[str]) -> Optional[List[EmojiRawEntry]]:
        """
        Entries from the first available fallback file, or None if there is none.
        Raises CacheReadError / DecodingFailedError for unreadable files.
        """
        path = self.resolve(locale)
        if path is None:
            return None
        try:
            async with aiofiles.open(path, mode="rb") as f:
                data = await f.read()
        except OSError as e:
            raise CacheReadError(f"Failed to read fallback file {path}: {e}") from e

        entries = decode_entries(data)
        logger.info("fallback_loaded", path=str(path), count=len(entries))
        return entries


__all__ = ["BUNDLED_FALLBACK_DIR", "DEFAULT_FALLBACK_NAME", "FallbackLoader", "fallback_filename"]
