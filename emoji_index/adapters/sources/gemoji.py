# emoji_index/adapters/sources/gemoji.py
"""
GitHub gemoji data source.

The default source: canonical keyboard order, shortcodes (aliases), search
tags and skin-tone support, English names only.

    https://raw.githubusercontent.com/github/gemoji/master/db/emoji.json
"""

from typing import Any, List, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from emoji_index.adapters.sources.http import JsonHttpClient
from emoji_index.core.domain.exceptions import DecodingFailedError, EmptyDataError
from emoji_index.core.domain.models import EmojiRawEntry
from emoji_index.core.ports import EmojiDataSource

logger = structlog.get_logger()

GEMOJI_URL = "https://raw.githubusercontent.com/github/gemoji/master/db/emoji.json"


class GemojiEntry(BaseModel):
    """One record of gemoji's db/emoji.json."""
    model_config = ConfigDict(extra="ignore")

    emoji: str = Field(..., min_length=1)
    description: str = ""
    category: str = ""
    aliases: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    skin_tones: Optional[bool] = None
    unicode_version: Optional[str] = None
    ios_version: Optional[str] = None

    def to_raw_entry(self) -> EmojiRawEntry:
        words = [w for w in self.description.lower().split() if w]
        keywords = sorted(set(words + self.aliases + self.tags))
        return EmojiRawEntry(
            character=self.emoji,
            name=self.description,
            category=self.category,
            shortcodes=list(self.aliases),
            keywords=keywords,
            supports_skin_tone=bool(self.skin_tones),
        )


_GEMOJI_LIST = TypeAdapter(List[GemojiEntry])


def parse_gemoji(payload: Any) -> List[GemojiEntry]:
    try:
        return _GEMOJI_LIST.validate_python(payload)
    except ValidationError as e:
        raise DecodingFailedError(f"Failed to decode gemoji data: {e}") from e


class GemojiDataSource(EmojiDataSource):
    identifier = "gemoji"
    display_name = "GitHub Gemoji"

    def __init__(self, http: Optional[JsonHttpClient] = None, url: str = GEMOJI_URL):
        self.http = http or JsonHttpClient()
        self._url = url

    @property
    def remote_url(self) -> Optional[str]:
        return self._url

    async def fetch(self) -> List[EmojiRawEntry]:
        payload = await self.http.get_json(self.remote_url)
        entries = parse_gemoji(payload)
        if not entries:
            raise EmptyDataError("gemoji returned no entries")
        logger.debug("gemoji_fetched", count=len(entries))
        return [e.to_raw_entry() for e in entries]


__all__ = ["GEMOJI_URL", "GemojiEntry", "GemojiDataSource", "parse_gemoji"]
