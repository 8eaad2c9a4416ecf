# emoji_index/core/domain/__init__.py
from .exceptions import (
    CacheReadError,
    CacheWriteError,
    DecodingFailedError,
    DomainError,
    EmojiIndexError,
    EmptyDataError,
    InvalidResponseError,
    InvalidURLError,
    NetworkUnavailableError,
    NoDataAvailableError,
    SourceUnavailableError,
)
from .models import (
    CacheEntryInfo,
    Emoji,
    EmojiCategory,
    EmojiRawEntry,
    EmojiSection,
    LoadInfo,
    LoadOrigin,
    LoadState,
    SearchRanking,
    SkinTone,
)

__all__ = [
    "CacheEntryInfo",
    "CacheReadError",
    "CacheWriteError",
    "DecodingFailedError",
    "DomainError",
    "Emoji",
    "EmojiCategory",
    "EmojiIndexError",
    "EmojiRawEntry",
    "EmojiSection",
    "EmptyDataError",
    "InvalidResponseError",
    "InvalidURLError",
    "LoadInfo",
    "LoadOrigin",
    "LoadState",
    "NetworkUnavailableError",
    "NoDataAvailableError",
    "SearchRanking",
    "SkinTone",
    "SourceUnavailableError",
]
