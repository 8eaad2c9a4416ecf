# emoji_index/adapters/sources/__init__.py
"""
Data Source Adapters.

Concrete implementations of the ``EmojiDataSource`` port:

1. GemojiDataSource: canonical order, shortcodes and tags (English).
2. CLDREmojiDataSource: localized names and keywords from Unicode CLDR.
3. AppleEmojiDataSource: localized names from macOS CoreEmoji (macOS only).
4. BlendedEmojiDataSource: composes a localization source with an ordering source.
5. StaticDataSource: a fixed in-memory batch.
"""

from .apple import AppleEmojiDataSource
from .blended import BlendedEmojiDataSource, blend_entries
from .cldr import CLDREmojiDataSource, fetch_available_locales
from .gemoji import GemojiDataSource
from .http import JsonHttpClient
from .static import StaticDataSource

__all__ = [
    "AppleEmojiDataSource",
    "BlendedEmojiDataSource",
    "CLDREmojiDataSource",
    "GemojiDataSource",
    "JsonHttpClient",
    "StaticDataSource",
    "blend_entries",
    "fetch_available_locales",
]
