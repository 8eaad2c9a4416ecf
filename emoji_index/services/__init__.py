# emoji_index/services/__init__.py
from .index_provider import EmojiIndexProvider
from .locale_manager import EmojiLocaleManager, recommended_data_source
from .usage_tracker import EmojiUsageTracker

__all__ = [
    "EmojiIndexProvider",
    "EmojiLocaleManager",
    "EmojiUsageTracker",
    "recommended_data_source",
]
