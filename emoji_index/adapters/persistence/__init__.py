# emoji_index/adapters/persistence/__init__.py
"""
Persistence Adapters.

1. DiskCache: two-tier (memory + JSON files) implementation of ``EmojiCache``.
2. FallbackLoader: read-only offline snapshots in the cache file schema.
3. JsonFileUsageStore / MemoryUsageStore: ``UsageStore`` implementations.
"""

from .disk_cache import DiskCache
from .fallback import FallbackLoader, fallback_filename
from .usage_store import JsonFileUsageStore, JsonPreferences, MemoryUsageStore

__all__ = [
    "DiskCache",
    "FallbackLoader",
    "JsonFileUsageStore",
    "JsonPreferences",
    "MemoryUsageStore",
    "fallback_filename",
]
