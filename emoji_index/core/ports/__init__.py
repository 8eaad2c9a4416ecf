# emoji_index/core/ports/__init__.py
"""
Core Ports (Interfaces).

Abstract base classes the adapters implement. The index provider and the
usage tracker only talk to these, so sources, caches and score stores can be
swapped (or mocked in tests) without touching the core.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from emoji_index.core.domain.models import EmojiRawEntry

DEFAULT_REFRESH_INTERVAL = 24 * 60 * 60.0

# =========================================================
# 1. DATA SOURCES
# =========================================================

class EmojiDataSource(ABC):
    """
    Port for emoji data providers.

    ``identifier`` namespaces the cache; changing how it is computed
    invalidates previously cached data.
    """
    identifier: str
    display_name: str

    @property
    def remote_url(self) -> Optional[str]:
        """URL the source fetches from, or None for non-HTTP sources."""
        return None

    @property
    def refresh_interval(self) -> float:
        """Seconds after which cached data for this source is stale."""
        return DEFAULT_REFRESH_INTERVAL

    @abstractmethod
    async def fetch(self) -> List[EmojiRawEntry]:
        """Fetch a batch of raw entries. Raises EmojiIndexError subclasses."""
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.identifier!r}>"

# =========================================================
# 2. PERSISTENCE
# =========================================================

class EmojiCache(ABC):
    """
    Port for persisting fetched batches, keyed by source identifier.
    """
    @abstractmethod
    async def load(self, source_identifier: str) -> Optional[Tuple[List[EmojiRawEntry], datetime]]:
        """Return (entries, last_updated), or None on a cache miss."""
        pass

    @abstractmethod
    async def save(self, entries: List[EmojiRawEntry], source_identifier: str) -> None:
        pass

    @abstractmethod
    async def clear(self, source_identifier: str) -> None:
        pass

    @abstractmethod
    async def clear_all(self) -> None:
        pass


class UsageStore(ABC):
    """
    Port for persisting the usage score table.
    """
    @abstractmethod
    def load(self) -> Dict[str, float]:
        pass

    @abstractmethod
    def save(self, scores: Dict[str, float]) -> None:
        pass

# =========================================================
# EXPORTS
# =========================================================
__all__ = [
    "DEFAULT_REFRESH_INTERVAL",
    "EmojiDataSource",
    "EmojiCache",
    "UsageStore",
]
