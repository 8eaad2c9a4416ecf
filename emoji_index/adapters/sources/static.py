# emoji_index/adapters/sources/static.py
from typing import Iterable, List

from emoji_index.core.domain.exceptions import EmptyDataError
from emoji_index.core.domain.models import EmojiRawEntry
from emoji_index.core.ports import DEFAULT_REFRESH_INTERVAL, EmojiDataSource


class StaticDataSource(EmojiDataSource):
    """
    In-memory source serving a fixed batch.
    Used for embedding a snapshot and in tests.
    """

    def __init__(
        self,
        entries: Iterable[EmojiRawEntry],
        identifier: str = "static",
        display_name: str = "Static",
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
    ):
        self.entries = list(entries)
        self.identifier = identifier
        self.display_name = display_name
        self._refresh_interval = refresh_interval

    @property
    def refresh_interval(self) -> float:
        return self._refresh_interval

    async def fetch(self) -> List[EmojiRawEntry]:
        if not self.entries:
            raise EmptyDataError(f"{self.identifier} has no entries")
        return list(self.entries)
