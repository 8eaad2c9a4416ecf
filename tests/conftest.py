# tests/conftest.py
import asyncio
from datetime import datetime, timezone
from typing import List, Optional
from unittest.mock import MagicMock

import pytest
import requests

from emoji_index.adapters.persistence.disk_cache import DiskCache
from emoji_index.adapters.persistence.fallback import FallbackLoader
from emoji_index.adapters.persistence.usage_store import MemoryUsageStore
from emoji_index.adapters.sources.http import JsonHttpClient
from emoji_index.core.domain.models import EmojiRawEntry
from emoji_index.core.ports import DEFAULT_REFRESH_INTERVAL, EmojiDataSource
from emoji_index.services.index_provider import EmojiIndexProvider
from emoji_index.services.usage_tracker import EmojiUsageTracker
from emoji_index.shared.logging_setup import init_logging


@pytest.fixture(autouse=True, scope="session")
def _configure_logging():
    """structlog events go through stdlib logging on stderr; stdout carries CLI output only."""
    init_logging("DEBUG", force=True)


def make_entry(
    character: str,
    name: str,
    category: str = "Smileys & Emotion",
    shortcodes=(),
    keywords=(),
    supports_skin_tone: bool = False,
) -> EmojiRawEntry:
    return EmojiRawEntry(
        character=character,
        name=name,
        category=category,
        shortcodes=list(shortcodes),
        keywords=list(keywords),
        supports_skin_tone=supports_skin_tone,
    )


class FakeSource(EmojiDataSource):
    """
    Controllable source: counts fetches, can fail, and can be held on a gate
    to simulate a slow network.
    """

    def __init__(
        self,
        entries: Optional[List[EmojiRawEntry]] = None,
        identifier: str = "fake",
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        error: Optional[Exception] = None,
    ):
        self.entries = list(entries or [])
        self.identifier = identifier
        self.display_name = identifier.title()
        self._refresh_interval = refresh_interval
        self.error = error
        self.gate: Optional[asyncio.Event] = None
        self.calls = 0

    @property
    def refresh_interval(self) -> float:
        return self._refresh_interval

    async def fetch(self) -> List[EmojiRawEntry]:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.entries)


class FakeClock:
    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def sample_entries() -> List[EmojiRawEntry]:
    return [
        make_entry("😀", "grinning face", shortcodes=["grinning"], keywords=["face", "grin", "smile"]),
        make_entry("😢", "crying face", shortcodes=["cry"], keywords=["sad", "tear"]),
        make_entry("😭", "loudly crying face", shortcodes=["sob"], keywords=["cry", "sad", "sob", "tear"]),
        make_entry("👍", "thumbs up", "People & Body", ["+1", "thumbsup"], ["approve", "hand"], True),
        make_entry("🐱", "cat face", "Animals & Nature", ["cat"], ["kitten", "pet"]),
        make_entry("🍕", "pizza", "Food & Drink", ["pizza"], ["cheese", "slice"]),
        make_entry("🚀", "rocket", "Travel & Places", ["rocket"], ["launch", "space"]),
    ]


@pytest.fixture
def fake_source(sample_entries) -> FakeSource:
    return FakeSource(sample_entries)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(tmp_path, clock) -> DiskCache:
    return DiskCache(tmp_path / "cache", clock=clock)


@pytest.fixture
def no_fallback() -> FallbackLoader:
    return FallbackLoader(fallback_dir=None)


@pytest.fixture
def usage_store() -> MemoryUsageStore:
    return MemoryUsageStore()


@pytest.fixture
def usage_tracker(usage_store) -> EmojiUsageTracker:
    return EmojiUsageTracker(usage_store, default_seed=[])


@pytest.fixture
def make_provider(cache, no_fallback, usage_tracker, clock):
    """Factory so tests can swap the source, fallback or ranking flags."""

    def _make(source: EmojiDataSource, **overrides) -> EmojiIndexProvider:
        kwargs = dict(
            cache=cache,
            usage_tracker=usage_tracker,
            fallback=no_fallback,
            locale="en",
            clock=clock,
        )
        kwargs.update(overrides)
        return EmojiIndexProvider(source, **kwargs)

    return _make


@pytest.fixture
def mock_session():
    """requests.Session double; configure ``mock_session.get.return_value``."""
    return MagicMock(spec=requests.Session)


@pytest.fixture
def http_client(mock_session) -> JsonHttpClient:
    # One attempt: no tenacity back-off in tests.
    return JsonHttpClient(session=mock_session, timeout=1.0, attempts=1)


def json_response(payload, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response
