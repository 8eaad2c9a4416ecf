# emoji_index/services/index_provider.py
"""
services/index_provider.py
--------------------------

Default emoji index: owns a data source and a cache, runs the load pipeline,
and answers lookups and ranked searches over in-memory indices.

Load pipeline
=============
1. Cache hit for the active source's identifier: serve it immediately and,
   when it is older than ``source.refresh_interval``, refresh in the
   background.
2. Otherwise a fallback file (explicit path, locale file, default file):
   serve it and refresh in the background.
3. Otherwise fetch synchronously. Only this path can fail the initial load;
   it surfaces ``NoDataAvailableError`` chained to the underlying error.

Concurrency
===========
- Indices are built off to the side and swapped in under ``_lock`` in one
  step, so readers never observe a half-built index.
- Every refresh is tagged with the generation active when it was launched.
  ``set_locale``/``set_source``/``clear_cache_and_reload`` bump the
  generation; results of older generations are discarded on completion.
- Background refreshes are fire-and-forget tasks that log their own errors.
"""

from __future__ import annotations

import asyncio
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Set

import structlog

from emoji_index.adapters.persistence.disk_cache import Clock, utc_now
from emoji_index.adapters.persistence.fallback import FallbackLoader
from emoji_index.core.domain.exceptions import (
    CacheWriteError,
    EmojiIndexError,
    EmptyDataError,
    NoDataAvailableError,
)
from emoji_index.core.domain.models import (
    Emoji,
    EmojiCategory,
    EmojiRawEntry,
    EmojiSection,
    LoadInfo,
    LoadOrigin,
    LoadState,
    SearchRanking,
)
from emoji_index.core.ports import EmojiCache, EmojiDataSource
from emoji_index.services.usage_tracker import EmojiUsageTracker
from emoji_index.shared.locales import normalize_locale, system_locale

logger = structlog.get_logger()

SourceFactory = Callable[[str], EmojiDataSource]
Listener = Callable[["EmojiIndexProvider"], None]


@dataclass(frozen=True)
class _IndexSnapshot:
    """Immutable set of lookup structures built from one batch."""
    emojis: tuple = ()
    by_character: Dict[str, Emoji] = field(default_factory=dict)
    by_shortcode: Dict[str, Emoji] = field(default_factory=dict)
    by_category: Dict[EmojiCategory, List[Emoji]] = field(default_factory=dict)

    @classmethod
    def build(cls, entries: List[EmojiRawEntry]) -> "_IndexSnapshot":
        emojis: List[Emoji] = []
        by_character: Dict[str, Emoji] = {}
        by_shortcode: Dict[str, Emoji] = {}
        by_category: Dict[EmojiCategory, List[Emoji]] = {}

        for entry in entries:
            emoji = entry.to_emoji()
            if emoji is None:
                continue
            emojis.append(emoji)
            by_character[emoji.character] = emoji
            for shortcode in emoji.shortcodes:
                by_shortcode[shortcode.casefold()] = emoji
            by_category.setdefault(emoji.category, []).append(emoji)

        return cls(tuple(emojis), by_character, by_shortcode, by_category)


_EMPTY = _IndexSnapshot()


class EmojiIndexProvider:
    """
    Emoji index with caching, fallback and ranked search.

    All public data accessors auto-load on first use. ``load()``,
    ``all_emojis()``, ``categories()`` and ``sections()`` surface a terminal
    load failure; lookups, ``search()`` and ``favorites()`` degrade to empty
    results instead.
    """

    def __init__(
        self,
        source: EmojiDataSource,
        cache: EmojiCache,
        *,
        usage_tracker: Optional[EmojiUsageTracker] = None,
        fallback: Optional[FallbackLoader] = None,
        locale: Optional[str] = None,
        source_factory: Optional[SourceFactory] = None,
        rank_empty_query: bool = True,
        clock: Clock = utc_now,
    ):
        self._source = source
        self.cache = cache
        self.usage_tracker = usage_tracker
        self.fallback = fallback
        self.source_factory = source_factory
        self.rank_empty_query = rank_empty_query
        self.clock = clock
        self._locale = normalize_locale(locale or system_locale())

        self._lock = threading.Lock()
        self._index: _IndexSnapshot = _EMPTY
        self._has_index = False
        self._last_updated: Optional[datetime] = None
        self._last_load_info: Optional[LoadInfo] = None
        self._generation = 0
        self._busy = 0

        self._load_lock = asyncio.Lock()
        self._background: Set[asyncio.Task] = set()
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def source(self) -> EmojiDataSource:
        return self._source

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def state(self) -> LoadState:
        with self._lock:
            if self._busy:
                return LoadState.LOADING
            return LoadState.LOADED if self._has_index else LoadState.NOT_LOADED

    @property
    def is_loaded(self) -> bool:
        with self._lock:
            return self._has_index

    @property
    def is_loading(self) -> bool:
        return self.state is LoadState.LOADING

    @property
    def last_updated(self) -> Optional[datetime]:
        with self._lock:
            return self._last_updated

    @property
    def last_load_info(self) -> Optional[LoadInfo]:
        with self._lock:
            return self._last_load_info

    @property
    def is_stale(self) -> bool:
        last_updated = self.last_updated
        if last_updated is None:
            return True
        return (self.clock() - last_updated).total_seconds() > self._source.refresh_interval

    def add_listener(self, listener: Listener) -> None:
        """Register a callback invoked after every index swap or reset."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Run the load pipeline once; later calls are no-ops."""
        while not self.is_loaded:
            async with self._load_lock:
                if self.is_loaded:
                    return
                generation = self._generation
                await self._run_pipeline(generation)
                if generation == self._generation:
                    return
                # The source changed while loading; load again for the new one.

    async def refresh(self) -> None:
        """
        Fetch from the source, save to the cache and rebuild the indices.
        On failure the current indices keep serving and the error propagates.
        """
        self._enter_busy()
        try:
            await self._refresh(self._source, self._generation)
        finally:
            self._leave_busy()

    async def clear_cache_and_reload(self) -> None:
        """Drop the active source's cache and indices, then fetch fresh data."""
        await self.cache.clear(self._source.identifier)
        generation = self._reset()
        self._enter_busy()
        try:
            await self._refresh(self._source, generation)
        finally:
            self._leave_busy()

    async def set_locale(self, locale: str) -> None:
        """Switch to the source resolved for ``locale`` and load it."""
        if self.source_factory is None:
            raise ValueError("set_locale requires a source_factory")
        locale = normalize_locale(locale)
        await self.set_source(self.source_factory(locale), locale=locale)

    async def set_source(self, source: EmojiDataSource, *, locale: Optional[str] = None) -> None:
        """Replace the data source (new cache namespace) and load it."""
        with self._lock:
            self._source = source
            if locale is not None:
                self._locale = normalize_locale(locale)
        self._reset()
        logger.info("index_source_changed", source=source.identifier, locale=self._locale)
        await self.load()

    async def wait_for_background(self) -> None:
        """Wait until pending background refreshes have finished."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def _run_pipeline(self, generation: int) -> None:
        source = self._source
        started = time.perf_counter()
        self._enter_busy()
        try:
            # 1. Cache
            try:
                cached = await self.cache.load(source.identifier)
            except EmojiIndexError as e:
                logger.warning("index_cache_unusable", source=source.identifier, error=str(e))
                cached = None

            if cached is not None and cached[0]:
                entries, last_updated = cached
                if self._install(entries, generation, LoadOrigin.CACHE, last_updated, started):
                    if self.is_stale:
                        self._spawn_refresh(source, generation, "stale_cache")
                return

            # 2. Fallback file
            fallback_entries: Optional[List[EmojiRawEntry]] = None
            if self.fallback is not None:
                try:
                    fallback_entries = await self.fallback.load(self._locale)
                except EmojiIndexError as e:
                    logger.warning("index_fallback_unusable", locale=self._locale, error=str(e))

            if fallback_entries:
                if self._install(fallback_entries, generation, LoadOrigin.FALLBACK, None, started):
                    self._spawn_refresh(source, generation, "fallback")
                return

            # 3. Network
            try:
                await self._refresh(source, generation, started=started)
            except EmojiIndexError as e:
                logger.error("index_load_failed", source=source.identifier, error=str(e))
                raise NoDataAvailableError(f"No emoji data available for {source.identifier}: {e}") from e
        finally:
            self._leave_busy()

    async def _refresh(
        self,
        source: EmojiDataSource,
        generation: int,
        *,
        started: Optional[float] = None,
    ) -> None:
        started = time.perf_counter() if started is None else started

        entries = await source.fetch()
        if not entries:
            raise EmptyDataError(f"{source.identifier} returned no entries")

        if generation != self._generation:
            logger.info("index_refresh_discarded", source=source.identifier)
            return

        try:
            await self.cache.save(entries, source.identifier)
        except CacheWriteError as e:
            logger.warning("index_cache_save_failed", source=source.identifier, error=str(e))

        self._install(entries, generation, LoadOrigin.NETWORK, self.clock(), started)

    def _spawn_refresh(self, source: EmojiDataSource, generation: int, reason: str) -> None:
        task = asyncio.create_task(self._background_refresh(source, generation, reason))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _background_refresh(self, source: EmojiDataSource, generation: int, reason: str) -> None:
        try:
            await self._refresh(source, generation)
        except EmojiIndexError as e:
            logger.warning("index_background_refresh_failed", reason=reason, error=str(e))
        except Exception:
            logger.exception("index_background_refresh_crashed", reason=reason)
        else:
            logger.debug("index_background_refresh_done", reason=reason)

    def _install(
        self,
        entries: List[EmojiRawEntry],
        generation: int,
        origin: LoadOrigin,
        last_updated: Optional[datetime],
        started: float,
    ) -> bool:
        snapshot = _IndexSnapshot.build(entries)
        with self._lock:
            if generation != self._generation:
                return False
            self._index = snapshot
            self._has_index = True
            self._last_updated = last_updated
            self._last_load_info = LoadInfo(
                origin=origin,
                source_identifier=self._source.identifier,
                emoji_count=len(snapshot.emojis),
                duration_s=time.perf_counter() - started,
                loaded_at=self.clock(),
            )
        logger.info(
            "index_built",
            origin=origin.value,
            source=self._source.identifier,
            count=len(snapshot.emojis),
            dropped=len(entries) - len(snapshot.emojis),
        )
        self._notify()
        return True

    def _reset(self) -> int:
        with self._lock:
            self._generation += 1
            self._index = _EMPTY
            self._has_index = False
            self._last_updated = None
            self._last_load_info = None
            generation = self._generation
        self._notify()
        return generation

    def _enter_busy(self) -> None:
        with self._lock:
            self._busy += 1

    def _leave_busy(self) -> None:
        with self._lock:
            self._busy -= 1

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("index_listener_failed")

    async def _load_quietly(self) -> None:
        try:
            await self.load()
        except EmojiIndexError as e:
            logger.debug("index_unavailable", error=str(e))

    def _snapshot(self) -> _IndexSnapshot:
        with self._lock:
            return self._index

    # ------------------------------------------------------------------
    # Data access
    # ------------------------------------------------------------------

    async def all_emojis(self) -> List[Emoji]:
        await self.load()
        return list(self._snapshot().emojis)

    async def categories(self) -> Dict[EmojiCategory, List[Emoji]]:
        await self.load()
        by_category = self._snapshot().by_category
        return {c: list(by_category[c]) for c in EmojiCategory if by_category.get(c)}

    async def sections(self) -> List[EmojiSection]:
        """Non-empty categories in display order."""
        return [
            EmojiSection(category=category, emojis=tuple(emojis))
            for category, emojis in (await self.categories()).items()
        ]

    async def emoji(self, character: str) -> Optional[Emoji]:
        await self._load_quietly()
        if not character:
            return None
        return self._snapshot().by_character.get(character)

    async def emoji_for_shortcode(self, shortcode: str) -> Optional[Emoji]:
        """Case-insensitive; surrounding colons (``:sob:``) are ignored."""
        await self._load_quietly()
        key = (shortcode or "").strip().strip(":").casefold()
        if not key:
            return None
        return self._snapshot().by_shortcode.get(key)

    async def favorites(self) -> List[Emoji]:
        """Usage favorites resolved against the current index."""
        await self._load_quietly()
        if self.usage_tracker is None:
            return []
        by_character = self._snapshot().by_character
        return [by_character[c] for c in self.usage_tracker.favorites if c in by_character]

    def record_use(self, character: str) -> None:
        if self.usage_tracker is not None:
            self.usage_tracker.record_use(character)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, query: str, ranking: SearchRanking = SearchRanking.RELEVANCE) -> List[Emoji]:
        """
        Tiered search:
          1. exact shortcode (always first, whatever the ranking)
          2. name contains query
          3. shortcode prefix
          4. keyword prefix
        ``ranking`` reorders tiers 2-4 only.
        """
        await self._load_quietly()
        index = self._snapshot()
        query = (query or "").strip().casefold()

        if not query:
            everything = list(index.emojis)
            return self._rank(everything, ranking) if self.rank_empty_query else everything

        seen: Set[str] = set()
        pinned = index.by_shortcode.get(query)
        if pinned is not None:
            seen.add(pinned.character)

        matches: List[Emoji] = []
        tiers = (
            lambda e: query in e.name.casefold(),
            lambda e: any(s.casefold().startswith(query) for s in e.shortcodes),
            lambda e: any(k.casefold().startswith(query) for k in e.keywords),
        )
        for matcher in tiers:
            for emoji in index.emojis:
                if emoji.character in seen:
                    continue
                if matcher(emoji):
                    matches.append(emoji)
                    seen.add(emoji.character)

        ranked = self._rank(matches, ranking)
        if pinned is not None:
            ranked.insert(0, pinned)
        return ranked

    def _rank(self, emojis: List[Emoji], ranking: SearchRanking) -> List[Emoji]:
        # sorted() is stable: ties keep tier order.
        if ranking is SearchRanking.USAGE:
            if self.usage_tracker is None:
                return list(emojis)
            scores = self.usage_tracker.all_scores
            return sorted(emojis, key=lambda e: scores.get(e.character, 0.0), reverse=True)
        if ranking is SearchRanking.ALPHABETICAL:
            return sorted(emojis, key=lambda e: e.name.casefold())
        return list(emojis)


__all__ = ["EmojiIndexProvider"]
