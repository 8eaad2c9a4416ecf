# emoji_index/adapters/persistence/disk_cache.py
"""
Two-tier emoji cache: an in-memory map over one JSON file per source.

    <cache_dir>/<source_identifier>.json

The file's modification time is the authoritative ``last_updated``; nothing
inside the payload records when it was written. The memory layer is only
populated from a successful disk read or after a successful disk write, so it
never runs ahead of disk.
"""

from __future__ import annotations

import asyncio
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import aiofiles
import aiofiles.os
import structlog

from emoji_index.adapters.persistence.codec import decode_entries, encode_entries
from emoji_index.core.domain.exceptions import CacheReadError, CacheWriteError, DecodingFailedError
from emoji_index.core.domain.models import CacheEntryInfo, EmojiRawEntry
from emoji_index.core.ports import EmojiCache

logger = structlog.get_logger()

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _mtime(path: Path) -> datetime:
    return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)


class DiskCache(EmojiCache):

    def __init__(self, cache_dir: Path | str, clock: Clock = utc_now):
        self.directory = Path(cache_dir).expanduser()
        self.clock = clock
        self._memory: Dict[str, Tuple[List[EmojiRawEntry], datetime]] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def _file_for(self, source_identifier: str) -> Path:
        if not isinstance(source_identifier, str) or not source_identifier.strip():
            raise ValueError("Source identifier must be a non-empty string.")
        if "/" in source_identifier or "\\" in source_identifier or source_identifier.startswith("."):
            raise ValueError(f"Source identifier is not a valid file name: {source_identifier!r}")
        return self.directory / f"{source_identifier}.json"

    def _cache_files(self) -> List[Path]:
        if not self.directory.is_dir():
            return []
        return sorted(p for p in self.directory.glob("*.json") if not p.name.startswith("."))

    # ------------------------------------------------------------------
    # EmojiCache
    # ------------------------------------------------------------------

    async def load(self, source_identifier: str) -> Optional[Tuple[List[EmojiRawEntry], datetime]]:
        with self._lock:
            hit = self._memory.get(source_identifier)
        if hit is not None:
            return list(hit[0]), hit[1]

        path = self._file_for(source_identifier)
        if not await aiofiles.os.path.exists(path):
            return None

        try:
            async with aiofiles.open(path, mode="rb") as f:
                data = await f.read()
            stat = await aiofiles.os.stat(path)
        except FileNotFoundError:
            # Removed between the existence check and the read.
            return None
        except OSError as e:
            logger.warning("cache_read_failed", source=source_identifier, error=str(e))
            raise CacheReadError(f"Failed to read cache for {source_identifier}: {e}") from e

        entries = decode_entries(data)
        last_updated = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)

        with self._lock:
            self._memory[source_identifier] = (entries, last_updated)
        logger.debug("cache_loaded", source=source_identifier, count=len(entries))
        return list(entries), last_updated

    async def save(self, entries: List[EmojiRawEntry], source_identifier: str) -> None:
        path = self._file_for(source_identifier)
        tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")

        try:
            payload = encode_entries(entries)
            await asyncio.to_thread(self.directory.mkdir, parents=True, exist_ok=True)
            async with aiofiles.open(tmp, mode="wb") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp, path)
            stat = await aiofiles.os.stat(path)
        except (OSError, ValueError) as e:
            await self._discard(tmp)
            logger.error("cache_write_failed", source=source_identifier, error=str(e))
            raise CacheWriteError(f"Failed to write cache for {source_identifier}: {e}") from e

        with self._lock:
            self._memory[source_identifier] = (
                list(entries),
                datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            )
        logger.info("cache_saved", source=source_identifier, count=len(entries), bytes=len(payload))

    async def clear(self, source_identifier: str) -> None:
        path = self._file_for(source_identifier)
        with self._lock:
            self._memory.pop(source_identifier, None)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return
        except OSError as e:
            raise CacheWriteError(f"Failed to clear cache for {source_identifier}: {e}") from e
        logger.info("cache_cleared", source=source_identifier)

    async def clear_all(self) -> None:
        with self._lock:
            self._memory.clear()
        for path in await asyncio.to_thread(self._cache_files):
            try:
                await aiofiles.os.remove(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                raise CacheWriteError(f"Failed to clear cache file {path.name}: {e}") from e
        logger.info("cache_cleared_all", directory=str(self.directory))

    async def _discard(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except OSError:
            pass

    # ------------------------------------------------------------------
    # Management
    # ------------------------------------------------------------------

    def _entry_info(self, path: Path) -> Optional[CacheEntryInfo]:
        source_identifier = path.stem
        try:
            stat = path.stat()
        except OSError:
            return None

        with self._lock:
            hit = self._memory.get(source_identifier)
        if hit is not None:
            count = len(hit[0])
        else:
            try:
                count = len(decode_entries(path.read_bytes()))
            except (OSError, DecodingFailedError):
                count = 0

        return CacheEntryInfo(
            source_identifier=source_identifier,
            file_size=stat.st_size,
            last_updated=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            emoji_count=count,
        )

    def _list_entries_sync(self) -> List[CacheEntryInfo]:
        infos = (self._entry_info(p) for p in self._cache_files())
        return [info for info in infos if info is not None]

    async def list_entries(self) -> List[CacheEntryInfo]:
        """All cached namespaces with size, age and emoji count."""
        return await asyncio.to_thread(self._list_entries_sync)

    async def total_size(self) -> int:
        """Total bytes used by cache files."""
        return sum(e.file_size for e in await self.list_entries())

    async def is_expired(self, source_identifier: str, max_age: float) -> bool:
        """
        True when the entry's age is strictly greater than ``max_age`` seconds.
        A missing entry counts as expired.
        """
        path = self._file_for(source_identifier)
        try:
            last_updated = await asyncio.to_thread(_mtime, path)
        except OSError:
            return True
        return (self.clock() - last_updated).total_seconds() > max_age

    async def clear_expired(self, max_age: float) -> List[str]:
        """Remove every entry older than ``max_age`` seconds. Returns removed identifiers."""
        now = self.clock()
        removed: List[str] = []
        for entry in await self.list_entries():
            if (now - entry.last_updated).total_seconds() > max_age:
                await self.clear(entry.source_identifier)
                removed.append(entry.source_identifier)
        if removed:
            logger.info("cache_expired_swept", removed=removed)
        return removed


__all__ = ["DiskCache", "utc_now"]
