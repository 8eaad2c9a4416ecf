# emoji_index/cli.py
#
# Command line entry point.
#
# Commands:
#   build-fallback  Fetch a source and write offline fallback files
#                   (emoji-fallback.json for English, emoji-fallback-<locale>.json otherwise).
#   cache           Inspect or clean the on-disk cache.
#   search          Query the index.
#
# Results go to STDOUT; logs go to STDERR.

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import aiofiles
import structlog

from emoji_index.adapters.persistence.codec import encode_entries
from emoji_index.adapters.persistence.fallback import fallback_filename
from emoji_index.adapters.sources.blended import BlendedEmojiDataSource
from emoji_index.adapters.sources.cldr import CLDREmojiDataSource
from emoji_index.adapters.sources.gemoji import GemojiDataSource
from emoji_index.adapters.sources.http import JsonHttpClient
from emoji_index.core.domain.exceptions import EmojiIndexError
from emoji_index.core.domain.models import SearchRanking
from emoji_index.core.ports import EmojiDataSource
from emoji_index.shared.config import settings
from emoji_index.shared.container import Container
from emoji_index.shared.logging_setup import init_logging

logger = structlog.get_logger()

SOURCES = ("gemoji", "cldr", "blended")


def _parse_locales(raw: str) -> List[str]:
    return [t.strip() for t in (raw or "").split(",") if t.strip()] or ["en"]


def build_source(kind: str, locale: str, http: Optional[JsonHttpClient] = None) -> EmojiDataSource:
    if kind == "gemoji":
        return GemojiDataSource(http=http)
    if kind == "cldr":
        return CLDREmojiDataSource(locale, http=http)
    if kind == "blended":
        return BlendedEmojiDataSource(CLDREmojiDataSource(locale, http=http), GemojiDataSource(http=http))
    raise ValueError(f"Unknown source: {kind}")


def _human_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


# -----------------------------------------------------------------------------
# build-fallback
# -----------------------------------------------------------------------------
async def build_fallback(
    kind: str,
    locales: List[str],
    output_dir: Path,
    http: Optional[JsonHttpClient] = None,
) -> List[Path]:
    """Fetch each locale and write its fallback file. Returns the written paths."""
    # Gemoji carries English only; one file covers it.
    if kind == "gemoji":
        locales = ["en"]

    output_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for locale in locales:
        source = build_source(kind, locale, http=http)
        entries = await source.fetch()
        path = output_dir / fallback_filename(locale)
        async with aiofiles.open(path, mode="wb") as f:
            await f.write(encode_entries(entries))
        logger.info("fallback_written", path=str(path), source=source.identifier, count=len(entries))
        written.append(path)
    return written


def _cmd_build_fallback(args: argparse.Namespace, container: Container) -> int:
    try:
        written = asyncio.run(
            build_fallback(args.source, _parse_locales(args.locales), Path(args.output_dir), container.http_client())
        )
    except EmojiIndexError as e:
        logger.error("fallback_build_failed", error=str(e), suggestion=e.recovery_suggestion)
        return 1
    for path in written:
        print(path)
    return 0


# -----------------------------------------------------------------------------
# cache
# -----------------------------------------------------------------------------
async def _cache_action(args: argparse.Namespace, container: Container) -> int:
    cache = container.cache()

    if args.action == "list":
        for info in await cache.list_entries():
            print(
                f"{info.source_identifier:<24} {info.emoji_count:>6} emoji  "
                f"{_human_size(info.file_size):>10}  {info.last_updated.isoformat()}"
            )
        return 0

    if args.action == "size":
        print(_human_size(await cache.total_size()))
        return 0

    if args.action == "clear":
        if args.identifier:
            await cache.clear(args.identifier)
        else:
            await cache.clear_all()
        return 0

    if args.action == "sweep":
        for identifier in await cache.clear_expired(args.max_age):
            print(identifier)
        return 0

    raise ValueError(f"Unknown cache action: {args.action}")


def _cmd_cache(args: argparse.Namespace, container: Container) -> int:
    try:
        return asyncio.run(_cache_action(args, container))
    except (EmojiIndexError, ValueError) as e:
        logger.error("cache_command_failed", action=args.action, error=str(e))
        return 1


# -----------------------------------------------------------------------------
# search
# -----------------------------------------------------------------------------
async def _search(args: argparse.Namespace, container: Container) -> int:
    provider = container.index_provider()
    if args.locale:
        await provider.set_locale(args.locale)
    else:
        await provider.load()

    results = await provider.search(args.query, SearchRanking(args.ranking))
    if args.limit:
        results = results[: args.limit]
    for emoji in results:
        shortcodes = " ".join(f":{s}:" for s in emoji.shortcodes)
        print(f"{emoji.character}\t{emoji.name}\t{shortcodes}")

    await provider.wait_for_background()
    return 0


def _cmd_search(args: argparse.Namespace, container: Container) -> int:
    try:
        return asyncio.run(_search(args, container))
    except EmojiIndexError as e:
        logger.error("search_failed", error=str(e), suggestion=e.recovery_suggestion)
        return 1


# -----------------------------------------------------------------------------
# Entry point
# -----------------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="emoji-index", description="Emoji metadata index.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_build = sub.add_parser("build-fallback", help="Write offline fallback files.")
    p_build.add_argument("--source", choices=SOURCES, default="blended")
    p_build.add_argument("--locales", default="en", help="Comma separated (e.g. en,ja,fr)")
    p_build.add_argument("--output-dir", default=".", help="Directory for the generated files")
    p_build.set_defaults(handler=_cmd_build_fallback)

    p_cache = sub.add_parser("cache", help="Inspect or clean the cache.")
    cache_sub = p_cache.add_subparsers(dest="action", required=True)
    cache_sub.add_parser("list", help="List cached sources.")
    cache_sub.add_parser("size", help="Total cache size.")
    p_clear = cache_sub.add_parser("clear", help="Clear one source, or everything.")
    p_clear.add_argument("identifier", nargs="?")
    p_sweep = cache_sub.add_parser("sweep", help="Remove entries older than --max-age.")
    p_sweep.add_argument("--max-age", type=float, default=7 * 24 * 60 * 60.0, help="Seconds")
    p_cache.set_defaults(handler=_cmd_cache)

    p_search = sub.add_parser("search", help="Search emoji.")
    p_search.add_argument("query")
    p_search.add_argument("--ranking", choices=[r.value for r in SearchRanking], default=SearchRanking.RELEVANCE.value)
    p_search.add_argument("--locale", default=None)
    p_search.add_argument("--limit", type=int, default=20, help="0 = all")
    p_search.set_defaults(handler=_cmd_search)

    return parser


def main(argv: Optional[List[str]] = None, container: Optional[Container] = None) -> int:
    args = build_parser().parse_args(argv)
    init_logging("DEBUG" if args.verbose else settings.LOG_LEVEL)
    return args.handler(args, container or Container())


if __name__ == "__main__":
    sys.exit(main())
