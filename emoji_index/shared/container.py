# emoji_index/shared/container.py
from typing import Optional

from dependency_injector import containers, providers

from emoji_index.shared.config import settings

# --- Adapters ---
from emoji_index.adapters.persistence.disk_cache import DiskCache
from emoji_index.adapters.persistence.fallback import BUNDLED_FALLBACK_DIR, FallbackLoader
from emoji_index.adapters.persistence.usage_store import JsonFileUsageStore, JsonPreferences
from emoji_index.adapters.sources.http import JsonHttpClient
from emoji_index.core.ports import EmojiDataSource

# --- Services ---
from emoji_index.services.index_provider import EmojiIndexProvider
from emoji_index.services.locale_manager import EmojiLocaleManager
from emoji_index.services.usage_tracker import EmojiUsageTracker


def _initial_locale(manager: EmojiLocaleManager, configured: Optional[str]) -> str:
    return configured or manager.effective_locale


def _initial_source(manager: EmojiLocaleManager, locale: str) -> EmojiDataSource:
    return manager.recommended_data_source(locale)


class Container(containers.DeclarativeContainer):
    """
    Dependency Injection Container.
    Connects the adapters to the index provider.
    """

    # 1. Infrastructure

    http_client = providers.Singleton(
        JsonHttpClient,
        timeout=settings.HTTP_TIMEOUT,
        attempts=settings.HTTP_RETRY_ATTEMPTS,
    )

    cache = providers.Singleton(DiskCache, cache_dir=settings.CACHE_DIR)

    fallback_loader = providers.Singleton(
        FallbackLoader,
        fallback_dir=settings.FALLBACK_DIR or BUNDLED_FALLBACK_DIR,
        explicit_path=settings.FALLBACK_FILE,
    )

    usage_store = providers.Singleton(JsonFileUsageStore, path=settings.USAGE_STORE_PATH)

    preferences = providers.Singleton(JsonPreferences, path=settings.PREFERENCES_PATH)

    # 2. Services

    usage_tracker = providers.Singleton(
        EmojiUsageTracker,
        store=usage_store,
        enabled=settings.USAGE_TRACKING_ENABLED,
        min_favorites=settings.USAGE_MIN_FAVORITES,
        max_favorites=settings.USAGE_MAX_FAVORITES,
        decay_factor=settings.USAGE_DECAY_FACTOR,
        prune_threshold=settings.USAGE_PRUNE_THRESHOLD,
    )

    locale_manager = providers.Singleton(
        EmojiLocaleManager,
        preferences=preferences,
        prefer_apple=settings.PREFER_APPLE,
        http=http_client,
    )

    locale = providers.Callable(_initial_locale, manager=locale_manager, configured=settings.DEFAULT_LOCALE)

    data_source = providers.Singleton(_initial_source, manager=locale_manager, locale=locale)

    index_provider = providers.Singleton(
        EmojiIndexProvider,
        source=data_source,
        cache=cache,
        usage_tracker=usage_tracker,
        fallback=fallback_loader,
        locale=locale,
        source_factory=locale_manager.provided.recommended_data_source,
        rank_empty_query=settings.RANK_EMPTY_QUERY,
    )


# Global Container Instance
container = Container()
