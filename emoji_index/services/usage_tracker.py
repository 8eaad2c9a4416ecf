# emoji_index/services/usage_tracker.py
"""
Usage tracking with an exponential moving score.

Every recorded use multiplies all scores by ``decay_factor`` and adds 1.0 to
the used character, so frequently *and* recently used emoji rise to the top.
Repeated use of a single character converges to ``1 / (1 - decay_factor)``.

Low scores are pruned, but the top ``min_favorites`` entries are always kept.
"""

import threading
from typing import Dict, Iterable, List, Optional

import structlog

from emoji_index.core.ports import UsageStore

logger = structlog.get_logger()

DEFAULT_SEED: List[str] = ["👍", "❤️", "😂", "🔥", "✨", "🙏", "💀", "👀", "🎉", "💯"]


class EmojiUsageTracker:

    def __init__(
        self,
        store: UsageStore,
        *,
        enabled: bool = True,
        min_favorites: int = 10,
        max_favorites: int = 24,
        decay_factor: float = 0.9,
        prune_threshold: float = 0.01,
        default_seed: Optional[Iterable[str]] = None,
    ):
        if not 0.0 < decay_factor < 1.0:
            raise ValueError("decay_factor must be between 0 and 1 (exclusive).")
        self.store = store
        self.enabled = enabled
        self.min_favorites = min_favorites
        self.max_favorites = max_favorites
        self.decay_factor = decay_factor
        self.prune_threshold = prune_threshold
        self.default_seed = list(DEFAULT_SEED if default_seed is None else default_seed)

        self._lock = threading.Lock()
        # Serializes mutate + save so the store sees writes in mutation order.
        self._persist_lock = threading.Lock()
        self._scores: Dict[str, float] = dict(store.load())
        self._seed_if_empty()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def record_use(self, character: str) -> None:
        """Decay every score, boost ``character``, prune. No-op when disabled."""
        if not self.enabled or not character:
            return
        with self._persist_lock:
            with self._lock:
                for key in self._scores:
                    self._scores[key] *= self.decay_factor
                self._scores[character] = self._scores.get(character, 0.0) + 1.0
                self._prune()
                snapshot = dict(self._scores)
            self.store.save(snapshot)

    def score(self, character: str) -> float:
        with self._lock:
            return self._scores.get(character, 0.0)

    @property
    def all_scores(self) -> Dict[str, float]:
        with self._lock:
            return dict(self._scores)

    @property
    def favorites(self) -> List[str]:
        """Characters above the prune threshold, best first, at most ``max_favorites``."""
        if not self.enabled:
            return []
        with self._lock:
            ranked = sorted(
                (item for item in self._scores.items() if item[1] > self.prune_threshold),
                key=lambda item: item[1],
                reverse=True,
            )
        return [character for character, _ in ranked[: self.max_favorites]]

    @property
    def has_favorites(self) -> bool:
        with self._lock:
            return bool(self._scores)

    def clear_score(self, character: str) -> None:
        with self._persist_lock:
            with self._lock:
                self._scores.pop(character, None)
                snapshot = dict(self._scores)
            self.store.save(snapshot)

    def clear_all(self) -> None:
        """Forget all history; the default seed is applied again."""
        with self._persist_lock:
            with self._lock:
                self._scores = {}
            self.store.save({})
        self._seed_if_empty()
        logger.info("usage_history_cleared")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _prune(self) -> None:
        # Caller holds the lock.
        if len(self._scores) <= self.min_favorites:
            return
        ranked = sorted(self._scores.items(), key=lambda item: item[1], reverse=True)
        protected = {character for character, _ in ranked[: self.min_favorites]}
        for character, value in list(self._scores.items()):
            if value < self.prune_threshold and character not in protected:
                del self._scores[character]

    def _seed_if_empty(self) -> None:
        with self._persist_lock:
            with self._lock:
                if self._scores or not self.default_seed:
                    return
                for character in self.default_seed:
                    self._scores[character] = self.prune_threshold * 2
                snapshot = dict(self._scores)
            self.store.save(snapshot)


__all__ = ["DEFAULT_SEED", "EmojiUsageTracker"]
