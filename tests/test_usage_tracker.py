# tests/test_usage_tracker.py
import json
import threading
import time

import pytest

from emoji_index.adapters.persistence.usage_store import JsonFileUsageStore, MemoryUsageStore
from emoji_index.services.usage_tracker import DEFAULT_SEED, EmojiUsageTracker


def test_repeated_use_follows_decay_sequence(usage_tracker):
    expected = [1.0, 1.9, 2.71]
    for value in expected:
        usage_tracker.record_use("😀")
        assert usage_tracker.score("😀") == pytest.approx(value)


def test_single_character_score_stays_bounded(usage_tracker):
    for _ in range(200):
        usage_tracker.record_use("🔥")
    assert usage_tracker.score("🔥") < 10.0
    assert usage_tracker.score("🔥") == pytest.approx(10.0, rel=1e-6)


def test_use_raises_own_score_and_lowers_others(usage_tracker):
    usage_tracker.record_use("😀")
    usage_tracker.record_use("🐱")
    before_cat = usage_tracker.score("🐱")
    before_grin = usage_tracker.score("😀")

    usage_tracker.record_use("🐱")

    assert usage_tracker.score("🐱") > before_cat
    assert usage_tracker.score("😀") < before_grin


def test_favorites_ordering_and_cap():
    tracker = EmojiUsageTracker(MemoryUsageStore(), max_favorites=2, default_seed=[])
    for character in ["😀", "🐱", "🐱", "🍕", "🍕", "🍕"]:
        tracker.record_use(character)

    assert tracker.favorites == ["🍕", "🐱"]


def test_pruning_never_drops_below_min_favorites():
    tracker = EmojiUsageTracker(MemoryUsageStore(), min_favorites=3, default_seed=[])
    for character in ["a", "b", "c", "d"]:
        tracker.record_use(character)
    # Push a..d far below the threshold with a long run of one character.
    for _ in range(100):
        tracker.record_use("z")

    scores = tracker.all_scores
    assert len(scores) == 3
    assert "z" in scores


def test_no_pruning_at_or_below_min_favorites():
    tracker = EmojiUsageTracker(MemoryUsageStore(), min_favorites=10, default_seed=[])
    tracker.record_use("a")
    for _ in range(100):
        tracker.record_use("z")

    assert set(tracker.all_scores) == {"a", "z"}


def test_seeds_defaults_when_empty():
    store = MemoryUsageStore()
    tracker = EmojiUsageTracker(store)

    assert tracker.favorites == DEFAULT_SEED
    assert set(store.scores) == set(DEFAULT_SEED)


def test_existing_history_is_not_seeded():
    store = MemoryUsageStore({"🐱": 3.0})
    tracker = EmojiUsageTracker(store)

    assert tracker.all_scores == {"🐱": 3.0}


def test_clear_all_reseeds(usage_store):
    tracker = EmojiUsageTracker(usage_store, default_seed=["👍"])
    tracker.record_use("😀")

    tracker.clear_all()

    assert set(tracker.all_scores) == {"👍"}


def test_clear_score(usage_tracker, usage_store):
    usage_tracker.record_use("😀")
    usage_tracker.clear_score("😀")

    assert usage_tracker.score("😀") == 0.0
    assert "😀" not in usage_store.scores


def test_disabled_tracker_records_nothing(usage_store):
    tracker = EmojiUsageTracker(usage_store, enabled=False, default_seed=[])
    tracker.record_use("😀")

    assert tracker.score("😀") == 0.0
    assert tracker.favorites == []
    assert usage_store.saves == 0


def test_every_use_is_persisted(usage_tracker, usage_store):
    usage_tracker.record_use("😀")
    usage_tracker.record_use("😀")

    assert usage_store.saves == 2
    assert usage_store.scores["😀"] == pytest.approx(1.9)



class _SlowFirstSaveStore(MemoryUsageStore):
    """Holds the first save long enough for a second writer to overlap it."""

    def __init__(self):
        super().__init__()
        self.first_save_started = threading.Event()

    def save(self, scores):
        if self.saves == 0 and not self.first_save_started.is_set():
            self.first_save_started.set()
            time.sleep(0.2)
        super().save(scores)


def test_overlapping_uses_persist_in_mutation_order():
    store = _SlowFirstSaveStore()
    tracker = EmojiUsageTracker(store, default_seed=[])

    first = threading.Thread(target=tracker.record_use, args=("😀",))
    first.start()
    assert store.first_save_started.wait(timeout=5)
    second = threading.Thread(target=tracker.record_use, args=("🐱",))
    second.start()
    first.join(timeout=5)
    second.join(timeout=5)

    assert set(store.scores) == {"😀", "🐱"}
    assert store.scores == tracker.all_scores

def test_invalid_decay_factor():
    with pytest.raises(ValueError):
        EmojiUsageTracker(MemoryUsageStore(), decay_factor=1.0)


def test_json_file_store_round_trip(tmp_path):
    path = tmp_path / "nested" / "usage.json"
    store = JsonFileUsageStore(path)
    tracker = EmojiUsageTracker(store, default_seed=[])
    tracker.record_use("😀")

    reloaded = EmojiUsageTracker(JsonFileUsageStore(path), default_seed=[])

    assert reloaded.score("😀") == pytest.approx(1.0)
    assert json.loads(path.read_text(encoding="utf-8")) == {"😀": 1.0}


def test_json_file_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "usage.json"
    path.write_text("not json", encoding="utf-8")

    assert JsonFileUsageStore(path).load() == {}
