# emoji_index/adapters/persistence/usage_store.py
from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

import structlog

from emoji_index.core.ports import UsageStore

logger = structlog.get_logger()


def _write_json_atomic(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def _read_json_object(path: Path) -> Optional[Dict[str, Any]]:
    """Returns the JSON object stored at ``path``; None if missing or corrupt (logged)."""
    if not path.is_file():
        return None
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning("json_store_corrupt", path=str(path), error=str(e))
        return None
    except OSError as e:
        logger.warning("json_store_unreadable", path=str(path), error=str(e))
        return None
    if not isinstance(data, dict):
        logger.warning("json_store_not_object", path=str(path))
        return None
    return data


class JsonFileUsageStore(UsageStore):
    """Usage scores persisted as a JSON object ``{character: score}``."""

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def load(self) -> Dict[str, float]:
        data = _read_json_object(self.path) or {}
        scores: Dict[str, float] = {}
        for character, score in data.items():
            if isinstance(score, (int, float)) and not isinstance(score, bool):
                scores[str(character)] = float(score)
        return scores

    def save(self, scores: Dict[str, float]) -> None:
        _write_json_atomic(self.path, scores)


class MemoryUsageStore(UsageStore):
    """Non-persistent store (tests, ephemeral sessions)."""

    def __init__(self, initial: Optional[Dict[str, float]] = None):
        self.scores: Dict[str, float] = dict(initial or {})
        self.saves = 0

    def load(self) -> Dict[str, float]:
        return dict(self.scores)

    def save(self, scores: Dict[str, float]) -> None:
        self.scores = dict(scores)
        self.saves += 1


class JsonPreferences:
    """Tiny key/value JSON file for user preferences (e.g. the preferred locale)."""

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def get(self, key: str) -> Optional[Any]:
        return (_read_json_object(self.path) or {}).get(key)

    def set(self, key: str, value: Optional[Any]) -> None:
        data = _read_json_object(self.path) or {}
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        _write_json_atomic(self.path, data)


__all__ = ["JsonFileUsageStore", "JsonPreferences", "MemoryUsageStore"]
