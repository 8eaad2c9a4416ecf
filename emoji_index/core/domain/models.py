# emoji_index/core/domain/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# -----------------------------
# Categories & skin tones
# -----------------------------

SKIN_TONE_MODIFIERS = frozenset("\U0001F3FB\U0001F3FC\U0001F3FD\U0001F3FE\U0001F3FF")

# Category string used by sources that do not know the category (CLDR, Apple).
UNKNOWN_CATEGORY = "Unknown"


class EmojiCategory(str, Enum):
    """Standard emoji categories as defined by Unicode, in display order."""
    SMILEYS_AND_EMOTION = "Smileys & Emotion"
    PEOPLE_AND_BODY = "People & Body"
    ANIMALS_AND_NATURE = "Animals & Nature"
    FOOD_AND_DRINK = "Food & Drink"
    TRAVEL_AND_PLACES = "Travel & Places"
    ACTIVITIES = "Activities"
    OBJECTS = "Objects"
    SYMBOLS = "Symbols"
    FLAGS = "Flags"

    @property
    def display_name(self) -> str:
        return self.value

    @classmethod
    def from_raw(cls, raw: str) -> Optional["EmojiCategory"]:
        """
        Maps a free-form source category string to a category.
        Returns None when the string is not recognized.
        """
        if not isinstance(raw, str):
            return None
        return _CATEGORY_ALIASES.get(raw.strip().lower())


_CATEGORY_ALIASES = {
    "smileys & emotion": EmojiCategory.SMILEYS_AND_EMOTION,
    "smileys": EmojiCategory.SMILEYS_AND_EMOTION,
    "people & body": EmojiCategory.PEOPLE_AND_BODY,
    "people": EmojiCategory.PEOPLE_AND_BODY,
    "animals & nature": EmojiCategory.ANIMALS_AND_NATURE,
    "nature": EmojiCategory.ANIMALS_AND_NATURE,
    "food & drink": EmojiCategory.FOOD_AND_DRINK,
    "food": EmojiCategory.FOOD_AND_DRINK,
    "travel & places": EmojiCategory.TRAVEL_AND_PLACES,
    "travel": EmojiCategory.TRAVEL_AND_PLACES,
    "places": EmojiCategory.TRAVEL_AND_PLACES,
    "activities": EmojiCategory.ACTIVITIES,
    "activity": EmojiCategory.ACTIVITIES,
    "objects": EmojiCategory.OBJECTS,
    "object": EmojiCategory.OBJECTS,
    "symbols": EmojiCategory.SYMBOLS,
    "symbol": EmojiCategory.SYMBOLS,
    "flags": EmojiCategory.FLAGS,
    "flag": EmojiCategory.FLAGS,
}


class SkinTone(str, Enum):
    """Fitzpatrick skin tone modifiers."""
    NONE = "none"
    LIGHT = "light"
    MEDIUM_LIGHT = "medium-light"
    MEDIUM = "medium"
    MEDIUM_DARK = "medium-dark"
    DARK = "dark"

    @property
    def modifier(self) -> str:
        return _SKIN_TONE_CODEPOINTS[self]

    @property
    def display_name(self) -> str:
        if self is SkinTone.NONE:
            return "Default"
        return "-".join(part.capitalize() for part in self.value.split("-"))

    @property
    def example(self) -> str:
        return "✋" + self.modifier


_SKIN_TONE_CODEPOINTS = {
    SkinTone.NONE: "",
    SkinTone.LIGHT: "\U0001F3FB",
    SkinTone.MEDIUM_LIGHT: "\U0001F3FC",
    SkinTone.MEDIUM: "\U0001F3FD",
    SkinTone.MEDIUM_DARK: "\U0001F3FE",
    SkinTone.DARK: "\U0001F3FF",
}


def has_skin_tone_modifier(text: str) -> bool:
    return any(ch in SKIN_TONE_MODIFIERS for ch in text)


# -----------------------------
# Entities
# -----------------------------

@dataclass(frozen=True)
class Emoji:
    """A single emoji with its metadata and searchable attributes."""
    character: str
    name: str
    category: EmojiCategory
    shortcodes: Tuple[str, ...] = ()
    keywords: Tuple[str, ...] = ()
    supports_skin_tone: bool = False

    @property
    def id(self) -> str:
        return self.character

    def with_skin_tone(self, tone: SkinTone) -> str:
        """
        Returns the character with the tone modifier applied.
        ZWJ sequences get the modifier appended as well; callers needing
        per-component placement must handle that themselves.
        """
        if not self.supports_skin_tone or tone is SkinTone.NONE:
            return self.character
        return self.character + tone.modifier

    def __str__(self) -> str:
        return self.character


class EmojiRawEntry(BaseModel):
    """
    Normalized entry format every data source produces.
    This is also the on-disk schema of cache and fallback files.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    character: str = Field(..., min_length=1)
    name: str
    category: str
    shortcodes: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    supports_skin_tone: bool = Field(False, alias="supportsSkinTone")

    def to_emoji(self) -> Optional[Emoji]:
        category = EmojiCategory.from_raw(self.category)
        if category is None:
            return None
        return Emoji(
            character=self.character,
            name=self.name,
            category=category,
            shortcodes=tuple(self.shortcodes),
            keywords=tuple(self.keywords),
            supports_skin_tone=self.supports_skin_tone,
        )


@dataclass(frozen=True)
class EmojiSection:
    """Emojis grouped under one category."""
    category: EmojiCategory
    emojis: Tuple[Emoji, ...] = field(default_factory=tuple)

    @property
    def id(self) -> str:
        return self.category.value


# -----------------------------
# Provider state
# -----------------------------

class SearchRanking(str, Enum):
    RELEVANCE = "relevance"
    USAGE = "usage"
    ALPHABETICAL = "alphabetical"


class LoadState(str, Enum):
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    LOADED = "loaded"


class LoadOrigin(str, Enum):
    """Where the currently served indices came from."""
    CACHE = "cache"
    FALLBACK = "fallback"
    NETWORK = "network"


@dataclass(frozen=True)
class LoadInfo:
    origin: LoadOrigin
    source_identifier: str
    emoji_count: int
    duration_s: float
    loaded_at: datetime


@dataclass(frozen=True)
class CacheEntryInfo:
    """Metadata about one cached namespace."""
    source_identifier: str
    file_size: int
    last_updated: datetime
    emoji_count: int
