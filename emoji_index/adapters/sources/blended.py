# emoji_index/adapters/sources/blended.py
"""
Composite source merging a localization source with an ordering source.

Roles
=====
- primary:   supplies the localized display name (CLDR, Apple).
- secondary: supplies the canonical order, shortcodes, skin-tone flag and
             category (gemoji).

Blend rules
===========
1. Primary entries are indexed by character (first occurrence wins).
2. Secondary entries are walked in their own order, which is the output order.
3. On a character match the merged entry takes the name from primary, the
   category from secondary unless it is "Unknown", and the sorted union of
   both keyword lists. Unmatched secondary entries pass through unchanged.
4. Primary-only entries are appended at the end in primary order.
5. No character is emitted twice.
"""

import asyncio
from typing import Dict, List, Set

from emoji_index.core.domain.models import UNKNOWN_CATEGORY, EmojiRawEntry
from emoji_index.core.ports import EmojiDataSource


def blend_entries(primary: List[EmojiRawEntry], secondary: List[EmojiRawEntry]) -> List[EmojiRawEntry]:
    primary_by_char: Dict[str, EmojiRawEntry] = {}
    for entry in primary:
        primary_by_char.setdefault(entry.character, entry)

    results: List[EmojiRawEntry] = []
    seen: Set[str] = set()

    for base in secondary:
        if base.character in seen:
            continue
        seen.add(base.character)

        localized = primary_by_char.get(base.character)
        if localized is None:
            results.append(base)
            continue

        category = base.category if base.category != UNKNOWN_CATEGORY else localized.category
        results.append(
            EmojiRawEntry(
                character=base.character,
                name=localized.name or base.name,
                category=category,
                shortcodes=list(base.shortcodes),
                keywords=sorted(set(base.keywords) | set(localized.keywords)),
                supports_skin_tone=base.supports_skin_tone,
            )
        )

    for entry in primary:
        if entry.character in seen:
            continue
        seen.add(entry.character)
        results.append(entry)

    return results


class BlendedEmojiDataSource(EmojiDataSource):

    def __init__(self, primary: EmojiDataSource, secondary: EmojiDataSource):
        self.primary = primary
        self.secondary = secondary
        self.identifier = f"{primary.identifier}+{secondary.identifier}"
        self.display_name = f"{primary.display_name} + {secondary.display_name}"

    @property
    def refresh_interval(self) -> float:
        return min(self.primary.refresh_interval, self.secondary.refresh_interval)

    async def fetch(self) -> List[EmojiRawEntry]:
        # Both must succeed; the first failure propagates unchanged.
        primary_entries, secondary_entries = await asyncio.gather(
            self.primary.fetch(), self.secondary.fetch()
        )
        return blend_entries(primary_entries, secondary_entries)


__all__ = ["BlendedEmojiDataSource", "blend_entries"]
