# emoji_index/adapters/persistence/codec.py
"""
Encoding of ``EmojiRawEntry`` batches.

Cache files and fallback files share one schema: a JSON array of entries with
camelCase ``supportsSkinTone`` and no embedded timestamp.
"""

from typing import List, Union

from pydantic import TypeAdapter, ValidationError

from emoji_index.core.domain.exceptions import DecodingFailedError
from emoji_index.core.domain.models import EmojiRawEntry

_RAW_ENTRY_LIST = TypeAdapter(List[EmojiRawEntry])


def decode_entries(data: Union[bytes, str]) -> List[EmojiRawEntry]:
    try:
        return _RAW_ENTRY_LIST.validate_json(data)
    except ValidationError as e:
        raise DecodingFailedError(f"Failed to decode emoji data: {e.error_count()} validation error(s)") from e


def encode_entries(entries: List[EmojiRawEntry]) -> bytes:
    return _RAW_ENTRY_LIST.dump_json(entries, by_alias=True)


__all__ = ["decode_entries", "encode_entries"]
