# tests/test_sources.py
import plistlib

import pytest
import requests
from tenacity import wait_none

from emoji_index.adapters.sources import cldr
from emoji_index.adapters.sources.apple import AppleEmojiDataSource, available_locales, is_available
from emoji_index.adapters.sources.blended import BlendedEmojiDataSource, blend_entries
from emoji_index.adapters.sources.cldr import CLDREmojiDataSource, fetch_available_locales
from emoji_index.adapters.sources.gemoji import GemojiDataSource
from emoji_index.adapters.sources.http import JsonHttpClient
from emoji_index.adapters.sources.static import StaticDataSource
from emoji_index.core.domain.exceptions import (
    DecodingFailedError,
    EmptyDataError,
    InvalidResponseError,
    InvalidURLError,
    NetworkUnavailableError,
    SourceUnavailableError,
)
from emoji_index.shared.locales import COMMON_LOCALES

from tests.conftest import FakeSource, json_response, make_entry

GEMOJI_PAYLOAD = [
    {
        "emoji": "😀",
        "description": "grinning face",
        "category": "Smileys & Emotion",
        "aliases": ["grinning"],
        "tags": ["smile", "happy"],
        "unicode_version": "6.1",
        "ios_version": "6.0",
    },
    {
        "emoji": "👋",
        "description": "waving hand",
        "category": "People & Body",
        "aliases": ["wave"],
        "tags": ["goodbye"],
        "skin_tones": True,
    },
]

CLDR_PAYLOAD = {
    "annotations": {
        "identity": {"language": "ja"},
        "annotations": {
            "😀": {"default": ["スマイル", "笑顔"], "tts": ["にっこり笑う"]},
            "👋": {"default": ["手", "バイバイ"], "tts": ["手を振る"]},
            "👋\U0001F3FB": {"default": ["手"], "tts": ["手を振る: 明るい肌色"]},
            "🆕": {"default": ["新"]},
        },
    }
}


@pytest.fixture(autouse=True)
def _reset_locales_cache():
    cldr.clear_locales_cache()
    yield
    cldr.clear_locales_cache()


# -----------------------------------------------------------------------------
# HTTP client
# -----------------------------------------------------------------------------
@pytest.mark.asyncio
class TestJsonHttpClient:

    async def test_returns_decoded_json(self, http_client, mock_session):
        mock_session.get.return_value = json_response({"ok": True})
        assert await http_client.get_json("https://example.invalid/x.json") == {"ok": True}

    async def test_rejects_non_http_url(self, http_client, mock_session):
        with pytest.raises(InvalidURLError):
            await http_client.get_json("ftp://example.invalid/x.json")
        mock_session.get.assert_not_called()

    async def test_bad_status(self, http_client, mock_session):
        mock_session.get.return_value = json_response(None, status_code=404)
        with pytest.raises(InvalidResponseError) as excinfo:
            await http_client.get_json("https://example.invalid/x.json")
        assert excinfo.value.status_code == 404

    async def test_connection_error_is_network_unavailable(self, http_client, mock_session):
        mock_session.get.side_effect = requests.ConnectionError("offline")
        with pytest.raises(NetworkUnavailableError) as excinfo:
            await http_client.get_json("https://example.invalid/x.json")
        assert isinstance(excinfo.value.__cause__, requests.ConnectionError)

    async def test_invalid_json(self, http_client, mock_session):
        response = json_response(None)
        response.json.side_effect = ValueError("Expecting value")
        mock_session.get.return_value = response
        with pytest.raises(DecodingFailedError):
            await http_client.get_json("https://example.invalid/x.json")

    async def test_transient_error_is_retried(self, mock_session):
        client = JsonHttpClient(session=mock_session, timeout=1.0, attempts=2, wait=wait_none())
        mock_session.get.side_effect = [requests.ConnectionError("reset"), json_response(["ok"])]

        assert await client.get_json("https://example.invalid/x.json") == ["ok"]
        assert mock_session.get.call_count == 2

    async def test_timeouts_exhaust_attempts(self, mock_session):
        client = JsonHttpClient(session=mock_session, timeout=1.0, attempts=3, wait=wait_none())
        mock_session.get.side_effect = requests.Timeout("slow")

        with pytest.raises(NetworkUnavailableError):
            await client.get_json("https://example.invalid/x.json")
        assert mock_session.get.call_count == 3

    async def test_error_status_is_not_retried(self, mock_session):
        client = JsonHttpClient(session=mock_session, timeout=1.0, attempts=3, wait=wait_none())
        mock_session.get.return_value = json_response(None, status_code=503)

        with pytest.raises(InvalidResponseError):
            await client.get_json("https://example.invalid/x.json")
        assert mock_session.get.call_count == 1


# -----------------------------------------------------------------------------
# Gemoji
# -----------------------------------------------------------------------------
@pytest.mark.asyncio
class TestGemojiDataSource:

    async def test_fetch_maps_records(self, http_client, mock_session):
        mock_session.get.return_value = json_response(GEMOJI_PAYLOAD)
        source = GemojiDataSource(http=http_client)

        entries = await source.fetch()

        assert [e.character for e in entries] == ["😀", "👋"]
        grinning, wave = entries
        assert grinning.name == "grinning face"
        assert grinning.shortcodes == ["grinning"]
        assert grinning.keywords == sorted({"grinning", "face", "smile", "happy"})
        assert grinning.supports_skin_tone is False
        assert wave.supports_skin_tone is True
        assert source.identifier == "gemoji"

    async def test_empty_payload(self, http_client, mock_session):
        mock_session.get.return_value = json_response([])
        with pytest.raises(EmptyDataError):
            await GemojiDataSource(http=http_client).fetch()

    async def test_malformed_payload(self, http_client, mock_session):
        mock_session.get.return_value = json_response([{"description": "no emoji field"}])
        with pytest.raises(DecodingFailedError):
            await GemojiDataSource(http=http_client).fetch()


# -----------------------------------------------------------------------------
# CLDR
# -----------------------------------------------------------------------------
@pytest.mark.asyncio
class TestCLDRDataSource:

    async def test_fetch_skips_skin_tone_variants(self, http_client, mock_session):
        mock_session.get.return_value = json_response(CLDR_PAYLOAD)
        source = CLDREmojiDataSource("ja", http=http_client)

        entries = await source.fetch()

        by_char = {e.character: e for e in entries}
        assert "👋\U0001F3FB" not in by_char
        assert by_char["😀"].name == "にっこり笑う"
        assert by_char["😀"].keywords == ["スマイル", "笑顔"]
        assert by_char["😀"].category == "Unknown"
        # No tts: the character stands in for the name.
        assert by_char["🆕"].name == "🆕"
        assert source.identifier == "cldr-ja"

    async def test_requests_locale_url(self, http_client, mock_session):
        mock_session.get.return_value = json_response(CLDR_PAYLOAD)
        await CLDREmojiDataSource("ja_JP", http=http_client).fetch()

        url = mock_session.get.call_args.args[0]
        assert url.endswith("/ja/annotations.json")

    async def test_bad_document_shape(self, http_client, mock_session):
        mock_session.get.return_value = json_response({"main": {}})
        with pytest.raises(DecodingFailedError):
            await CLDREmojiDataSource("en", http=http_client).fetch()

    async def test_available_locales_falls_back_on_error(self, http_client, mock_session):
        mock_session.get.side_effect = requests.ConnectionError("offline")
        assert await fetch_available_locales(http_client) == list(COMMON_LOCALES)

    async def test_available_locales_are_cached(self, http_client, mock_session):
        mock_session.get.return_value = json_response(
            [{"name": "fr", "type": "dir"}, {"name": "de", "type": "dir"}, {"name": "README.md", "type": "file"}]
        )
        assert await fetch_available_locales(http_client) == ["de", "fr"]
        assert await fetch_available_locales(http_client) == ["de", "fr"]
        assert mock_session.get.call_count == 1


def test_best_available_locale():
    assert CLDREmojiDataSource("fr-CA").best_available_locale(["en", "fr"]) == "fr"
    assert CLDREmojiDataSource("zh-Hant").best_available_locale(["en", "zh-Hant"]) == "zh-Hant"
    assert CLDREmojiDataSource("xx").best_available_locale(["en", "fr"]) == "en"


# -----------------------------------------------------------------------------
# Blending
# -----------------------------------------------------------------------------
def test_blend_follows_secondary_order_and_appends_primary_only():
    primary = [
        make_entry("😀", "sourire", "Unknown", keywords=["visage", "smile"]),
        make_entry("🆕", "nouveau", "Unknown"),
        make_entry("😀", "duplicate", "Unknown"),
    ]
    secondary = [
        make_entry("👋", "waving hand", "People & Body", ["wave"], ["hand"], True),
        make_entry("😀", "grinning face", "Smileys & Emotion", ["grinning"], ["face", "smile"]),
    ]

    blended = blend_entries(primary, secondary)

    assert [e.character for e in blended] == ["👋", "😀", "🆕"]
    wave, grin, new = blended
    assert wave == secondary[0]
    assert grin.name == "sourire"
    assert grin.category == "Smileys & Emotion"
    assert grin.shortcodes == ["grinning"]
    assert grin.keywords == ["face", "smile", "visage"]
    assert new.name == "nouveau"


def test_blend_takes_primary_category_when_secondary_unknown():
    primary = [make_entry("🫠", "melting face", "Smileys & Emotion")]
    secondary = [make_entry("🫠", "melting", "Unknown", ["melting_face"])]

    (entry,) = blend_entries(primary, secondary)

    assert entry.category == "Smileys & Emotion"
    assert entry.shortcodes == ["melting_face"]


def test_blend_never_emits_duplicates():
    secondary = [make_entry("😀", "a"), make_entry("😀", "b")]
    assert len(blend_entries([], secondary)) == 1


@pytest.mark.asyncio
async def test_blended_source_identity_and_fetch():
    primary = FakeSource([make_entry("😀", "sourire", "Unknown")], identifier="cldr-fr", refresh_interval=100.0)
    secondary = FakeSource([make_entry("😀", "grinning face", shortcodes=["grinning"])], identifier="gemoji")

    source = BlendedEmojiDataSource(primary, secondary)
    entries = await source.fetch()

    assert source.identifier == "cldr-fr+gemoji"
    assert source.refresh_interval == 100.0
    assert entries[0].name == "sourire"


@pytest.mark.asyncio
async def test_blended_source_propagates_failure():
    primary = FakeSource([make_entry("😀", "x")], error=NetworkUnavailableError())
    secondary = FakeSource([make_entry("😀", "y")])

    with pytest.raises(NetworkUnavailableError):
        await BlendedEmojiDataSource(primary, secondary).fetch()


# -----------------------------------------------------------------------------
# Apple / static
# -----------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_apple_unavailable_off_macos(tmp_path):
    source = AppleEmojiDataSource("en", platform="linux", framework_path=tmp_path)

    assert not is_available("linux", tmp_path)
    assert available_locales("linux", tmp_path) == []
    with pytest.raises(SourceUnavailableError):
        await source.fetch()


@pytest.mark.asyncio
async def test_apple_reads_localized_names(tmp_path):
    lproj = tmp_path / "fr.lproj"
    lproj.mkdir()
    with (lproj / "AppleName.strings").open("wb") as f:
        plistlib.dump({"😀": "visage souriant", "👋\U0001F3FC": "main qui salue"}, f)

    source = AppleEmojiDataSource("fr_FR", platform="darwin", framework_path=tmp_path)
    entries = await source.fetch()

    assert available_locales("darwin", tmp_path) == ["fr"]
    assert source.identifier == "apple-fr-FR"
    assert [(e.character, e.name) for e in entries] == [("😀", "visage souriant")]
    assert entries[0].keywords == ["visage", "souriant"]


@pytest.mark.asyncio
async def test_apple_missing_locale_files(tmp_path):
    source = AppleEmojiDataSource("de", platform="darwin", framework_path=tmp_path)
    with pytest.raises(SourceUnavailableError):
        await source.fetch()


@pytest.mark.asyncio
async def test_static_source():
    entries = [make_entry("😀", "grinning face")]
    assert await StaticDataSource(entries).fetch() == entries
    with pytest.raises(EmptyDataError):
        await StaticDataSource([]).fetch()
