"""
Unit tests for LyricProvider.
"""

import pytest
from unittest.mock import AsyncMock

from service_lyrics.app.lyrics.models import LyricFormat, NcmLyricPayload
from service_lyrics.app.lyrics.provider import LyricProvider, parse_fallback, parse_format
from shared.errors import ExternalServiceError


def _repository(files):
    """fetch_lyric stand-in backed by a {format: content} dict."""
    async def fetch_lyric(lyric_id, lyric_format):
        return files.get(lyric_format)
    return AsyncMock(side_effect=fetch_lyric)


class TestParsing:
    """Test cases for format parsing helpers."""

    def test_parse_format_is_case_insensitive(self):
        assert parse_format(" TTML ") == LyricFormat.TTML

    def test_parse_format_unknown(self):
        assert parse_format("srt") is None

    def test_parse_fallback_default_order(self):
        assert parse_fallback(None) == [LyricFormat.YRC, LyricFormat.LRC]
        assert parse_fallback("  ") == [LyricFormat.YRC, LyricFormat.LRC]

    def test_parse_fallback_keeps_external_formats_only(self):
        assert parse_fallback("lrc, ttml, LRC, yrc") == [LyricFormat.LRC, LyricFormat.YRC]

    def test_parse_fallback_nothing_usable(self):
        assert parse_fallback("ttml,srt") == []


class TestLyricProvider:
    """Test cases for LyricProvider."""

    @pytest.fixture
    def provider(self):
        provider = LyricProvider("http://ncm.example.test", repository_url="http://repo.example.test")
        provider.repository.fetch_lyric = _repository({})
        provider.external.fetch_lyrics = AsyncMock(return_value=None)
        return provider

    @pytest.fixture
    def external_payload(self):
        return NcmLyricPayload(
            lrc="[00:01.00]line",
            yrc="[1000,500](1000,500,0)line",
            tlyric="[00:01.00]translated",
            romalrc="[00:01.00]romaji",
        )

    @pytest.mark.asyncio
    async def test_repository_priority_order(self, provider):
        provider.repository.fetch_lyric = _repository({"lrc": "lrc text", "ttml": "<tt/>"})

        result = await provider.search("100")

        assert result.found is True
        assert result.format == "ttml"
        assert result.source == "repository"
        assert result.content == "<tt/>"
        provider.external.fetch_lyrics.assert_not_called()

    @pytest.mark.asyncio
    async def test_external_fallback_with_translation(self, provider, external_payload):
        provider.external.fetch_lyrics = AsyncMock(return_value=external_payload)

        result = await provider.search("100")

        assert result.found is True
        assert result.format == "yrc"
        assert result.source == "external"
        assert result.translation == "[00:01.00]translated"
        assert result.romaji == "[00:01.00]romaji"

    @pytest.mark.asyncio
    async def test_fallback_order_is_respected(self, provider, external_payload):
        provider.external.fetch_lyrics = AsyncMock(return_value=external_payload)

        result = await provider.search("100", fallback="lrc,yrc")

        assert result.format == "lrc"
        assert result.content == "[00:01.00]line"

    @pytest.mark.asyncio
    async def test_invalid_fallback(self, provider):
        result = await provider.search("100", fallback="ttml")

        assert result.found is False
        assert result.statusCode == 400
        assert result.error == "Invalid fallback formats: ttml"
        assert provider.repository.fetch_lyric.await_count == len(LyricFormat)
        provider.external.fetch_lyrics.assert_not_called()

    @pytest.mark.asyncio
    async def test_repository_hit_ignores_invalid_fallback(self, provider):
        provider.repository.fetch_lyric = _repository({"ttml": "<tt/>"})

        result = await provider.search("100", fallback="ttml")

        assert result.found is True
        assert result.source == "repository"
        assert result.format == "ttml"

    @pytest.mark.asyncio
    async def test_not_found(self, provider):
        result = await provider.search("100")

        assert result.found is False
        assert result.id == "100"
        assert result.statusCode == 404
        assert result.error == "Lyrics not found"

    @pytest.mark.asyncio
    async def test_external_missing_requested_formats(self, provider):
        provider.external.fetch_lyrics = AsyncMock(return_value=NcmLyricPayload(lrc="[00:01.00]x"))

        result = await provider.search("100", fallback="yrc")

        assert result.found is False
        assert result.statusCode == 404

    @pytest.mark.asyncio
    async def test_fixed_version_repository(self, provider):
        provider.repository.fetch_lyric = _repository({"ttml": "<tt/>", "eslrc": "eslrc text"})

        result = await provider.search("100", fixed_version="ESLRC")

        assert result.found is True
        assert result.format == "eslrc"
        assert result.content == "eslrc text"

    @pytest.mark.asyncio
    async def test_fixed_version_external(self, provider, external_payload):
        provider.external.fetch_lyrics = AsyncMock(return_value=external_payload)

        result = await provider.search("100", fixed_version="lrc")

        assert result.found is True
        assert result.format == "lrc"
        assert result.source == "external"

    @pytest.mark.asyncio
    async def test_fixed_version_repository_only_format(self, provider, external_payload):
        provider.external.fetch_lyrics = AsyncMock(return_value=external_payload)

        result = await provider.search("100", fixed_version="ttml")

        assert result.found is False
        assert result.statusCode == 404
        assert result.error == "Lyrics not found for format ttml"
        provider.external.fetch_lyrics.assert_not_called()

    @pytest.mark.asyncio
    async def test_fixed_version_invalid(self, provider):
        result = await provider.search("100", fixed_version="srt")

        assert result.found is False
        assert result.statusCode == 400
        assert result.error == "Invalid fixedVersion: srt"

    @pytest.mark.asyncio
    async def test_upstream_errors_propagate(self, provider):
        provider.repository.fetch_lyric = AsyncMock(
            side_effect=ExternalServiceError("lyric_repository", "Unexpected status 500")
        )

        with pytest.raises(ExternalServiceError):
            await provider.search("100")
