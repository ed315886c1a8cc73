"""
Unit tests for the repository and external API clients.
"""

import pytest
import httpx
import json
from unittest.mock import AsyncMock, patch

from service_lyrics.app.adapters import NcmClient, RepositoryClient
from service_lyrics.app.caching import LyricCache
from shared.errors import ExternalServiceError
from shared.retry import RetryError


REPO_URL = "http://repo.example.test/ncm-lyrics"
NCM_URL = "http://ncm.example.test"


def _response(status_code, content="", url="http://example.test"):
    return httpx.Response(
        status_code=status_code,
        content=content,
        request=httpx.Request("GET", url),
    )


class TestRepositoryClient:
    """Test cases for RepositoryClient."""

    @pytest.fixture
    def repository_client(self):
        return RepositoryClient(REPO_URL + "/", cache=LyricCache())

    def test_lyric_url_quotes_id(self, repository_client):
        assert repository_client.lyric_url("12/34", "ttml") == f"{REPO_URL}/12%2F34.ttml"

    @pytest.mark.asyncio
    async def test_fetch_lyric_success_is_cached(self, repository_client):
        with patch('httpx.AsyncClient') as mock_client:
            get = AsyncMock(return_value=_response(200, "<tt/>"))
            mock_client.return_value.__aenter__.return_value.get = get

            first = await repository_client.fetch_lyric("100", "ttml")
            second = await repository_client.fetch_lyric("100", "ttml")

        assert first == "<tt/>"
        assert second == "<tt/>"
        get.assert_awaited_once_with(f"{REPO_URL}/100.ttml")

    @pytest.mark.asyncio
    async def test_fetch_lyric_not_found_is_remembered(self, repository_client):
        with patch('httpx.AsyncClient') as mock_client:
            get = AsyncMock(return_value=_response(404))
            mock_client.return_value.__aenter__.return_value.get = get

            assert await repository_client.fetch_lyric("100", "yrc") is None
            assert await repository_client.has_lyric("100", "yrc") is False

        get.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_file_counts_as_missing(self, repository_client):
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=_response(200, "")
            )

            assert await repository_client.has_lyric("100", "lrc") is False

    @pytest.mark.asyncio
    async def test_unexpected_status_raises(self, repository_client):
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=_response(503, "unavailable")
            )

            with pytest.raises(ExternalServiceError) as exc_info:
                await repository_client.fetch_lyric("100", "lrc")

        assert exc_info.value.details["status_code"] == 503
        assert "lyric_repository" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_errors_are_retried(self, repository_client):
        with patch('httpx.AsyncClient') as mock_client, \
                patch('shared.retry._calculate_delay', return_value=0.0):
            get = AsyncMock(side_effect=[httpx.ConnectError("refused"), _response(200, "lrc text")])
            mock_client.return_value.__aenter__.return_value.get = get

            content = await repository_client.fetch_lyric("100", "lrc")

        assert content == "lrc text"
        assert get.await_count == 2

    @pytest.mark.asyncio
    async def test_retry_exhaustion(self, repository_client):
        with patch('httpx.AsyncClient') as mock_client, \
                patch('shared.retry._calculate_delay', return_value=0.0):
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                side_effect=httpx.ConnectError("refused")
            )

            with pytest.raises(RetryError) as exc_info:
                await repository_client.fetch_lyric("100", "lrc")

        assert exc_info.value.attempts == 3


class TestNcmClient:
    """Test cases for NcmClient."""

    @pytest.fixture
    def ncm_client(self):
        return NcmClient(NCM_URL, cache=LyricCache())

    @pytest.fixture
    def ncm_response(self):
        return {
            "code": 200,
            "lrc": {"version": 3, "lyric": "[00:01.00]line"},
            "yrc": {"version": 1, "lyric": "[1000,500](1000,500,0)line"},
            "tlyric": {"version": 1, "lyric": "[00:01.00]translated"},
            "romalrc": {"version": 0, "lyric": ""},
        }

    @pytest.mark.asyncio
    async def test_fetch_lyrics(self, ncm_client, ncm_response):
        with patch('httpx.AsyncClient') as mock_client:
            get = AsyncMock(return_value=_response(200, json.dumps(ncm_response)))
            mock_client.return_value.__aenter__.return_value.get = get

            payload = await ncm_client.fetch_lyrics("100")
            cached = await ncm_client.fetch_lyrics("100")

        assert payload.lrc == "[00:01.00]line"
        assert payload.yrc == "[1000,500](1000,500,0)line"
        assert payload.tlyric == "[00:01.00]translated"
        assert payload.romalrc is None
        assert cached is payload
        get.assert_awaited_once_with(f"{NCM_URL}/lyric/new", params={"id": "100"})

    @pytest.mark.asyncio
    async def test_api_code_not_ok(self, ncm_client):
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=_response(200, json.dumps({"code": 404, "msg": "no lyric"}))
            )

            assert await ncm_client.fetch_lyrics("100") is None

    @pytest.mark.asyncio
    async def test_http_not_found(self, ncm_client):
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=_response(404)
            )

            assert await ncm_client.fetch_lyrics("100") is None

    @pytest.mark.asyncio
    async def test_server_error_raises(self, ncm_client):
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=_response(502, "bad gateway")
            )

            with pytest.raises(ExternalServiceError) as exc_info:
                await ncm_client.fetch_lyrics("100")

        assert exc_info.value.details["status_code"] == 502

    @pytest.mark.asyncio
    async def test_malformed_json_raises(self, ncm_client):
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=_response(200, "<html>")
            )

            with pytest.raises(ExternalServiceError) as exc_info:
                await ncm_client.fetch_lyrics("100")

        assert "Malformed JSON response" in str(exc_info.value)
