"""
External NCM lyric API client.
"""

from typing import Any, Dict, Optional

import httpx

from shared.logging import get_logger
from shared.errors import ExternalServiceError
from shared.retry import retry_on_exception, RetryConfig

from ..caching import LyricCache, lyric_cache
from ..lyrics.models import NcmLyricPayload


class NcmClient:
    """Client for the external NCM-compatible lyric API."""

    def __init__(self, base_url: str, timeout: float = 10.0, cache: Optional[LyricCache] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.cache = cache if cache is not None else lyric_cache
        self.logger = get_logger("lyrics.ncm_client")

    async def fetch_lyrics(self, lyric_id: str) -> Optional[NcmLyricPayload]:
        """Fetch every lyric variant the API holds for a song, or None."""
        cache_key = f"{self.base_url}/lyric/new?id={lyric_id}"

        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        data = await self._get_json("/lyric/new", {"id": lyric_id})
        if data is None:
            return None

        if data.get("code", 200) != 200:
            self.logger.info("External API reported no lyrics", id=lyric_id, code=data.get("code"))
            return None

        payload = NcmLyricPayload(
            lrc=_lyric_text(data, "lrc"),
            yrc=_lyric_text(data, "yrc"),
            tlyric=_lyric_text(data, "tlyric"),
            romalrc=_lyric_text(data, "romalrc"),
        )
        self.cache.set(cache_key, payload)
        return payload

    @retry_on_exception((httpx.TransportError,), config=RetryConfig(max_attempts=3, base_delay=0.5))
    async def _get_json(self, path: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}{path}"
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(url, params=params)

        if response.status_code == 404:
            self.logger.info("External lyric not found", url=url, params=params)
            return None

        if response.status_code != 200:
            self.logger.error(
                "External API request failed",
                url=url,
                params=params,
                status_code=response.status_code,
                response=response.text
            )
            raise ExternalServiceError(
                service="ncm_api",
                message=f"Unexpected status {response.status_code}",
                details={"status_code": response.status_code, "body": response.text}
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ExternalServiceError(
                service="ncm_api",
                message="Malformed JSON response",
                details={"url": url, "error": str(exc)}
            ) from exc

        if not isinstance(data, dict):
            raise ExternalServiceError(
                service="ncm_api",
                message="Unexpected response shape",
                details={"url": url}
            )
        return data


def _lyric_text(data: Dict[str, Any], key: str) -> Optional[str]:
    """Pull data[key]["lyric"], treating blanks as absent."""
    section = data.get(key)
    if not isinstance(section, dict):
        return None
    text = section.get("lyric")
    if not isinstance(text, str) or not text.strip():
        return None
    return text
