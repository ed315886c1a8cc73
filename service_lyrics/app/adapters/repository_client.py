"""
Lyric repository client.
"""

from typing import Optional
from urllib.parse import quote

import httpx

from shared.logging import get_logger
from shared.errors import ExternalServiceError
from shared.retry import retry_on_exception, RetryConfig

from ..caching import LyricCache, lyric_cache


# Misses are remembered briefly so metadata probes don't hammer the repository
MISS_TTL = 60


class RepositoryClient:
    """Client for the static lyric repository (one file per id and format)."""

    def __init__(self, repository_url: str, timeout: float = 10.0, cache: Optional[LyricCache] = None):
        self.base_url = repository_url.rstrip('/')
        self.timeout = timeout
        self.cache = cache if cache is not None else lyric_cache
        self.logger = get_logger("lyrics.repository_client")

    def lyric_url(self, lyric_id: str, lyric_format: str) -> str:
        return f"{self.base_url}/{quote(lyric_id, safe='')}.{lyric_format}"

    async def fetch_lyric(self, lyric_id: str, lyric_format: str) -> Optional[str]:
        """Return the lyric file content, or None when the repository has none."""
        url = self.lyric_url(lyric_id, lyric_format)

        cached = self.cache.get(url)
        if cached is not None:
            return cached or None

        content = await self._get(url)
        if content is None:
            self.cache.set(url, "", ttl=MISS_TTL)
        else:
            self.cache.set(url, content)
        return content

    async def has_lyric(self, lyric_id: str, lyric_format: str) -> bool:
        return await self.fetch_lyric(lyric_id, lyric_format) is not None

    @retry_on_exception((httpx.TransportError,), config=RetryConfig(max_attempts=3, base_delay=0.5))
    async def _get(self, url: str) -> Optional[str]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(url)

        if response.status_code == 200:
            self.logger.debug("Repository lyric retrieved", url=url)
            return response.text or None

        if response.status_code == 404:
            self.logger.debug("Repository lyric not found", url=url)
            return None

        self.logger.error(
            "Repository request failed",
            url=url,
            status_code=response.status_code
        )
        raise ExternalServiceError(
            service="lyric_repository",
            message=f"Unexpected status {response.status_code}",
            details={"url": url, "status_code": response.status_code}
        )
