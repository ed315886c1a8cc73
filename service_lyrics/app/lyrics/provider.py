"""
Lyric search across the lyric repository and the external NCM API.
"""

from typing import List, Optional, Tuple

from shared.config import get_config
from shared.logging import BasicLogger, LoggerShim, get_logger

from ..adapters import NcmClient, RepositoryClient
from .models import EXTERNAL_FORMATS, LyricFormat, LyricSource, NcmLyricPayload, SearchResult


def parse_format(value: str) -> Optional[LyricFormat]:
    """Map a user-supplied format name onto LyricFormat."""
    try:
        return LyricFormat(value.strip().lower())
    except ValueError:
        return None


def parse_fallback(fallback: Optional[str]) -> Optional[List[LyricFormat]]:
    """Turn a comma-separated fallback list into external formats.

    Returns the default order when fallback is absent or blank, and an empty
    list when it names nothing the external API can serve.
    """
    if fallback is None or not fallback.strip():
        return list(EXTERNAL_FORMATS)

    formats: List[LyricFormat] = []
    for part in fallback.split(","):
        lyric_format = parse_format(part)
        if lyric_format in EXTERNAL_FORMATS and lyric_format not in formats:
            formats.append(lyric_format)
    return formats


class LyricProvider:
    """Finds the best available lyric for a song id.

    The repository is searched first, in LyricFormat priority order; the
    external API is consulted only when the repository has nothing usable.
    Instances are cheap and hold no state between searches.
    """

    def __init__(self, external_api_base_url: str,
                 repository_url: Optional[str] = None,
                 timeout: Optional[float] = None,
                 logger: Optional[BasicLogger] = None):
        config = get_config("lyrics")
        self.repository = RepositoryClient(
            repository_url or config.lyric_repository_url,
            timeout=timeout or config.upstream_timeout_seconds,
        )
        self.external = NcmClient(
            external_api_base_url,
            timeout=timeout or config.upstream_timeout_seconds,
        )
        self.logger = logger or LoggerShim(get_logger("lyrics.provider"))

    async def search(self, lyric_id: str,
                     fixed_version: Optional[str] = None,
                     fallback: Optional[str] = None) -> SearchResult:
        if fixed_version:
            return await self._search_fixed(lyric_id, fixed_version)

        for lyric_format in LyricFormat:
            content = await self.repository.fetch_lyric(lyric_id, lyric_format.value)
            if content is not None:
                self.logger.debug("Repository hit", id=lyric_id, format=lyric_format.value)
                return _found(lyric_id, lyric_format, LyricSource.REPOSITORY, content)

        external_formats = parse_fallback(fallback)
        if not external_formats:
            return SearchResult(
                found=False,
                id=lyric_id,
                statusCode=400,
                error=f"Invalid fallback formats: {fallback}",
            )

        external_hit = await self._search_external(lyric_id, external_formats)
        if external_hit is not None:
            return external_hit

        return SearchResult(found=False, id=lyric_id, statusCode=404, error="Lyrics not found")

    async def _search_fixed(self, lyric_id: str, fixed_version: str) -> SearchResult:
        lyric_format = parse_format(fixed_version)
        if lyric_format is None:
            return SearchResult(
                found=False,
                id=lyric_id,
                statusCode=400,
                error=f"Invalid fixedVersion: {fixed_version}",
            )

        content = await self.repository.fetch_lyric(lyric_id, lyric_format.value)
        if content is not None:
            return _found(lyric_id, lyric_format, LyricSource.REPOSITORY, content)

        if lyric_format in EXTERNAL_FORMATS:
            external_hit = await self._search_external(lyric_id, [lyric_format])
            if external_hit is not None:
                return external_hit

        return SearchResult(
            found=False,
            id=lyric_id,
            statusCode=404,
            error=f"Lyrics not found for format {lyric_format.value}",
        )

    async def _search_external(self, lyric_id: str,
                               formats: List[LyricFormat]) -> Optional[SearchResult]:
        payload = await self.external.fetch_lyrics(lyric_id)
        if payload is None:
            return None

        match = _first_available(payload, formats)
        if match is None:
            self.logger.debug(
                "External API has no lyric in requested formats",
                id=lyric_id,
                formats=[f.value for f in formats],
            )
            return None

        lyric_format, content = match
        return _found(
            lyric_id,
            lyric_format,
            LyricSource.EXTERNAL,
            content,
            translation=payload.tlyric,
            romaji=payload.romalrc,
        )


def _first_available(payload: NcmLyricPayload,
                     formats: List[LyricFormat]) -> Optional[Tuple[LyricFormat, str]]:
    for lyric_format in formats:
        content = payload.content_for(lyric_format)
        if content:
            return lyric_format, content
    return None


def _found(lyric_id: str, lyric_format: LyricFormat, source: LyricSource, content: str,
           translation: Optional[str] = None, romaji: Optional[str] = None) -> SearchResult:
    return SearchResult(
        found=True,
        id=lyric_id,
        format=lyric_format.value,
        source=source.value,
        content=content,
        translation=translation,
        romaji=romaji,
    )
