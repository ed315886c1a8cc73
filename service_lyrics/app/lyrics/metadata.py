"""
Lyric metadata lookup: which formats the repository holds for a song.
"""

import asyncio
from typing import Optional

from shared.config import get_config
from shared.logging import BasicLogger, LoggerShim, get_logger

from ..adapters import RepositoryClient
from .models import LyricFormat, LyricMetadataResult


async def get_lyric_metadata(lyric_id: str,
                             logger: Optional[BasicLogger] = None,
                             repository_url: Optional[str] = None) -> LyricMetadataResult:
    """Probe every format concurrently and report the ones present.

    Every probe is awaited before returning. The first upstream failure in
    priority order is re-raised for the caller to surface.
    """
    log = logger or LoggerShim(get_logger("lyrics.metadata"))
    config = get_config("lyrics")
    repository = RepositoryClient(
        repository_url or config.lyric_repository_url,
        timeout=config.upstream_timeout_seconds,
    )

    formats = list(LyricFormat)
    outcomes = await asyncio.gather(
        *(repository.has_lyric(lyric_id, lyric_format.value) for lyric_format in formats),
        return_exceptions=True,
    )
    for outcome in outcomes:
        if isinstance(outcome, Exception):
            raise outcome

    available = [lyric_format.value for lyric_format, hit in zip(formats, outcomes) if hit]

    if not available:
        log.debug("No repository lyrics for id", id=lyric_id)
        return LyricMetadataResult(
            found=False,
            id=lyric_id,
            statusCode=404,
            error="No lyrics found in repository",
        )

    log.debug("Repository formats resolved", id=lyric_id, formats=available)
    return LyricMetadataResult(found=True, id=lyric_id, availableFormats=available)
