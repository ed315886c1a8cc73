"""
Lyric Atlas API service.
"""

import traceback
from typing import Any, Dict, Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import get_config
from shared.logging import LoggerShim, get_logger

from .caching import lyric_cache, setup_cache_cleanup, stop_cache_cleanup
from .lyrics.metadata import get_lyric_metadata
from .lyrics.provider import LyricProvider


API_BASE_PATH = "/api"
SERVICE_NAME = "lyrics"

MISSING_ID_ERROR = "Missing id parameter"
CONFIG_ERROR = "Server configuration error."

logger = get_logger("lyrics.api")


def resolve_external_base_url() -> Optional[str]:
    """Read the external lyric API base URL from the environment.

    Returns None when it is unset; every such call logs an error.
    """
    url = get_config(SERVICE_NAME).external_ncm_api_url
    if not url:
        logger.error("Server configuration error: EXTERNAL_NCM_API_URL is not set.")
        return None
    return url


def _json(status_code: int, content: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content)


def _failure(error: str, lyric_id: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"found": False}
    if lyric_id is not None:
        body["id"] = lyric_id
    body["error"] = error
    return body


class LyricAtlasService(BaseService):
    """Lyric search and metadata gateway."""

    def __init__(self):
        super().__init__(SERVICE_NAME)
        self.logger_shim = LoggerShim(self.logger)
        self._setup_lyrics_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.lyrics_service = self

    async def on_startup(self):
        lyric_cache.configure(self.config.cache_ttl_seconds, self.config.cache_max_entries)
        setup_cache_cleanup(self.config.cache_cleanup_interval_seconds)

    async def on_shutdown(self):
        await stop_cache_cleanup()

    async def _check_dependencies(self) -> Dict[str, Any]:
        external_url = get_config(SERVICE_NAME).external_ncm_api_url
        return {
            "external_api": "configured" if external_url else "missing",
            "lyric_cache": lyric_cache.stats(),
        }

    def _setup_lyrics_routes(self):
        """Set up lyric routes under the API base path."""
        router = APIRouter(prefix=API_BASE_PATH)

        @router.get("")
        @router.get("/")
        async def root():
            """Liveness message."""
            self.logger.info("Root endpoint accessed")
            return {"message": "Lyric Atlas API is running."}

        @router.get("/search")
        async def search_lyrics(
            lyric_id: Optional[str] = Query(None, alias="id"),
            fallback: Optional[str] = Query(None),
            fixed_version: Optional[str] = Query(None, alias="fixedVersion"),
        ):
            """Search lyrics for a song id."""
            return await self.handle_search(lyric_id, fallback, fixed_version)

        @router.get("/lyrics/meta")
        async def lyric_metadata(lyric_id: Optional[str] = Query(None, alias="id")):
            """List the lyric formats available for a song id."""
            return await self.handle_metadata(lyric_id)

        self.app.include_router(router)

    async def handle_search(self, lyric_id: Optional[str], fallback: Optional[str],
                            fixed_version: Optional[str]) -> JSONResponse:
        self.logger.info(
            "Search request",
            id=lyric_id,
            fixed_version=fixed_version,
            fallback=fallback
        )

        # Configuration is checked before the id so a misconfigured server
        # fails the same way for every client
        external_api_base_url = resolve_external_base_url()
        if not external_api_base_url:
            self.metrics.record_lookup("search", "config_error")
            return _json(500, _failure(CONFIG_ERROR, lyric_id))

        if not lyric_id:
            self.logger.warning("Search failed: missing id parameter")
            self.metrics.record_lookup("search", "bad_input")
            return _json(400, _failure(MISSING_ID_ERROR))

        try:
            lyric_provider = LyricProvider(external_api_base_url)
            result = await lyric_provider.search(
                lyric_id,
                fixed_version=fixed_version,
                fallback=fallback,
            )

            if result.found:
                self.logger.info(
                    "Lyrics found",
                    id=lyric_id,
                    format=result.format,
                    source=result.source
                )
                if result.translation:
                    self.logger.debug("Translation found", id=lyric_id)
                if result.romaji:
                    self.logger.debug("Romaji found", id=lyric_id)
                self.metrics.record_lookup("search", "found")
                return _json(200, result.to_payload())

            status_code = result.statusCode or 404
            self.logger.info(
                "Lyrics not found",
                id=lyric_id,
                status_code=status_code,
                error=result.error
            )
            self.metrics.record_lookup("search", "not_found")
            return _json(status_code, result.to_payload())

        except Exception as exc:
            error_message = str(exc) or "Unknown processing error"
            self.logger.error(
                "Unexpected error during search",
                id=lyric_id,
                error=error_message,
                exc_info=True
            )
            self.metrics.record_lookup("search", "exception")
            return _json(500, _failure(f"Failed to process lyric request: {error_message}", lyric_id))

    async def handle_metadata(self, lyric_id: Optional[str]) -> JSONResponse:
        # Unlike search, no configuration check happens here
        if not lyric_id:
            self.logger.warning("Metadata failed: missing id parameter")
            self.metrics.record_lookup("metadata", "bad_input")
            return _json(400, _failure(MISSING_ID_ERROR))

        self.logger.info("Received metadata request", id=lyric_id)

        try:
            result = await get_lyric_metadata(lyric_id, logger=self.logger_shim)

            if result.found:
                self.logger.info(
                    "Found metadata",
                    id=lyric_id,
                    formats=", ".join(result.availableFormats or [])
                )
                self.metrics.record_lookup("metadata", "found")
                return _json(200, result.to_payload())

            status_code = result.statusCode or 404
            self.logger.warning(
                "Metadata not found or error",
                id=lyric_id,
                status_code=status_code,
                error=result.error
            )
            self.metrics.record_lookup("metadata", "not_found")
            return _json(status_code, result.to_payload())

        except Exception as exc:
            error_message = str(exc) or exc.__class__.__name__
            self.logger.error(
                "Unexpected error during metadata lookup",
                id=lyric_id,
                error=error_message,
                stack=traceback.format_exc()
            )
            self.metrics.record_lookup("metadata", "exception")
            return _json(
                500,
                _failure(f"Failed to process lyric metadata request: {error_message}", lyric_id)
            )


def create_app():
    """Create FastAPI application."""
    service = LyricAtlasService()
    return service.app


if __name__ == "__main__":
    service = LyricAtlasService()
    service.run()
