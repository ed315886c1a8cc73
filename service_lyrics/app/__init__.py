"""
Lyrics Service package for the Lyric Atlas API.

The service fronts two read endpoints, lyric search and lyric metadata,
mapping collaborator outcomes onto HTTP status codes and a stable JSON
envelope.

Structure:
- app.main: FastAPI app, routes, and request orchestration.
- app.lyrics: LyricProvider, metadata lookup, and result models.
- app.adapters: HTTP clients for the lyric repository and external API.
- app.caching: Process-wide upstream cache and its cleanup hook.
"""
