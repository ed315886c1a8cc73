"""
Adapters package for the Lyrics Service.

HTTP client wrappers for the two upstream lyric sources:

- RepositoryClient: static lyric files, one per id and format
- NcmClient: the external NCM-compatible lyric API

Both read through the process-wide lyric cache and retry transport
failures; unexpected upstream responses raise ExternalServiceError.
"""

from .repository_client import RepositoryClient
from .ncm_client import NcmClient

__all__ = [
    "RepositoryClient",
    "NcmClient",
]
