"""
Lyric data models for the Lyric Atlas API.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class LyricFormat(str, Enum):
    """Lyric formats, in lookup priority order."""
    TTML = "ttml"
    YRC = "yrc"
    LRC = "lrc"
    ESLRC = "eslrc"


# Formats the external NCM API can serve
EXTERNAL_FORMATS = (LyricFormat.YRC, LyricFormat.LRC)


class LyricSource(str, Enum):
    """Where a lyric was retrieved from."""
    REPOSITORY = "repository"
    EXTERNAL = "external"


class SearchResult(BaseModel):
    """Outcome of a lyric search.

    Extra fields are allowed and passed through to the client untouched.
    """

    model_config = ConfigDict(extra="allow", use_enum_values=True)

    found: bool
    id: Optional[str] = None
    format: Optional[str] = None
    source: Optional[str] = None
    content: Optional[str] = None
    translation: Optional[str] = None
    romaji: Optional[str] = None
    statusCode: Optional[int] = None
    error: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class LyricMetadataResult(BaseModel):
    """Outcome of a lyric metadata lookup."""

    model_config = ConfigDict(extra="allow")

    found: bool
    id: Optional[str] = None
    availableFormats: Optional[List[str]] = None
    statusCode: Optional[int] = None
    error: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


@dataclass(frozen=True)
class NcmLyricPayload:
    """Lyric texts returned by the external NCM API for one song."""
    lrc: Optional[str] = None
    yrc: Optional[str] = None
    tlyric: Optional[str] = None
    romalrc: Optional[str] = None

    def content_for(self, lyric_format: LyricFormat) -> Optional[str]:
        if lyric_format == LyricFormat.YRC:
            return self.yrc
        if lyric_format == LyricFormat.LRC:
            return self.lrc
        return None
