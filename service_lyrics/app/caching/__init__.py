"""
Lyrics caching package.

Holds the process-wide cache that upstream adapters read through, and the
start-up hook that schedules its periodic cleanup. The lyric routes never
read or write it directly.
"""

from .ttl_cache import LyricCache, lyric_cache, setup_cache_cleanup, stop_cache_cleanup

__all__ = ["LyricCache", "lyric_cache", "setup_cache_cleanup", "stop_cache_cleanup"]
