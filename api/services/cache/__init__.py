"""
Cache Services

Persistent cache for resolved verse text.
"""

from .verse_cache import VerseCache, VerseCacheEntry, VerseKey

__all__ = ["VerseCache", "VerseCacheEntry", "VerseKey"]
