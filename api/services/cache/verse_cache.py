"""
Verse Cache

Persistent store for resolved verse text, keyed by
(translation, book, chapter, verse_start, verse_end).

Entries never expire on their own; they are replaced wholesale by a later
put() for the same key and removed only by an explicit clear().
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from utils.db import Database

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerseKey:
    """Identity of a cached verse range."""
    translation: str
    book_id: str
    chapter: int
    verse_start: int
    verse_end: int

    @classmethod
    def for_reference(cls, parsed, translation: str) -> "VerseKey":
        """Build the cache key for a ParsedReference in a translation."""
        return cls(
            translation=translation,
            book_id=parsed.book_id,
            chapter=parsed.chapter,
            verse_start=parsed.verse_start,
            verse_end=parsed.verse_end,
        )

    @property
    def cache_id(self) -> str:
        """Row id: "BSB:JHN:3:16:16"."""
        return (
            f"{self.translation}:{self.book_id}:{self.chapter}:"
            f"{self.verse_start}:{self.verse_end}"
        )


@dataclass(frozen=True)
class VerseCacheEntry:
    key: VerseKey
    text: str
    cached_at: str


class VerseCache:
    """Caches resolved verse text in the verse_cache table."""

    def __init__(self, db: Database):
        self.db = db

    def get(self, key: VerseKey) -> Optional[str]:
        """Get cached text for key, or None on a miss."""
        entry = self.get_entry(key)
        return entry.text if entry else None

    def get_entry(self, key: VerseKey) -> Optional[VerseCacheEntry]:
        """Get the full cache entry for key."""
        conn = self.db.connect()
        try:
            cur = conn.execute(
                """SELECT translation, book, chapter, verse_start, verse_end,
                          text, cached_at
                   FROM verse_cache
                   WHERE translation = ? AND book = ? AND chapter = ?
                     AND verse_start = ? AND verse_end = ?""",
                (key.translation, key.book_id, key.chapter, key.verse_start, key.verse_end),
            )
            row = cur.fetchone()
        finally:
            conn.close()

        if not row:
            return None

        return VerseCacheEntry(
            key=VerseKey(
                translation=row["translation"],
                book_id=row["book"],
                chapter=row["chapter"],
                verse_start=row["verse_start"],
                verse_end=row["verse_end"],
            ),
            text=row["text"],
            cached_at=row["cached_at"],
        )

    def put(self, key: VerseKey, text: str) -> VerseCacheEntry:
        """Cache text for key, replacing any existing entry."""
        cached_at = datetime.now(timezone.utc).isoformat()

        conn = self.db.connect()
        try:
            conn.execute(
                """INSERT OR REPLACE INTO verse_cache
                   (id, translation, book, chapter, verse_start, verse_end, text, cached_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    key.cache_id,
                    key.translation,
                    key.book_id,
                    key.chapter,
                    key.verse_start,
                    key.verse_end,
                    text,
                    cached_at,
                ),
            )
            conn.commit()
        finally:
            conn.close()

        logger.debug(f"Cached {key.cache_id} ({len(text)} chars)")
        return VerseCacheEntry(key=key, text=text, cached_at=cached_at)

    def clear(self, translation: Optional[str] = None) -> int:
        """Remove cached entries, optionally only for one translation."""
        conn = self.db.connect()
        try:
            if translation:
                cur = conn.execute(
                    "DELETE FROM verse_cache WHERE translation = ?",
                    (translation,),
                )
            else:
                cur = conn.execute("DELETE FROM verse_cache")
            deleted = cur.rowcount
            conn.commit()
        finally:
            conn.close()

        if deleted > 0:
            logger.info(f"Cleared {deleted} cached verse entries")

        return deleted

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        conn = self.db.connect()
        try:
            cur = conn.execute(
                "SELECT COUNT(*), SUM(LENGTH(text)), MIN(cached_at), MAX(cached_at) FROM verse_cache"
            )
            total_entries, total_chars, oldest, newest = cur.fetchone()

            cur = conn.execute(
                """SELECT translation, COUNT(*) AS count
                   FROM verse_cache
                   GROUP BY translation
                   ORDER BY translation"""
            )
            by_translation = {row["translation"]: row["count"] for row in cur.fetchall()}
        finally:
            conn.close()

        return {
            "total_entries": total_entries,
            "total_chars": total_chars or 0,
            "oldest_entry": oldest,
            "newest_entry": newest,
            "by_translation": by_translation,
        }
