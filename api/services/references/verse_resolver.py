# api/services/references/verse_resolver.py
"""
Cache-aside verse resolution.

Given a ParsedReference and a translation, return displayable text:
check the verse cache, fall back to the injected fetch function, then
populate the cache with what was fetched.
"""

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from core.config import DEFAULT_TRANSLATION
from services.cache.verse_cache import VerseCache, VerseKey

from .bible_client import BibleApiError
from .reference_parser import ParsedReference, detect

logger = logging.getLogger(__name__)

# fetch(book_id, chapter, verse_start, verse_end, translation) -> text
FetchVerseText = Callable[[str, int, int, int, str], str]


@dataclass
class VerseResult:
    """
    Resolved text for one reference.

    Attributes:
        text: Verse text ("16 For God so loved...")
        from_cache: True if served from the verse cache without a fetch
        reference: The reference that was resolved
        translation: Translation the text is from
    """
    text: str
    from_cache: bool
    reference: Optional[ParsedReference] = None
    translation: str = ""

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "from_cache": self.from_cache,
            "translation": self.translation,
            "reference": self.reference.to_dict() if self.reference else None,
        }


class _InFlight:
    """A fetch in progress plus the number of callers waiting on it."""

    def __init__(self):
        self.future: Future = Future()
        self.refs = 0


class VerseResolver:
    """
    Resolve references to text through the verse cache.

    Concurrent misses for the same key each fetch and each write the
    cache (last write wins). With coalesce=True, callers that miss on a
    key already being fetched wait for that fetch instead.

    Usage:
        resolver = VerseResolver(VerseCache(db), BibleApiClient())
        result = resolver.resolve(parsed, "BSB")
        print(result.text, result.from_cache)
    """

    def __init__(
        self,
        cache: VerseCache,
        fetch: FetchVerseText,
        default_translation: str = DEFAULT_TRANSLATION,
        coalesce: bool = False,
    ):
        self.cache = cache
        self.fetch = fetch
        self.default_translation = default_translation
        self.coalesce = coalesce
        self._inflight: Dict[VerseKey, _InFlight] = {}
        self._lock = threading.Lock()

    def resolve(self, parsed: ParsedReference, translation: Optional[str] = None) -> VerseResult:
        """
        Resolve one reference.

        Raises:
            NetworkError: cache miss and the provider is unreachable
            UnresolvedBookError: provider rejects the book/translation
        """
        translation = translation or self.default_translation
        key = VerseKey.for_reference(parsed, translation)

        cached = self.cache.get(key)
        if cached:
            logger.debug(f"Cache hit for {key.cache_id}")
            return VerseResult(text=cached, from_cache=True, reference=parsed, translation=translation)

        if self.coalesce:
            text = self._fetch_coalesced(key)
        else:
            text = self._fetch_and_store(key)

        return VerseResult(text=text, from_cache=False, reference=parsed, translation=translation)

    def _fetch_and_store(self, key: VerseKey) -> str:
        text = self.fetch(key.book_id, key.chapter, key.verse_start, key.verse_end, key.translation)
        self.cache.put(key, text)
        return text

    def _fetch_coalesced(self, key: VerseKey) -> str:
        with self._lock:
            entry = self._inflight.get(key)
            leader = entry is None
            if leader:
                entry = _InFlight()
                self._inflight[key] = entry
            entry.refs += 1

        try:
            if not leader:
                logger.debug(f"Joining in-flight fetch for {key.cache_id}")
                return entry.future.result()

            try:
                text = self._fetch_and_store(key)
            except Exception as e:
                entry.future.set_exception(e)
                raise
            entry.future.set_result(text)
            return text
        finally:
            with self._lock:
                entry.refs -= 1
                if entry.refs == 0 and self._inflight.get(key) is entry:
                    del self._inflight[key]

    def in_flight(self) -> int:
        """Number of keys currently being fetched in coalescing mode."""
        with self._lock:
            return len(self._inflight)

    def resolve_text(self, text: str, translation: Optional[str] = None) -> List[dict]:
        """
        Detect every reference in text and resolve each one.

        A failed reference does not stop the others; its entry carries
        an "error" instead of text.

        Returns:
            List of {"reference", "text", "from_cache", "translation", "error"}
        """
        translation = translation or self.default_translation
        results = []

        for _, parsed in detect(text):
            try:
                result = self.resolve(parsed, translation)
                entry = result.to_dict()
                entry["error"] = None
            except BibleApiError as e:
                logger.warning(f"Could not resolve {parsed.normalized} ({translation}): {e}")
                entry = {
                    "text": None,
                    "from_cache": False,
                    "translation": translation,
                    "reference": parsed.to_dict(),
                    "error": type(e).__name__,
                    "detail": str(e),
                }
            results.append(entry)

        return results
