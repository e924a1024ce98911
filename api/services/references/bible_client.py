# api/services/references/bible_client.py
"""
Bible text fetch client.

Fetches verse ranges from public Bible APIs, routed by translation:
- helloao (bible.helloao.org) for most translations, addressed by USFM book code
- Bolls.life for translations it alone serves (NKJV), addressed by book number

No caching happens here; VerseResolver owns the cache.
"""

import logging
import re
from typing import Iterable, Optional

import requests

from core.config import (
    BIBLE_API_BASE,
    BIBLE_REQUEST_TIMEOUT,
    BOLLS_API_BASE,
    BOLLS_TRANSLATIONS,
    DEFAULT_TRANSLATION,
)

from .book_ids import BOOK_ORDER

logger = logging.getLogger(__name__)

_HTML_TAG = re.compile(r"<[^>]*>")


class BibleApiError(Exception):
    """Base exception for verse fetch errors."""
    pass


class NetworkError(BibleApiError):
    """Raised when the upstream provider cannot be reached."""
    pass


class UnresolvedBookError(BibleApiError):
    """Raised when the provider rejects the book/translation combination."""
    pass


def strip_html(html: str) -> str:
    """Strip simple HTML tags that Bolls.life may include."""
    return _HTML_TAG.sub("", html).strip()


def _verse_number(value) -> Optional[int]:
    """Verse numbers must be real ints; anything else is skipped."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


class BibleApiClient:
    """
    Verse text fetcher for helloao and Bolls.life.

    Usage:
        client = BibleApiClient()
        text = client.fetch_verse_text("JHN", 3, 16, 16, "BSB")
        # "16 For God so loved the world..."
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        bolls_base_url: Optional[str] = None,
        bolls_translations: Optional[Iterable[str]] = None,
        timeout: Optional[int] = None,
    ):
        self.base_url = (base_url or BIBLE_API_BASE).rstrip("/")
        self.bolls_base_url = (bolls_base_url or BOLLS_API_BASE).rstrip("/")
        self.bolls_translations = {
            t.upper() for t in (bolls_translations if bolls_translations is not None else BOLLS_TRANSLATIONS)
        }
        self._request_timeout = timeout or BIBLE_REQUEST_TIMEOUT

    def is_bolls_translation(self, translation: str) -> bool:
        return translation.upper() in self.bolls_translations

    def _get_json(self, url: str):
        """
        GET a JSON document.

        Raises:
            NetworkError: transport failure, timeout, 429 or 5xx
            UnresolvedBookError: any other 4xx, or a non-JSON body
        """
        try:
            logger.debug(f"Fetching {url}")
            response = requests.get(url, timeout=self._request_timeout)
        except requests.RequestException as e:
            logger.warning(f"Network error fetching {url}: {e}")
            raise NetworkError(f"Could not reach {url}: {e}") from e

        if response.status_code == 429 or response.status_code >= 500:
            logger.warning(f"Upstream error {response.status_code} from {url}")
            raise NetworkError(f"Upstream error {response.status_code} from {url}")

        if response.status_code >= 400:
            logger.info(f"Upstream rejected {url}: {response.status_code}")
            raise UnresolvedBookError(f"Not found upstream ({response.status_code}): {url}")

        try:
            return response.json()
        except ValueError as e:
            raise UnresolvedBookError(f"Malformed response from {url}") from e

    def fetch_verse_text(
        self,
        book_id: str,
        chapter: int,
        verse_start: int,
        verse_end: int,
        translation: str = DEFAULT_TRANSLATION,
    ) -> str:
        """
        Fetch a verse range as one string.

        Each verse is rendered as "<number> <text>" and verses are joined
        with single spaces.

        Raises:
            NetworkError: provider unreachable
            UnresolvedBookError: provider does not have this book/chapter/range
        """
        if self.is_bolls_translation(translation):
            verses = self._fetch_bolls(book_id, chapter, verse_start, verse_end, translation)
        else:
            verses = self._fetch_helloao(book_id, chapter, verse_start, verse_end, translation)

        if not verses:
            raise UnresolvedBookError(
                f"No verses {verse_start}-{verse_end} in {translation} {book_id} {chapter}"
            )

        return " ".join(verses)

    def __call__(self, book_id, chapter, verse_start, verse_end, translation=DEFAULT_TRANSLATION) -> str:
        return self.fetch_verse_text(book_id, chapter, verse_start, verse_end, translation)

    def _fetch_helloao(self, book_id, chapter, verse_start, verse_end, translation) -> list:
        """
        URL pattern: /{translation}/{book}/{chapter}.json

        Verse content is a list of strings and inline objects; only the
        strings and the "text" of objects are kept.
        """
        url = f"{self.base_url}/{translation}/{book_id}/{chapter}.json"
        data = self._get_json(url)

        try:
            content = data["chapter"]["content"]
        except (KeyError, TypeError) as e:
            raise UnresolvedBookError(f"Unexpected chapter format from {url}") from e
        if not isinstance(content, list):
            raise UnresolvedBookError(f"Unexpected chapter format from {url}")

        verses = []
        for item in content:
            if not isinstance(item, dict) or item.get("type") != "verse":
                continue
            number = _verse_number(item.get("number"))
            if number is None or not verse_start <= number <= verse_end:
                continue
            verses.append(f"{number} {self._extract_verse_text(item)}")

        return verses

    def _extract_verse_text(self, item: dict) -> str:
        parts = []
        for piece in item.get("content") or []:
            if isinstance(piece, str):
                parts.append(piece)
            elif isinstance(piece, dict):
                parts.append(piece.get("text") or "")
        return "".join(parts)

    def _fetch_bolls(self, book_id, chapter, verse_start, verse_end, translation) -> list:
        """
        URL pattern: /get-text/{translation}/{bookNum}/{chapter}/

        Returns a list of {pk, verse, text}.
        """
        book_num = BOOK_ORDER.get(book_id)
        if not book_num:
            raise UnresolvedBookError(f"Unknown book ID for Bolls.life: {book_id}")

        url = f"{self.bolls_base_url}/get-text/{translation}/{book_num}/{chapter}/"
        data = self._get_json(url)

        if not isinstance(data, list):
            raise UnresolvedBookError(f"Unexpected chapter format from {url}")

        verses = []
        for item in data:
            number = _verse_number(item.get("verse")) if isinstance(item, dict) else None
            if number is None or not verse_start <= number <= verse_end:
                continue
            text = item.get("text")
            verses.append(f"{number} {strip_html(text if isinstance(text, str) else '')}")

        return verses
