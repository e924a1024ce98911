# api/services/references/__init__.py
"""
Scripture reference services for Rooted.

This package provides:
- Book identifier table: human book names -> USFM codes
- Reference detection: find references in note text, split text into segments
- BibleApiClient: verse text fetch from helloao / Bolls.life
- VerseResolver: cache-aside resolution of references to text
"""

from .book_ids import (
    BOOK_IDS,
    BOOK_NAMES,
    BOOK_ORDER,
    book_name,
    get_book_id,
)
from .reference_parser import (
    ParsedReference,
    TextSegment,
    detect,
    segment,
    find_references,
    parse_reference,
    is_valid_reference,
)
from .bible_client import (
    BibleApiClient,
    BibleApiError,
    NetworkError,
    UnresolvedBookError,
)
from .verse_resolver import (
    FetchVerseText,
    VerseResolver,
    VerseResult,
)

__all__ = [
    # Book table
    "BOOK_IDS",
    "BOOK_NAMES",
    "BOOK_ORDER",
    "book_name",
    "get_book_id",
    # Detection
    "ParsedReference",
    "TextSegment",
    "detect",
    "segment",
    "find_references",
    "parse_reference",
    "is_valid_reference",
    # Fetching
    "BibleApiClient",
    "BibleApiError",
    "NetworkError",
    "UnresolvedBookError",
    # Resolution
    "FetchVerseText",
    "VerseResolver",
    "VerseResult",
]
