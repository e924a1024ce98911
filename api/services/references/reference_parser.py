# api/services/references/reference_parser.py
"""
Scripture reference detection for free-form note text.

Finds references such as:
- "John 3:16"
- "1 John 4:5", "1John 4:5"
- "1 Cor 13:4-7"
- "Romans 8:28, 31" (the comma group is consumed, only 8:28 is kept)

and splits note text into alternating text/reference segments so the
caller can render references as links.
"""

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .book_ids import book_name, get_book_id

# <optional digit><space><letters><space><chapter>:<verse>[-<verse>][, <verse>[-<verse>]]*
# The book group never starts with whitespace, so a match begins at the book.
VERSE_REF_PATTERN = re.compile(
    r"((?:[0-9][ \t]*)?[A-Za-z]+)\s+([0-9]+):([0-9]+)(?:-([0-9]+))?"
    r"(?:,\s*[0-9]+(?:-[0-9]+)?)*"
)

# A whole string holding exactly one reference. Allows multi-word book
# names ("Song of Solomon 2:1") and trailing periods ("Gen. 1:1").
# Comma groups are accepted as in VERSE_REF_PATTERN; only the first pair is kept.
SINGLE_REF_PATTERN = re.compile(
    r"^\s*((?:[1-3]|i{1,3})?\s*[A-Za-z][A-Za-z .]*?)\.?\s+"
    r"([0-9]+):([0-9]+)(?:\s*[-–—]\s*([0-9]+))?"
    r"(?:,\s*[0-9]+(?:-[0-9]+)?)*\s*$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ParsedReference:
    """
    A scripture reference found in text.

    Attributes:
        raw_match: Exact text that matched, including any comma groups
        book_raw: Book token as typed (e.g., "1 Cor")
        book_id: Canonical USFM code (e.g., "1CO")
        chapter: Chapter number (>= 1)
        verse_start: First verse (>= 1)
        verse_end: Last verse (>= verse_start; equals verse_start for one verse)
    """
    raw_match: str
    book_raw: str
    book_id: str
    chapter: int
    verse_start: int
    verse_end: int

    @property
    def book(self) -> str:
        """Display name of the book."""
        return book_name(self.book_id)

    @property
    def normalized(self) -> str:
        """Return normalized reference string."""
        if self.verse_end != self.verse_start:
            return f"{self.book} {self.chapter}:{self.verse_start}-{self.verse_end}"
        return f"{self.book} {self.chapter}:{self.verse_start}"

    @property
    def verse_count(self) -> int:
        return self.verse_end - self.verse_start + 1

    def to_dict(self) -> dict:
        return {
            "raw": self.raw_match,
            "book": self.book_raw,
            "book_id": self.book_id,
            "chapter": self.chapter,
            "verse_start": self.verse_start,
            "verse_end": self.verse_end,
            "normalized": self.normalized,
        }


@dataclass(frozen=True)
class TextSegment:
    """
    One piece of note text: either plain text or a detected reference.

    kind is "text" or "reference"; parsed is set only for references.
    """
    kind: str
    content: str
    parsed: Optional[ParsedReference] = None

    @property
    def is_reference(self) -> bool:
        return self.kind == "reference"

    def to_dict(self) -> dict:
        data = {"type": self.kind, "content": self.content}
        if self.parsed is not None:
            data["parsed"] = self.parsed.to_dict()
        return data


def _build_reference(
    raw: str,
    book_token: str,
    chapter: str,
    verse_start: str,
    verse_end: Optional[str],
) -> Optional[ParsedReference]:
    """
    Validate the captured pieces of a match.

    Returns None when the book is unknown or the numbers break the
    chapter >= 1, verse_start >= 1, verse_end >= verse_start rules.
    """
    book_raw = book_token.strip()
    book_id = get_book_id(book_raw)
    if not book_id:
        return None

    chapter_num = int(chapter, 10)
    start = int(verse_start, 10)
    end = int(verse_end, 10) if verse_end else start

    if chapter_num < 1 or start < 1 or end < start:
        return None

    return ParsedReference(
        raw_match=raw,
        book_raw=book_raw,
        book_id=book_id,
        chapter=chapter_num,
        verse_start=start,
        verse_end=end,
    )


def _iter_matches(text: str) -> Iterator[Tuple[re.Match, ParsedReference]]:
    """Yield (match, parsed) for every accepted reference, leftmost first."""
    for match in VERSE_REF_PATTERN.finditer(text):
        book_token, chapter, verse_start, verse_end = match.groups()
        parsed = _build_reference(match.group(0), book_token, chapter, verse_start, verse_end)
        if parsed is not None:
            yield match, parsed


def detect(text: str) -> List[Tuple[str, ParsedReference]]:
    """
    Find all verse references in text.

    Matches with unknown books are dropped silently; their characters
    remain part of the surrounding plain text.

    Args:
        text: Free-form note text

    Returns:
        Ordered list of (raw_match, ParsedReference)
    """
    if not text:
        return []
    return [(match.group(0), parsed) for match, parsed in _iter_matches(text)]


def segment(text: str) -> List[TextSegment]:
    """
    Split text into alternating plain-text and reference segments.

    Joining the content of the returned segments in order gives back
    the original text exactly.
    """
    if not text:
        return [TextSegment(kind="text", content=text or "")]

    segments = []
    last_index = 0

    for match, parsed in _iter_matches(text):
        start, end = match.span()
        if start > last_index:
            segments.append(TextSegment(kind="text", content=text[last_index:start]))
        segments.append(TextSegment(kind="reference", content=match.group(0), parsed=parsed))
        last_index = end

    if last_index < len(text) or not segments:
        segments.append(TextSegment(kind="text", content=text[last_index:]))

    return segments


def find_references(text: str) -> List[ParsedReference]:
    """
    Find all scripture references in a text block.

    Args:
        text: Text to search for references

    Returns:
        List of ParsedReference objects found
    """
    return [parsed for _, parsed in detect(text)]


def parse_reference(ref_string: str) -> Optional[ParsedReference]:
    """
    Parse a string that is exactly one scripture reference.

    Handles:
    - "John 3:16"
    - "Gen. 1:1-3"
    - "1 Cor 13:4-7", "I Corinthians 13:4"
    - "Song of Solomon 2:1"

    Args:
        ref_string: The reference string to parse

    Returns:
        ParsedReference object or None if parsing fails
    """
    if not ref_string:
        return None

    match = SINGLE_REF_PATTERN.match(ref_string)
    if not match:
        return None

    book_token, chapter, verse_start, verse_end = match.groups()
    return _build_reference(ref_string.strip(), book_token, chapter, verse_start, verse_end)


def is_valid_reference(ref_string: str) -> bool:
    """
    Check if a string is a valid scripture reference.
    """
    return parse_reference(ref_string) is not None
