# api/services/references/book_ids.py
"""
Book identifier table.

Maps human-entered book names and abbreviations to canonical USFM book
codes ("Genesis" -> "GEN", "1 Cor" -> "1CO"). Lookups are case-insensitive,
ignore periods and internal spacing, and accept roman-numeral prefixes
("II Kings").

Abbreviations that double as English words ("is", "am", "he", "re") are
not aliases, so "the meeting is 5:30" never reads as Isaiah 5:30.
"""

import re
from typing import Optional

# (USFM code, display name, aliases) in canonical order
BOOKS = [
    # Torah/Pentateuch
    ("GEN", "Genesis", ("gen", "gn", "ge")),
    ("EXO", "Exodus", ("exod", "exo", "ex")),
    ("LEV", "Leviticus", ("lev", "lv")),
    ("NUM", "Numbers", ("num", "nm", "numb")),
    ("DEU", "Deuteronomy", ("deut", "deu", "dt")),

    # Historical Books
    ("JOS", "Joshua", ("josh", "jos")),
    ("JDG", "Judges", ("judg", "jdg", "jg")),
    ("RUT", "Ruth", ("rth", "rut")),
    ("1SA", "1 Samuel", ("1 sam", "1 sa", "1 sm", "1 samuel")),
    ("2SA", "2 Samuel", ("2 sam", "2 sa", "2 sm", "2 samuel")),
    ("1KI", "1 Kings", ("1 kgs", "1 ki", "1 kin", "1 kings")),
    ("2KI", "2 Kings", ("2 kgs", "2 ki", "2 kin", "2 kings")),
    ("1CH", "1 Chronicles", ("1 chr", "1 ch", "1 chron", "1 chronicles")),
    ("2CH", "2 Chronicles", ("2 chr", "2 ch", "2 chron", "2 chronicles")),
    ("EZR", "Ezra", ("ezr",)),
    ("NEH", "Nehemiah", ("neh",)),
    ("EST", "Esther", ("esth", "est")),

    # Wisdom/Poetry
    ("JOB", "Job", ("jb",)),
    ("PSA", "Psalms", ("psalm", "ps", "psa", "pss", "psm")),
    ("PRO", "Proverbs", ("prov", "pro", "prv", "proverb")),
    ("ECC", "Ecclesiastes", ("eccl", "ecc", "eccles", "qoh", "qoheleth")),
    ("SNG", "Song of Solomon", ("song", "songs", "song of songs", "sos", "canticles", "cant")),

    # Major Prophets
    ("ISA", "Isaiah", ("isa",)),
    ("JER", "Jeremiah", ("jer",)),
    ("LAM", "Lamentations", ("lam",)),
    ("EZK", "Ezekiel", ("ezek", "eze", "ezk")),
    ("DAN", "Daniel", ("dan", "dn")),

    # Minor Prophets
    ("HOS", "Hosea", ("hos",)),
    ("JOL", "Joel", ("jl", "jol")),
    ("AMO", "Amos", ("amo",)),
    ("OBA", "Obadiah", ("obad", "oba")),
    ("JON", "Jonah", ("jon", "jnh")),
    ("MIC", "Micah", ("mic",)),
    ("NAM", "Nahum", ("nah", "nam")),
    ("HAB", "Habakkuk", ("hab",)),
    ("ZEP", "Zephaniah", ("zeph", "zep")),
    ("HAG", "Haggai", ("hag",)),
    ("ZEC", "Zechariah", ("zech", "zec")),
    ("MAL", "Malachi", ("mal",)),

    # Gospels
    ("MAT", "Matthew", ("matt", "mat", "mt")),
    ("MRK", "Mark", ("mrk", "mk")),
    ("LUK", "Luke", ("luk", "lk")),
    ("JHN", "John", ("jn", "joh", "jhn")),

    # Acts
    ("ACT", "Acts", ("act",)),

    # Pauline Epistles
    ("ROM", "Romans", ("rom", "rm")),
    ("1CO", "1 Corinthians", ("1 cor", "1 co", "1 corinthians")),
    ("2CO", "2 Corinthians", ("2 cor", "2 co", "2 corinthians")),
    ("GAL", "Galatians", ("gal",)),
    ("EPH", "Ephesians", ("eph",)),
    ("PHP", "Philippians", ("phil", "php", "philip")),
    ("COL", "Colossians", ("col",)),
    ("1TH", "1 Thessalonians", ("1 thess", "1 thes", "1 th", "1 thessalonians")),
    ("2TH", "2 Thessalonians", ("2 thess", "2 thes", "2 th", "2 thessalonians")),
    ("1TI", "1 Timothy", ("1 tim", "1 ti", "1 timothy")),
    ("2TI", "2 Timothy", ("2 tim", "2 ti", "2 timothy")),
    ("TIT", "Titus", ("tit",)),
    ("PHM", "Philemon", ("philem", "phlm", "phm")),

    # General Epistles
    ("HEB", "Hebrews", ("heb",)),
    ("JAS", "James", ("jas",)),
    ("1PE", "1 Peter", ("1 pet", "1 pe", "1 pt", "1 peter")),
    ("2PE", "2 Peter", ("2 pet", "2 pe", "2 pt", "2 peter")),
    ("1JN", "1 John", ("1 jn", "1 jo", "1 joh", "1 john")),
    ("2JN", "2 John", ("2 jn", "2 jo", "2 joh", "2 john")),
    ("3JN", "3 John", ("3 jn", "3 jo", "3 joh", "3 john")),
    ("JUD", "Jude", ("jud", "jd")),

    # Revelation
    ("REV", "Revelation", ("rev", "rv", "revelations", "apocalypse")),
]


def _compact(key: str) -> str:
    return key.replace(" ", "")


# Alias (lowercase, spaces removed) -> USFM code
BOOK_IDS = {}
for _code, _name, _aliases in BOOKS:
    for _alias in (_name.lower(), _code.lower()) + _aliases:
        BOOK_IDS[_compact(_alias)] = _code

# USFM code -> display name
BOOK_NAMES = {code: name for code, name, _ in BOOKS}

# USFM code -> canonical ordinal (1 = Genesis ... 66 = Revelation)
BOOK_ORDER = {code: i for i, (code, _, _) in enumerate(BOOKS, start=1)}

_ROMAN_PREFIX = re.compile(r"^(iii|ii|i)\s+(?=\S)")
_ROMAN_VALUES = {"i": "1", "ii": "2", "iii": "3"}


def normalize_book_key(name: str) -> str:
    """
    Reduce a book name to its lookup key.

    "1 Cor." -> "1cor", "II  Kings" -> "2kings"
    """
    key = name.lower().replace(".", "").strip()
    key = re.sub(r"\s+", " ", key)
    key = _ROMAN_PREFIX.sub(lambda m: _ROMAN_VALUES[m.group(1)], key)
    return _compact(key)


def get_book_id(name: Optional[str]) -> Optional[str]:
    """
    Look up the canonical book code for a human-entered book name.

    Returns:
        USFM code (e.g., "JHN") or None if the name is not a known book
    """
    if not name:
        return None
    return BOOK_IDS.get(normalize_book_key(name))


def book_name(book_id: str) -> str:
    """Display name for a book code, falling back to the code itself."""
    return BOOK_NAMES.get(book_id, book_id)
