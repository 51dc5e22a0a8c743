"""Canonical book abbreviations (lower-case, three characters) in canonical order."""

from __future__ import annotations


BOOK_ABBREVIATIONS: tuple[str, ...] = (
    # Old Testament
    "gen", "exo", "lev", "num", "deu", "jos", "jdg", "rut", "1sa", "2sa",
    "1ki", "2ki", "1ch", "2ch", "ezr", "neh", "est", "job", "psa", "pro",
    "ecc", "sng", "isa", "jer", "lam", "ezk", "dan", "hos", "jol", "amo",
    "oba", "jon", "mic", "nam", "hab", "zep", "hag", "zec", "mal",
    # New Testament
    "mat", "mrk", "luk", "jhn", "act", "rom", "1co", "2co", "gal", "eph",
    "php", "col", "1th", "2th", "1ti", "2ti", "tit", "phm", "heb", "jas",
    "1pe", "2pe", "1jn", "2jn", "3jn", "jud", "rev",
)

_BOOK_ORDER: dict[str, int] = {abbr: index for index, abbr in enumerate(BOOK_ABBREVIATIONS)}


def resolve_book_abbreviation(value: str | None) -> str | None:
    """Normalize an abbreviation (any case, surrounding blanks) or return None."""
    if not value:
        return None
    candidate = value.strip().lower()
    return candidate if candidate in _BOOK_ORDER else None


def book_order(abbreviation: str) -> int:
    """Zero-based canonical position; raises KeyError for unknown books."""
    resolved = resolve_book_abbreviation(abbreviation)
    if resolved is None:
        raise KeyError(abbreviation)
    return _BOOK_ORDER[resolved]
