"""File-level entry points for USFM imports (one file per book)."""

from __future__ import annotations

import logging
from pathlib import Path

from bibleparse.books import resolve_book_abbreviation
from bibleparse.errors import ParseError
from bibleparse.io_utils import read_text
from bibleparse.types import BookParseResult
from bibleparse.usfm.book_parser import leading_marker, parse_book


USFM_EXTENSION = "usfm"


def id_abbreviation(content: str) -> str | None:
    """First three characters of the ``\\id`` line, or None when there is none."""
    for line in content.lstrip("\ufeff").splitlines():
        line = line.strip()
        if not line:
            continue
        marker = leading_marker(line)
        if marker is None or marker[0] != "id":
            return None
        return marker[1][:3] or None
    return None


def resolve_abbreviation(content: str, file_name: str) -> str:
    """Resolve the book from ``\\id``, falling back to the file name stem.

    ``GEN.usfm`` and ``01-gen.usfm`` style names both resolve through the
    stem's last three characters.
    """
    from_id = id_abbreviation(content)
    if from_id is not None:
        resolved = resolve_book_abbreviation(from_id)
        if resolved is None:
            raise ParseError(
                "invalid_book_abbreviation",
                f"book abbreviation {from_id!r} from \\id marker is not a known book in file {file_name}",
            )
        return resolved

    stem = Path(file_name).stem
    resolved = resolve_book_abbreviation(stem) or resolve_book_abbreviation(stem[-3:])
    if resolved is None:
        raise ParseError("missing_id_marker", f"\\id marker not found in USFM file {file_name}")
    return resolved


def parse_usfm_document(
    content: str,
    file_name: str,
    extension: str = USFM_EXTENSION,
    *,
    logger: logging.Logger | None = None,
) -> BookParseResult:
    """Parse one USFM book document.

    Raises ``ParseError`` (``invalid_file_extension``, ``missing_id_marker``,
    ``invalid_book_abbreviation`` or any book-level error).
    """
    if extension.lower().lstrip(".") != USFM_EXTENSION:
        raise ParseError("invalid_file_extension", f"file must have .usfm extension: {file_name}")
    abbreviation = resolve_abbreviation(content, file_name)
    return parse_book(content, abbreviation, logger=logger)


def parse_usfm_file(path: Path, *, logger: logging.Logger | None = None) -> BookParseResult:
    """Read a ``.usfm`` file from disk (UTF-8, BOM tolerated) and parse it."""
    return parse_usfm_document(
        read_text(path),
        path.name,
        path.suffix or "",
        logger=logger,
    )
