"""api.bible chapter parser (tree dialect).

The chapter ``content`` array is an ordered list of ``para`` tags. Each is
decoded into a ``Paragraph`` once and handed to the shared processor; text
and notes are routed to verses by their ``verseId`` attribute
(``"{bookId}.{chapter}.{verse}"``), never by position.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from pathlib import Path

from bibleparse.diagnostics import log, truncate_snippet
from bibleparse.errors import ParseError
from bibleparse.io_utils import load_json
from bibleparse.nodes import decode_paragraph
from bibleparse.processor import ChapterState, finish_chapter, process_paragraph
from bibleparse.types import ChapterParseResult, Verse


_CHAPTER_NUMBER_RE = re.compile(r"\d+")


def _normalize_chapter_number(chapter_number: str | int) -> str:
    if isinstance(chapter_number, bool):
        raise ParseError("invalid_chapter_number", f"invalid chapter number {chapter_number!r}")
    value = str(chapter_number).strip()
    if not _CHAPTER_NUMBER_RE.fullmatch(value):
        raise ParseError("invalid_chapter_number", f"invalid chapter number {chapter_number!r}")
    return value


def _check_document(content: object) -> Sequence[Mapping[str, object]]:
    if isinstance(content, (str, bytes)) or not isinstance(content, Sequence):
        raise ParseError(
            "malformed_document",
            f"chapter content must be a list of paragraphs, got {type(content).__name__}",
        )
    for index, entry in enumerate(content):
        if not isinstance(entry, Mapping):
            raise ParseError(
                "malformed_document",
                f"content entry {index} is {type(entry).__name__}, expected an object",
            )
    return content


def parse_chapter_detailed(
    content: object,
    book_id: str,
    chapter_number: str | int,
    *,
    logger: logging.Logger | None = None,
) -> ChapterParseResult:
    """Parse one chapter and return its verses together with the warnings.

    Raises ``ParseError`` for a malformed document shape, an empty book id
    or a non-numeric chapter number. Everything else degrades to warnings,
    which are logged once after the chapter completes.
    """
    if not book_id or not book_id.strip():
        raise ParseError("invalid_book_id", "book id cannot be empty")
    paragraphs = _check_document(content)
    state = ChapterState(
        book_id=book_id.strip(),
        chapter_number=_normalize_chapter_number(chapter_number),
        resolve_mode="verse_id",
    )

    for index, entry in enumerate(paragraphs):
        paragraph = decode_paragraph(entry)
        if paragraph is None:
            state.warnings.add(
                "top-level entry skipped (not a para tag).",
                context=state.context_key,
                index=index,
                item_name=str(entry.get("name") or "(no name)"),
                item_type=str(entry.get("type") or "(no type)"),
                text_snippet=truncate_snippet(str(entry.get("text") or "")),
            )
            continue
        process_paragraph(state, paragraph)

    verses = finish_chapter(state)
    warnings = state.warnings.flush(logger or log)
    return ChapterParseResult(verses=tuple(verses), warnings=tuple(warnings))


def parse_chapter(
    content: object,
    book_id: str,
    chapter_number: str | int,
    *,
    logger: logging.Logger | None = None,
) -> list[Verse]:
    """Parse one api.bible chapter content array into ordered verses."""
    result = parse_chapter_detailed(content, book_id, chapter_number, logger=logger)
    return list(result.verses)


def parse_chapter_response(
    payload: object,
    *,
    logger: logging.Logger | None = None,
) -> ChapterParseResult:
    """Parse a full api.bible chapter response (``{"data": {...}}``).

    ``bookId`` and ``number`` come from the envelope; a response without a
    ``data.content`` list is rejected as ``invalid_response``.
    """
    data = payload.get("data") if isinstance(payload, Mapping) else None
    if not isinstance(data, Mapping):
        raise ParseError("invalid_response", "api.bible response has no data object")
    content = data.get("content")
    if isinstance(content, (str, bytes)) or not isinstance(content, Sequence):
        raise ParseError("invalid_response", "api.bible response has no content list")
    book_id = data.get("bookId")
    number = data.get("number")
    if not isinstance(book_id, str):
        raise ParseError("invalid_book_id", f"invalid bookId {book_id!r} in response")
    if number is None:
        raise ParseError("invalid_chapter_number", "response has no chapter number")
    return parse_chapter_detailed(content, book_id, number, logger=logger)


def load_chapter_response(
    path: Path,
    *,
    logger: logging.Logger | None = None,
) -> ChapterParseResult:
    """Load a saved api.bible chapter response from disk and parse it."""
    return parse_chapter_response(load_json(path), logger=logger)
