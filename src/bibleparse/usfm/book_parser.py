"""USFM book driver (line dialect).

Scans a whole book file line by line. Book-level markers (``\\id``, ``\\h``,
``\\c`` and the skipped header set) are handled here; everything below the
chapter level is lexed into nodes and routed through the same processor the
api.bible parser uses.

An ordinary paragraph (``\\p``, ``\\q1``, ``\\m``, ...) stays open across
physical lines until the next paragraph-level marker: its lines are joined
with a space and lexed together, so notes and character spans may wrap.
Title, chapter-label and blank lines are complete on their own line.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from bibleparse.diagnostics import WarningSink, log, truncate_snippet
from bibleparse.errors import ParseError
from bibleparse.markers import (
    BOOK_ID_MARKER,
    BOOK_NAME_MARKER,
    CHAPTER_LABEL_STYLE,
    CHAPTER_MARKER,
    classify_paragraph_style,
    is_formatting_style,
    is_ignored_marker,
    is_note_sub_marker,
    note_family,
)
from bibleparse.nodes import Paragraph
from bibleparse.processor import (
    ChapterState,
    begin_paragraph,
    finish_chapter,
    process_items,
    process_paragraph,
)
from bibleparse.types import Book, BookParseResult, Chapter
from bibleparse.usfm.lexer import MARKER_RE, is_block_marker, lex_inline


_LEADING_MARKER_RE = re.compile(r"\\([A-Za-z]+[0-9]*)(?=[\s\\|]|$)")
_CHAPTER_NUMBER_RE = re.compile(r"\\c\s+(\d+)\b")
_BOM = "\ufeff"


@dataclass(slots=True)
class _OpenParagraph:
    """Ordinary paragraph whose lines are still being collected."""

    style: str
    line: int
    parts: list[str] = field(default_factory=list)


@dataclass(slots=True)
class _BookState:
    abbreviation: str
    warnings: WarningSink = field(default_factory=WarningSink)
    name: str | None = None
    chapters: list[Chapter] = field(default_factory=list)
    chapter: ChapterState | None = None
    paragraph: _OpenParagraph | None = None
    skipping: bool = False

    @property
    def context_key(self) -> str:
        if self.chapter is not None:
            return self.chapter.context_key
        return self.abbreviation.upper()


# ---------------------------------------------------------------------------
# Line splitting
# ---------------------------------------------------------------------------

def split_block_markers(line: str) -> list[str]:
    """Split a physical line so each paragraph-level marker starts a segment.

    Some files put ``\\p`` or ``\\q2`` mid-line; downstream handling assumes
    every such marker opens its own logical line.
    """
    cuts = [
        match.start()
        for match in MARKER_RE.finditer(line)
        if match.start() > 0
        and not match.group(1)
        and not match.group(3)
        and is_block_marker(match.group(2))
    ]
    if not cuts:
        return [line]
    bounds = [0, *cuts, len(line)]
    segments = [line[start:end].strip() for start, end in zip(bounds, bounds[1:])]
    return [segment for segment in segments if segment]


def leading_marker(line: str) -> tuple[str, str] | None:
    """Return ``(marker, rest)`` when a line starts with a plain opening marker."""
    match = _LEADING_MARKER_RE.match(line)
    if match is None:
        return None
    return match.group(1), line[match.end():].strip()


def _is_inline_marker(name: str, line: str) -> bool:
    if name == "v" or note_family(name) is not None:
        return True
    if is_formatting_style(name) or is_note_sub_marker(name):
        return True
    # Unknown markers count as inline only when the line also closes them.
    return f"\\{name}*" in line


# ---------------------------------------------------------------------------
# Paragraph and chapter flushing
# ---------------------------------------------------------------------------

def _flush_paragraph(book: _BookState) -> None:
    paragraph = book.paragraph
    book.paragraph = None
    if paragraph is None or book.chapter is None:
        return
    state = book.chapter
    ctx = begin_paragraph(state, paragraph.style)
    items = lex_inline(
        " ".join(paragraph.parts),
        warnings=book.warnings,
        context=state.context_key,
        line=paragraph.line,
    )
    process_items(state, items, ctx)
    state.previous_kind = classify_paragraph_style(paragraph.style)


def _finish_chapter(book: _BookState) -> None:
    _flush_paragraph(book)
    state = book.chapter
    book.chapter = None
    if state is None:
        return
    verses = finish_chapter(state)
    if not verses:
        book.warnings.add(
            "chapter without verses skipped.",
            context=state.context_key,
        )
        return
    book.chapters.append(Chapter(number=int(state.chapter_number), verses=tuple(verses)))


def _start_chapter(book: _BookState, line: str, line_number: int) -> None:
    match = _CHAPTER_NUMBER_RE.match(line)
    if match is None or int(match.group(1)) < 1:
        raise ParseError(
            "invalid_chapter_number",
            f"unparsable chapter marker at line {line_number}: {truncate_snippet(line)!r}",
        )
    _finish_chapter(book)
    book.chapter = ChapterState(
        book_id=book.abbreviation.upper(),
        chapter_number=str(int(match.group(1))),
        resolve_mode="current_verse",
        warnings=book.warnings,
    )
    trailing = line[match.end():].strip()
    if trailing:
        book.warnings.add(
            "text after chapter marker ignored.",
            context=book.chapter.context_key,
            line=line_number,
            text_snippet=truncate_snippet(trailing),
        )


# ---------------------------------------------------------------------------
# Line dispatch
# ---------------------------------------------------------------------------

def _feed_content(book: _BookState, text: str, line_number: int) -> None:
    if book.chapter is None:
        book.warnings.add(
            "content before first chapter marker skipped.",
            context=book.context_key,
            line=line_number,
            text_snippet=truncate_snippet(text),
        )
        return
    if book.paragraph is None:
        book.paragraph = _OpenParagraph(style="", line=line_number)
    book.paragraph.parts.append(text)


def _standalone_paragraph(book: _BookState, state: ChapterState, style: str, rest: str, line_number: int) -> None:
    _flush_paragraph(book)
    items = lex_inline(rest, warnings=book.warnings, context=state.context_key, line=line_number)
    process_paragraph(state, Paragraph(style=style, items=tuple(items)))


def _handle_line(book: _BookState, line: str, line_number: int) -> None:
    marker = leading_marker(line)
    if marker is None:
        if line.startswith("\\"):
            book.skipping = False
            _feed_content(book, line, line_number)
        elif not book.skipping:
            _feed_content(book, line, line_number)
        return

    name, rest = marker
    book.skipping = False

    if name == BOOK_NAME_MARKER:
        if rest:
            book.name = rest
        return
    if name == BOOK_ID_MARKER:
        return
    if name == CHAPTER_MARKER:
        _start_chapter(book, line, line_number)
        return
    if is_ignored_marker(name):
        book.skipping = True
        return

    kind = classify_paragraph_style(name)
    if kind in ("chapter_label", "section_title", "reference_title", "blank"):
        if book.chapter is None:
            # Book-level labels and titles (\cl before \c 1) carry no verses.
            if name != CHAPTER_LABEL_STYLE:
                book.warnings.add(
                    "paragraph before first chapter marker skipped.",
                    context=book.context_key,
                    line=line_number,
                    marker=name,
                    text_snippet=truncate_snippet(rest),
                )
            return
        _standalone_paragraph(book, book.chapter, name, rest, line_number)
        return

    if kind == "paragraph_break" or not _is_inline_marker(name, line):
        _flush_paragraph(book)
        if book.chapter is None:
            if rest:
                _feed_content(book, rest, line_number)
            return
        book.paragraph = _OpenParagraph(style=name, line=line_number)
        if rest:
            book.paragraph.parts.append(rest)
        return

    _feed_content(book, line, line_number)


def parse_book(
    content: str,
    abbreviation: str,
    *,
    logger: logging.Logger | None = None,
) -> BookParseResult:
    """Parse one USFM book into chapters of verses.

    Raises ``ParseError`` when a chapter marker is unparsable or the book
    has no ``\\h`` name. Warnings are collected for the whole book and
    logged once at the end.
    """
    book = _BookState(abbreviation=abbreviation)
    if content.startswith(_BOM):
        content = content[len(_BOM):]

    for line_number, raw_line in enumerate(content.splitlines(), start=1):
        for line in split_block_markers(raw_line.strip()):
            if line:
                _handle_line(book, line, line_number)
    _finish_chapter(book)

    if not book.name:
        book.warnings.flush(logger or log)
        raise ParseError("missing_book_name", "book name (\\h marker) not found in USFM file")

    warnings = book.warnings.flush(logger or log)
    return BookParseResult(
        book=Book(name=book.name, abbreviation=abbreviation, chapters=tuple(book.chapters)),
        warnings=tuple(warnings),
    )
