"""Import-time validation of parsed books and chapters.

Checks the placeholder/slug round trip and the shape invariants the storage
layer relies on. Violations raise ``ValidationError`` with a specific kind;
the first violation found aborts validation of that book.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Mapping

from bibleparse.errors import ValidationError, ValidationErrorKind
from bibleparse.types import Book, Chapter, Verse, placeholder


PLACEHOLDER_RE = re.compile(r"\{\{([^{}]+)\}\}")
_LEFTOVER_MARKER_RE = re.compile(r"\\\+?[a-z]+\*?", re.IGNORECASE)
_MALFORMED_BRACES_RE = re.compile(r"[{}]")


def placeholder_slugs(text: str) -> list[str]:
    """Slugs of every ``{{slug}}`` placeholder in order of appearance."""
    return PLACEHOLDER_RE.findall(text)


def _check_text_content(text: str, kind: ValidationErrorKind, where: str) -> None:
    if _LEFTOVER_MARKER_RE.search(text):
        raise ValidationError(kind, f"{where} contains USFM markers that should have been removed")
    if _MALFORMED_BRACES_RE.search(PLACEHOLDER_RE.sub("", text)):
        raise ValidationError(kind, f"{where} contains malformed placeholders")


def _verse_scope_slugs(verse: Verse) -> list[str]:
    slugs = placeholder_slugs(verse.text)
    for title in verse.titles:
        slugs.extend(placeholder_slugs(title.text))
    return slugs


def validate_verse(verse: Verse, *, chapter_number: int, book_name: str) -> None:
    where = f"verse {verse.number} in chapter {chapter_number} of book {book_name!r}"

    if not verse.text.strip():
        raise ValidationError("empty_verse", f"{where} has empty text")
    _check_text_content(verse.text, "invalid_verse_text_content", where)

    for index, ref in enumerate(verse.references, start=1):
        ref_where = f"reference {ref.slug!r} of {where}"
        if not ref.slug:
            raise ValidationError("empty_reference_slug", f"reference in {where} has empty slug")
        if not ref.text.strip():
            raise ValidationError("empty_reference_text", f"{ref_where} has empty text")
        _check_text_content(ref.text, "invalid_reference_text_content", ref_where)
        if ref.slug != str(index):
            raise ValidationError(
                "non_sequential_slug",
                f"{ref_where} breaks the slug sequence (expected {str(index)!r})",
            )

    used = Counter(_verse_scope_slugs(verse))
    for ref in verse.references:
        if used[ref.slug] == 0:
            raise ValidationError(
                "missing_slug_in_verse_text",
                f"reference {ref.slug!r} of {where} has no {placeholder(ref.slug)} placeholder",
            )
    known = {ref.slug for ref in verse.references}
    for slug, count in sorted(used.items()):
        if slug not in known or count > 1:
            raise ValidationError(
                "orphan_placeholder",
                f"{where} has placeholder {placeholder(slug)} without exactly one reference",
            )


def validate_chapter(chapter: Chapter, *, book_name: str) -> None:
    """Validate verse ordering and every verse of one chapter."""
    if not chapter.verses:
        raise ValidationError(
            "missing_verses",
            f"chapter {chapter.number} in book {book_name!r} is missing verses",
        )
    numbers = [verse.number for verse in chapter.verses]
    duplicates = sorted(number for number, count in Counter(numbers).items() if count > 1)
    if duplicates:
        raise ValidationError(
            "duplicate_verse_number",
            f"chapter {chapter.number} in book {book_name!r} repeats verses {duplicates}",
        )
    if numbers != sorted(numbers):
        raise ValidationError(
            "unsorted_verses",
            f"chapter {chapter.number} in book {book_name!r} lists verses out of order",
        )
    for verse in chapter.verses:
        validate_verse(verse, chapter_number=chapter.number, book_name=book_name)


def validate_book(
    book: Book,
    *,
    expected_chapter_count: int | None = None,
    expected_verse_counts: Mapping[int, int] | None = None,
) -> None:
    """Validate a parsed book, optionally against known chapter/verse counts."""
    if not book.chapters:
        raise ValidationError("missing_chapters", f"book {book.name!r} is missing chapters")
    if expected_chapter_count is not None and len(book.chapters) != expected_chapter_count:
        raise ValidationError(
            "unexpected_chapter_count",
            f"book {book.name!r} has {len(book.chapters)} chapters, expected {expected_chapter_count}",
        )
    for chapter in book.chapters:
        validate_chapter(chapter, book_name=book.name)
        if expected_verse_counts is None or chapter.number not in expected_verse_counts:
            continue
        expected = expected_verse_counts[chapter.number]
        if len(chapter.verses) != expected:
            raise ValidationError(
                "unexpected_verse_count",
                f"chapter {chapter.number} in book {book.name!r} has {len(chapter.verses)} verses, expected {expected}",
            )
