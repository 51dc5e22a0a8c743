"""Fatal error types.

Warnings never raise. These exceptions abort only the current unit (one
chapter or one book file); ``kind`` lets the caller decide between skipping
the unit and aborting a whole batch import.
"""

from __future__ import annotations

from typing import Literal, TypeAlias


ParseErrorKind: TypeAlias = Literal[
    "malformed_document",
    "invalid_response",
    "invalid_book_id",
    "invalid_chapter_number",
    "missing_book_name",
    "missing_id_marker",
    "invalid_book_abbreviation",
    "invalid_file_extension",
]

ValidationErrorKind: TypeAlias = Literal[
    "missing_chapters",
    "missing_verses",
    "unexpected_chapter_count",
    "unexpected_verse_count",
    "duplicate_verse_number",
    "unsorted_verses",
    "empty_verse",
    "invalid_verse_text_content",
    "empty_reference_slug",
    "empty_reference_text",
    "invalid_reference_text_content",
    "non_sequential_slug",
    "missing_slug_in_verse_text",
    "orphan_placeholder",
]


class ParseError(RuntimeError):
    """Raised when a structural prerequisite of the input is absent."""

    def __init__(self, kind: ParseErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind: ParseErrorKind = kind

    def __str__(self) -> str:
        return f"{self.kind}: {self.args[0]}"


class ValidationError(RuntimeError):
    """Raised when parsed output violates an import invariant."""

    def __init__(self, kind: ValidationErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind: ValidationErrorKind = kind

    def __str__(self) -> str:
        return f"{self.kind}: {self.args[0]}"
