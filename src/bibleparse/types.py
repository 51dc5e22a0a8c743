"""Core output types shared by both markup dialects.

Every parser in the package emits these records. Verse text and title text
may carry ``{{slug}}`` placeholders; each placeholder resolves to exactly one
``Reference`` on the same verse.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypeAlias


TitleKind: TypeAlias = Literal["section", "reference"]
TitlePosition: TypeAlias = Literal["start", "end"]

TITLE_KINDS: tuple[TitleKind, ...] = ("section", "reference")
TITLE_POSITIONS: tuple[TitlePosition, ...] = ("start", "end")

PLACEHOLDER_FORMAT = "{{{{{slug}}}}}"


def placeholder(slug: str) -> str:
    """Render the inline placeholder for a reference slug."""
    return PLACEHOLDER_FORMAT.format(slug=slug)


@dataclass(frozen=True, slots=True)
class Reference:
    """Footnote or cross-reference attached to a verse."""

    slug: str
    text: str

    def __post_init__(self) -> None:
        if not self.slug:
            raise ValueError("slug cannot be empty")


@dataclass(frozen=True, slots=True)
class Title:
    """Section or reference title attached to a verse.

    ``start`` titles precede the verse content; ``end`` titles trail it.
    """

    text: str
    kind: TitleKind
    position: TitlePosition = "start"

    def __post_init__(self) -> None:
        if self.kind not in TITLE_KINDS:
            raise ValueError(f"unknown title kind {self.kind!r}")
        if self.position not in TITLE_POSITIONS:
            raise ValueError(f"unknown title position {self.position!r}")


@dataclass(frozen=True, slots=True)
class Verse:
    number: int
    text: str
    titles: tuple[Title, ...] = ()
    references: tuple[Reference, ...] = ()

    def __post_init__(self) -> None:
        if self.number < 1:
            raise ValueError(f"verse number must be >= 1, got {self.number}")


@dataclass(frozen=True, slots=True)
class Chapter:
    number: int
    verses: tuple[Verse, ...]

    def __post_init__(self) -> None:
        if self.number < 1:
            raise ValueError(f"chapter number must be >= 1, got {self.number}")


@dataclass(frozen=True, slots=True)
class Book:
    name: str
    abbreviation: str
    chapters: tuple[Chapter, ...]


@dataclass(frozen=True, slots=True)
class ParseWarning:
    """Non-fatal diagnostic collected while parsing one unit."""

    message: str
    context: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ChapterParseResult:
    verses: tuple[Verse, ...]
    warnings: tuple[ParseWarning, ...]


@dataclass(frozen=True, slots=True)
class BookParseResult:
    book: Book
    warnings: tuple[ParseWarning, ...]


def verse_to_dict(verse: Verse) -> dict[str, object]:
    """Serialize a verse for deterministic snapshots."""

    return {
        "number": verse.number,
        "text": verse.text,
        "titles": [
            {"text": title.text, "kind": title.kind, "position": title.position}
            for title in verse.titles
        ],
        "references": [
            {"slug": ref.slug, "text": ref.text}
            for ref in verse.references
        ],
    }


def chapter_to_dict(chapter: Chapter) -> dict[str, object]:
    return {
        "number": chapter.number,
        "verses": [verse_to_dict(verse) for verse in chapter.verses],
    }


def book_to_dict(book: Book) -> dict[str, object]:
    return {
        "name": book.name,
        "abbreviation": book.abbreviation,
        "chapters": [chapter_to_dict(chapter) for chapter in book.chapters],
    }


def warning_to_dict(warning: ParseWarning) -> dict[str, object]:
    return {
        "message": warning.message,
        "context": dict(sorted(warning.context.items())),
    }
