"""Paragraph and item processing shared by both markup dialects.

A ``ChapterState`` holds everything one chapter parse mutates. It is built
fresh per chapter and threaded explicitly through the functions below; no
state survives across chapters.

Paragraph dispatch (by ``classify_paragraph_style``):
  chapter_label      only notes contribute, into the target verse's prefix
  section_title,
  reference_title    title text built from items, notes become placeholders
  blank              newline appended to the last verse with content
  paragraph_break,
  other              ordinary verse content

Title attachment:
  1. buffered titles attach ``start`` to the verse opened by the next marker
  2. a title paragraph after a verse has started attaches ``end`` to the most
     recently started verse
  3. titles still buffered at chapter end attach ``end`` to the highest
     numbered verse with content

Break rule: in a paragraph-break paragraph, the first write to a verse that
already has content (prefix included, and not already ending in a newline)
is preceded by one newline. Later writes in the same paragraph never add another.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypeAlias

from bibleparse.accumulator import TitleBuffer, VerseAccumulator, VerseState
from bibleparse.diagnostics import WarningSink, truncate_snippet
from bibleparse.markers import (
    ParagraphKind,
    classify_paragraph_style,
    is_known_style,
    is_note_content_style,
    is_note_reference_style,
    note_family,
)
from bibleparse.nodes import (
    CharacterSpan,
    Node,
    Note,
    Paragraph,
    Text,
    Unknown,
    VerseMarker,
    flatten_text,
    parse_verse_id,
)
from bibleparse.types import Title, TitleKind, Verse, placeholder


ResolveMode: TypeAlias = Literal["verse_id", "current_verse"]

_TITLE_KINDS: dict[ParagraphKind, TitleKind] = {
    "section_title": "section",
    "reference_title": "reference",
}

# Line input has no verse ids; notes seen before any verse land here.
_FIRST_VERSE = 1


@dataclass(frozen=True, slots=True)
class ParagraphContext:
    style: str = ""
    is_break: bool = False
    is_chapter_label: bool = False


@dataclass(slots=True)
class ChapterState:
    """Mutable context for one chapter parse."""

    book_id: str
    chapter_number: str
    resolve_mode: ResolveMode = "verse_id"
    verses: VerseAccumulator = field(default_factory=VerseAccumulator)
    titles: TitleBuffer = field(default_factory=TitleBuffer)
    warnings: WarningSink = field(default_factory=WarningSink)
    current_verse: int | None = None
    started_verse: int | None = None
    received: set[int] = field(default_factory=set)
    previous_kind: ParagraphKind | None = None

    @property
    def context_key(self) -> str:
        return f"{self.book_id}.{self.chapter_number}"


# ---------------------------------------------------------------------------
# Verse resolution
# ---------------------------------------------------------------------------

def _resolve_verse_id(state: ChapterState, verse_id: str | None) -> int | None:
    if verse_id is None:
        return None
    return parse_verse_id(verse_id, state.book_id, state.chapter_number)


def _note_target(state: ChapterState, note: Note, ctx: ParagraphContext) -> int | None:
    if state.resolve_mode == "verse_id":
        number = _resolve_verse_id(state, note.verse_id)
        if number is None:
            state.warnings.add(
                "note skipped (missing verseId or verseId does not match chapter).",
                context=state.context_key,
                paragraph_style=ctx.style,
                note_style=note.style,
                verse_id=note.verse_id,
            )
        return number
    if state.current_verse is not None:
        return state.current_verse
    if state.started_verse is not None:
        return state.started_verse
    return _FIRST_VERSE


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------

def extract_note_text(state: ChapterState, note: Note) -> str:
    """Join the text of a note's content sub-markers.

    Reference sub-markers (``fr``, ``xo``) are skipped silently; any other
    character style carrying text is reported and ignored.
    """
    parts: list[str] = []
    for node in note.items:
        if not isinstance(node, CharacterSpan):
            continue
        text = flatten_text(node.items)
        if is_note_content_style(node.style):
            parts.append(text)
        elif is_note_reference_style(node.style):
            continue
        elif text.strip():
            state.warnings.add(
                "note character style not used for reference text.",
                context=state.context_key,
                char_style=node.style,
                text_snippet=truncate_snippet(text),
            )
    return "".join(parts).strip()


def attach_note(
    state: ChapterState,
    note: Note,
    ctx: ParagraphContext,
) -> tuple[VerseState, str] | None:
    """Record a note as a reference on its target verse.

    Returns the target verse and the placeholder to insert, or None when the
    note is dropped (unknown family, unresolved target or empty text).
    """
    if note_family(note.style) is None:
        state.warnings.add(
            "note skipped (unsupported note style).",
            context=state.context_key,
            paragraph_style=ctx.style,
            note_style=note.style,
        )
        return None
    number = _note_target(state, note, ctx)
    if number is None:
        return None
    text = extract_note_text(state, note)
    if not text:
        return None
    verse = state.verses.get_or_create(number)
    slug = verse.add_reference(text)
    return verse, placeholder(slug)


# ---------------------------------------------------------------------------
# Item handlers
# ---------------------------------------------------------------------------

def _append_content(state: ChapterState, verse: VerseState, text: str, ctx: ParagraphContext) -> None:
    if (
        ctx.is_break
        and verse.has_content()
        and verse.number not in state.received
        and not verse.full_text().endswith("\n")
    ):
        verse.text += "\n"
    state.received.add(verse.number)
    verse.text += text


def _handle_verse_marker(state: ChapterState, node: VerseMarker, ctx: ParagraphContext) -> None:
    if node.number is None:
        state.warnings.add(
            "verse marker ignored (missing or invalid number).",
            context=state.context_key,
            paragraph_style=ctx.style,
            verse_number=node.raw,
        )
        return
    verse = state.verses.get_or_create(node.number)
    for title in state.titles.flush():
        verse.add_title(title, "start")
    state.current_verse = node.number
    state.started_verse = node.number


def _warn_skipped_text(state: ChapterState, text: str, ctx: ParagraphContext, reason: str, **extra: object) -> None:
    state.warnings.add(
        "text skipped.",
        context=state.context_key,
        paragraph_style=ctx.style,
        reason=reason,
        text_snippet=truncate_snippet(text),
        **extra,
    )


def _handle_text(state: ChapterState, node: Text, ctx: ParagraphContext) -> None:
    if node.text == "":
        return
    if ctx.is_chapter_label:
        if node.text.strip():
            _warn_skipped_text(state, node.text, ctx, "text in chapter-label paragraph, not inside a note")
        return

    if state.resolve_mode == "verse_id":
        if node.verse_id is None:
            _warn_skipped_text(state, node.text, ctx, "missing verseId")
            return
        number = _resolve_verse_id(state, node.verse_id)
        if number is None:
            _warn_skipped_text(
                state, node.text, ctx, "verseId does not match chapter", verse_id=node.verse_id,
            )
            return
    else:
        number = state.current_verse
        if number is None:
            if node.text.strip():
                _warn_skipped_text(state, node.text, ctx, "no current verse")
            return

    _append_content(state, state.verses.get_or_create(number), node.text, ctx)
    state.current_verse = number


def _handle_note(state: ChapterState, node: Note, ctx: ParagraphContext) -> None:
    attached = attach_note(state, node, ctx)
    if attached is None:
        return
    verse, marker = attached
    if ctx.is_chapter_label:
        state.verses.append_prefix(verse.number, marker)
    else:
        _append_content(state, verse, marker, ctx)


def _handle_character_span(state: ChapterState, node: CharacterSpan, ctx: ParagraphContext) -> None:
    text = flatten_text(node.items)
    if not ctx.is_chapter_label and state.current_verse is not None:
        if text:
            _append_content(state, state.verses.get_or_create(state.current_verse), text, ctx)
        return
    if text.strip():
        reason = (
            "character content in chapter-label paragraph, not inside a note"
            if ctx.is_chapter_label
            else "no current verse"
        )
        state.warnings.add(
            "character content skipped.",
            context=state.context_key,
            paragraph_style=ctx.style,
            char_style=node.style,
            reason=reason,
            text_snippet=truncate_snippet(text),
        )


def _handle_unknown(state: ChapterState, node: Unknown, ctx: ParagraphContext) -> None:
    if node.type != "tag" and not node.has_items:
        return
    state.warnings.add(
        "unhandled item type, content may be lost.",
        context=state.context_key,
        paragraph_style=ctx.style,
        item_name=node.name,
        item_type=node.type,
        has_nested_items=node.has_items,
    )


def process_items(state: ChapterState, items: tuple[Node, ...] | list[Node], ctx: ParagraphContext) -> None:
    """Walk one paragraph's items in order, mutating the chapter state."""
    for node in items:
        match node:
            case VerseMarker():
                _handle_verse_marker(state, node, ctx)
            case Text():
                _handle_text(state, node, ctx)
            case Note():
                _handle_note(state, node, ctx)
            case CharacterSpan():
                _handle_character_span(state, node, ctx)
            case Unknown():
                _handle_unknown(state, node, ctx)


# ---------------------------------------------------------------------------
# Titles
# ---------------------------------------------------------------------------

def build_title_text(state: ChapterState, items: tuple[Node, ...] | list[Node], ctx: ParagraphContext) -> str:
    """Title text with title-internal notes rendered as placeholders."""
    parts: list[str] = []
    for node in items:
        match node:
            case Text(text=text):
                parts.append(text)
            case Note():
                attached = attach_note(state, node, ctx)
                if attached is not None:
                    parts.append(attached[1])
            case CharacterSpan(items=children):
                parts.append(flatten_text(children))
            case VerseMarker():
                state.warnings.add(
                    "verse marker inside title paragraph ignored.",
                    context=state.context_key,
                    paragraph_style=ctx.style,
                    verse_number=node.raw,
                )
            case Unknown():
                _handle_unknown(state, node, ctx)
    return "".join(parts).strip()


def _process_title(state: ChapterState, paragraph: Paragraph, kind: TitleKind) -> None:
    ctx = ParagraphContext(style=paragraph.style)
    text = build_title_text(state, paragraph.items, ctx)
    if not text:
        return
    title = Title(text=text, kind=kind)
    if state.started_verse is None:
        state.titles.add(title)
        return
    if state.previous_kind in _TITLE_KINDS:
        state.warnings.add(
            "consecutive title paragraphs after verse content; attached to the previous verse.",
            context=state.context_key,
            paragraph_style=paragraph.style,
            verse_number=state.started_verse,
            text_snippet=truncate_snippet(text),
        )
    state.verses.get_or_create(state.started_verse).add_title(title, "end")


# ---------------------------------------------------------------------------
# Paragraphs
# ---------------------------------------------------------------------------

def add_blank_line(state: ChapterState) -> None:
    number = state.verses.last_number_with_content()
    if number is not None:
        state.verses.append_text(number, "\n")


def begin_paragraph(state: ChapterState, style: str) -> ParagraphContext:
    """Open an ordinary (verse-content) paragraph."""
    if style and not is_known_style(style):
        state.warnings.add(
            "unknown paragraph style, content may be lost.",
            context=state.context_key,
            style=style,
        )
    state.received = set()
    return ParagraphContext(
        style=style,
        is_break=classify_paragraph_style(style) == "paragraph_break",
    )


def process_paragraph(state: ChapterState, paragraph: Paragraph) -> None:
    """Dispatch one paragraph by its classified style."""
    kind = classify_paragraph_style(paragraph.style)
    match kind:
        case "chapter_label":
            ctx = ParagraphContext(style=paragraph.style, is_chapter_label=True)
            process_items(state, paragraph.items, ctx)
        case "section_title" | "reference_title":
            _process_title(state, paragraph, _TITLE_KINDS[kind])
        case "blank":
            add_blank_line(state)
        case _:
            ctx = begin_paragraph(state, paragraph.style)
            process_items(state, paragraph.items, ctx)
    state.previous_kind = kind


def finish_chapter(state: ChapterState) -> list[Verse]:
    """Flush leftover titles and freeze the accumulated verses."""
    if not state.titles.is_empty():
        number = state.verses.last_number_with_content()
        leftovers = state.titles.flush()
        if number is None:
            state.warnings.add(
                "titles dropped (no verse with content in chapter).",
                context=state.context_key,
                title_count=len(leftovers),
            )
        else:
            verse = state.verses.get_or_create(number)
            for title in leftovers:
                verse.add_title(title, "end")
    return state.verses.build()
