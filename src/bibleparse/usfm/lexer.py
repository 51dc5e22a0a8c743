"""Inline USFM lexer.

Turns the text of one USFM paragraph (already joined across physical lines)
into the node variants the tree decoder produces, so the shared processor
handles both dialects identically:

    \\v 3 text            -> VerseMarker(3), Text("text")
    \\f + \\fr 1:1 \\ft x\\f*  -> Note("f", items=[CharacterSpan("fr"), CharacterSpan("ft")])
    \\rq Isa 1.1\\rq*       -> Note("rq", items=[CharacterSpan("rq")])
    \\it word\\it*         -> CharacterSpan("it", [Text("word")])

Markers are scanned left to right against a stack of open frames. Note
bodies are split into sub-marker segments; a segment ends at the next
sub-marker or at the note's closing marker. Frames still open at the end of
the input are closed with a warning.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal, TypeAlias

from bibleparse.diagnostics import WarningSink, truncate_snippet
from bibleparse.markers import (
    CHAPTER_MARKER,
    VERSE_MARKER,
    NoteFamily,
    classify_paragraph_style,
    is_ignored_inline_marker,
    is_ignored_marker,
    is_note_sub_marker,
    known_markers,
    note_family,
)
from bibleparse.nodes import CharacterSpan, Node, Note, Text, VerseMarker


MARKER_RE = re.compile(r"\\(\+?)([A-Za-z]+[0-9]*)(\*?)")

_WHITESPACE_RE = re.compile(r"\s+")
# Verse number token after \v; bridges ("4-5") keep their first number.
_VERSE_NUMBER_RE = re.compile(r"[ \t]*([^\s\\]+)[ \t]?")
_VERSE_BRIDGE_RE = re.compile(r"(\d+)(?:[a-z]|[-\u2010\u2013]\d+[a-z]?)?")
_NOTE_CALLER_RE = re.compile(r"[ \t]*([^\s\\])(?=\s|\\|$)[ \t]*")
_LEADING_SPACE_RE = re.compile(r"[ \t]*")

_KNOWN_MARKERS = known_markers()

FrameKind: TypeAlias = Literal["root", "note", "segment", "span", "skip"]


@dataclass(slots=True)
class _Frame:
    kind: FrameKind
    style: str = ""
    family: NoteFamily | None = None
    items: list[Node] = field(default_factory=list)

    def close(self) -> Node:
        match self.kind:
            case "note":
                return Note(style=self.style, verse_id=None, items=tuple(self.items))
            case _:
                return CharacterSpan(style=self.style, items=tuple(self.items))


def is_block_marker(name: str) -> bool:
    """True for markers that start a paragraph, title or chapter line."""
    return (
        name == CHAPTER_MARKER
        or is_ignored_marker(name)
        or classify_paragraph_style(name) != "other"
    )


def verse_number_from_token(token: str) -> int | None:
    match = _VERSE_BRIDGE_RE.fullmatch(token)
    if match is None:
        return None
    number = int(match.group(1))
    return number if number >= 1 else None


class _Lexer:
    def __init__(self, text: str, warnings: WarningSink, context: str, line: int | None) -> None:
        self.text = text
        self.warnings = warnings
        self.context = context
        self.line = line
        self.stack: list[_Frame] = [_Frame("root")]

    # -- diagnostics ------------------------------------------------------

    def warn(self, message: str, **extra: object) -> None:
        details: dict[str, object] = {"context": self.context}
        if self.line is not None:
            details["line"] = self.line
        details.update(extra)
        self.warnings.add(message, **details)

    # -- frame helpers ----------------------------------------------------

    @property
    def top(self) -> _Frame:
        return self.stack[-1]

    def pop(self) -> None:
        frame = self.stack.pop()
        if frame.kind != "skip":
            self.top.items.append(frame.close())

    def innermost(self, kind: FrameKind) -> _Frame | None:
        for frame in reversed(self.stack):
            if frame.kind == kind:
                return frame
        return None

    def close_through(self, target: _Frame) -> None:
        while self.stack[-1] is not target:
            self.pop()
        self.pop()

    def close_segment(self) -> None:
        segment = self.innermost("segment")
        note = self.innermost("note")
        if segment is not None and note is not None and self.stack.index(segment) > self.stack.index(note):
            self.close_through(segment)

    # -- emitters ---------------------------------------------------------

    def emit_text(self, text: str) -> None:
        text = _WHITESPACE_RE.sub(" ", text)
        if not text:
            return
        frame = self.top
        if frame.kind == "note":
            if not text.strip():
                return
            content_marker = frame.family.content_marker if frame.family else frame.style
            self.stack.append(_Frame("segment", style=content_marker))
            frame = self.top
        elif frame.kind == "span" and "|" in text:
            # \w word|lemma="..."\w*: attributes are never display text.
            text = text.split("|", 1)[0]
            if not text:
                return
        frame.items.append(Text(text=text))

    def emit_verse(self, pos: int) -> int:
        # Character spans such as \wj may run across verses; notes may not.
        reopen: list[str] = []
        note = self.innermost("note")
        if note is not None:
            self.warn("unterminated note closed at verse marker.", marker=note.style)
        else:
            reopen = [frame.style for frame in self.stack[1:] if frame.kind == "span"]
        while len(self.stack) > 1:
            self.pop()
        root = self.top.items
        if root and isinstance(root[-1], Text):
            trimmed = root[-1].text.rstrip()
            if trimmed:
                root[-1] = Text(text=trimmed)
            else:
                root.pop()

        match = _VERSE_NUMBER_RE.match(self.text, pos)
        if match is None:
            root.append(VerseMarker(number=None, raw=None))
        else:
            raw = match.group(1)
            root.append(VerseMarker(number=verse_number_from_token(raw), raw=raw))
            pos = match.end()
        for style in reopen:
            self.stack.append(_Frame("span", style=style))
        return pos

    def open_note(self, name: str, family: NoteFamily, pos: int) -> int:
        self.stack.append(_Frame("note", style=name, family=family))
        if family.reference_marker:
            caller = _NOTE_CALLER_RE.match(self.text, pos)
            if caller is not None:
                return caller.end()
        return _LEADING_SPACE_RE.match(self.text, pos).end()

    def open_segment(self, name: str) -> None:
        self.close_segment()
        self.stack.append(_Frame("segment", style=name))

    def close_marker(self, name: str, raw: str) -> None:
        wants_note = note_family(name) is not None
        for frame in reversed(self.stack[1:]):
            if frame.style == name and (frame.kind == "note") == wants_note:
                self.close_through(frame)
                return
        self.warn("closing marker without matching opener ignored.", marker=raw)

    # -- main loop --------------------------------------------------------

    def run(self) -> list[Node]:
        pos = 0
        while True:
            match = MARKER_RE.search(self.text, pos)
            if match is None:
                self.emit_text(self.text[pos:])
                break
            self.emit_text(self.text[pos:match.start()])
            pos = self.handle_marker(match)

        if len(self.stack) > 1:
            self.warn(
                "unterminated marker closed at end of paragraph.",
                marker=self.top.style,
                text_snippet=truncate_snippet(self.text),
            )
            while len(self.stack) > 1:
                self.pop()
        return _trim_edges(self.stack[0].items)

    def handle_marker(self, match: re.Match[str]) -> int:
        _, name, star = match.groups()
        pos = match.end()
        raw = match.group(0)

        if star:
            self.close_marker(name, raw)
            return pos

        if name == VERSE_MARKER:
            return self.emit_verse(pos)

        family = note_family(name)
        if family is not None:
            return self.open_note(name, family, pos)

        if is_note_sub_marker(name):
            if self.innermost("note") is None:
                self.warn("note sub-marker outside a note ignored.", marker=raw)
            else:
                self.open_segment(name)
            return _LEADING_SPACE_RE.match(self.text, pos).end()

        if is_ignored_inline_marker(name):
            self.stack.append(_Frame("skip", style=name))
            return pos

        if is_block_marker(name):
            self.warn("paragraph-level marker inside inline text ignored.", marker=raw)
            return _LEADING_SPACE_RE.match(self.text, pos).end()

        if name not in _KNOWN_MARKERS:
            self.warn("unmapped USFM marker.", marker=name)
        self.stack.append(_Frame("span", style=name))
        # A single space separates a character marker from its content.
        if self.text.startswith(" ", pos):
            pos += 1
        return pos


def _trim_edges(items: list[Node]) -> list[Node]:
    if items and isinstance(items[0], Text):
        head = items[0].text.lstrip()
        items[0:1] = [Text(text=head)] if head else []
    if items and isinstance(items[-1], Text):
        tail = items[-1].text.rstrip()
        items[-1:] = [Text(text=tail)] if tail else []
    return items


def lex_inline(
    text: str,
    *,
    warnings: WarningSink,
    context: str,
    line: int | None = None,
) -> list[Node]:
    """Lex one paragraph of USFM inline content into nodes."""
    return _Lexer(text, warnings, context, line).run()
