"""Marker registry for USFM-derived paragraph, character and note styles.

Both dialects share these tables: api.bible content carries the same style
names in its ``attrs.style`` fields that USFM spells as backslash markers.

Paragraph classification precedence:
  chapter_label: ``cl``; plain text dropped, notes still attach
  section_title: ``d``, ``s*``, ``ms*``, ``qa``
  reference_title: ``r``, ``mr``, ``sr``
  blank: ``b``; appends a newline to the last verse with content
  paragraph_break: poetry/prose paragraph markers that start a new line
  other: anything else (unknown styles warn but keep content)

The registry is closed: adding a style means adding it here, never teaching
the processors about it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias


ParagraphKind: TypeAlias = Literal[
    "chapter_label",
    "section_title",
    "reference_title",
    "blank",
    "paragraph_break",
    "other",
]
NodeKind: TypeAlias = Literal["verse_marker", "text", "note", "character_span", "unknown"]


# ---------------------------------------------------------------------------
# Paragraph styles
# ---------------------------------------------------------------------------

CHAPTER_LABEL_STYLE = "cl"
BLANK_PARAGRAPH_STYLE = "b"

SECTION_TITLE_STYLES: frozenset[str] = frozenset({
    "d", "s", "s1", "s2", "s3", "s4", "qa", "ms", "ms1", "ms2", "ms3",
})

REFERENCE_TITLE_STYLES: frozenset[str] = frozenset({"r", "mr", "sr"})

PARAGRAPH_BREAK_STYLES: tuple[str, ...] = (
    "p", "m", "b", "nb", "pc", "pr", "pi", "pi1", "pi2", "pi3", "pi4",
    "mi", "po", "cls", "pmo", "pm", "pmc", "pmr",
    "q", "q1", "q2", "q3", "q4", "qr", "qc", "qa", "qm", "qm1", "qm2", "qm3", "qm4", "qd",
    "li", "li1", "li2", "li3", "li4", "lim", "lim1", "lim2", "lim3", "lim4", "lh", "lf",
)
_PARAGRAPH_BREAK_SET = frozenset(PARAGRAPH_BREAK_STYLES)


# ---------------------------------------------------------------------------
# Character styles (markup stripped, text kept)
# ---------------------------------------------------------------------------

FORMATTING_STYLES: frozenset[str] = frozenset({
    "it", "bd", "em", "bdit", "sc", "no", "sup",
    "add", "bk", "dc", "k", "nd", "ord", "pn", "png", "qt", "sig", "sls", "tl", "wj",
    "w", "wg", "wh", "wa", "rb", "pro", "ndx", "fig",
    "lik", "liv", "liv1", "liv2", "liv3", "liv4", "litl", "qs", "qac",
})


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class NoteFamily:
    """Sub-marker pair of a note family.

    ``reference_marker`` carries the anchor label (``1:1``) and is never part
    of the reference text; ``content_marker`` is the default body marker.
    """

    style: str
    reference_marker: str
    content_marker: str


INLINE_QUOTATION_STYLE = "rq"

NOTE_FAMILIES: dict[str, NoteFamily] = {
    "f": NoteFamily("f", "fr", "ft"),      # \f + \fr REF \ft TEXT \f*
    "fe": NoteFamily("fe", "fr", "ft"),    # endnote
    "ef": NoteFamily("ef", "fr", "ft"),    # extended (study) footnote
    "x": NoteFamily("x", "xo", "xt"),      # \x + \xo REF \xt TEXT \x*
    "ex": NoteFamily("ex", "xo", "xt"),    # extended (study) cross reference
    INLINE_QUOTATION_STYLE: NoteFamily(INLINE_QUOTATION_STYLE, "", INLINE_QUOTATION_STYLE),
}

NOTE_CONTENT_STYLES: frozenset[str] = frozenset(
    {family.content_marker for family in NOTE_FAMILIES.values()}
    | {"fq", "fqa", "fk", "fl", "fw", "fp", "xk", "xq", "xta"}
)

NOTE_REFERENCE_STYLES: frozenset[str] = frozenset(
    family.reference_marker for family in NOTE_FAMILIES.values() if family.reference_marker
)

# Recognised inside notes but never part of the reference text.
NOTE_EXTRA_SUB_MARKERS: frozenset[str] = frozenset({
    "fv", "fdc", "fm", "xot", "xnt", "xdc", "xop",
})


# ---------------------------------------------------------------------------
# USFM book-level markers
# ---------------------------------------------------------------------------

BOOK_ID_MARKER = "id"
BOOK_NAME_MARKER = "h"
CHAPTER_MARKER = "c"
VERSE_MARKER = "v"

IGNORED_MARKERS: frozenset[str] = frozenset({
    "id", "ide", "h", "toc1", "toc2", "toc3", "toca1", "toca2", "toca3",
    "mt", "mt1", "mt2", "mt3", "mt4", "mte", "mte1", "mte2",
    "imt", "imt1", "imt2", "is", "is1", "is2", "ip", "ipr", "iot", "io", "io1", "io2", "io3", "ie",
    "rem", "usfm", "sts", "sp", "cp", "periph",
})

# Inline alternate numbering; the spanned text is dropped.
IGNORED_INLINE_MARKERS: frozenset[str] = frozenset({"ca", "va", "vp"})


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def classify_paragraph_style(style: str) -> ParagraphKind:
    """Map a paragraph style to its semantic category."""
    if style == CHAPTER_LABEL_STYLE:
        return "chapter_label"
    if style in SECTION_TITLE_STYLES:
        return "section_title"
    if style in REFERENCE_TITLE_STYLES:
        return "reference_title"
    if style == BLANK_PARAGRAPH_STYLE:
        return "blank"
    if style in _PARAGRAPH_BREAK_SET:
        return "paragraph_break"
    return "other"


def classify_node(name: str, type_: str) -> NodeKind:
    """Map a tree item's ``name``/``type`` pair to its node kind."""
    if type_ == "text":
        return "text"
    if type_ != "tag":
        return "unknown"
    if name == "verse":
        return "verse_marker"
    if name == "note":
        return "note"
    if name in ("char", "ref"):
        return "character_span"
    return "unknown"


def is_known_style(style: str) -> bool:
    """True when a paragraph style is registered (used to suppress warnings)."""
    return (
        style in (CHAPTER_LABEL_STYLE, BLANK_PARAGRAPH_STYLE)
        or style in SECTION_TITLE_STYLES
        or style in REFERENCE_TITLE_STYLES
        or style in _PARAGRAPH_BREAK_SET
    )


def note_family(style: str) -> NoteFamily | None:
    return NOTE_FAMILIES.get(style)


def is_note_content_style(style: str) -> bool:
    return style in NOTE_CONTENT_STYLES


def is_note_reference_style(style: str) -> bool:
    return style in NOTE_REFERENCE_STYLES


def is_note_sub_marker(style: str) -> bool:
    """True for markers that open a segment inside a note body."""
    return (
        style in NOTE_CONTENT_STYLES
        or style in NOTE_REFERENCE_STYLES
        or style in NOTE_EXTRA_SUB_MARKERS
    )


def is_formatting_style(style: str) -> bool:
    return style in FORMATTING_STYLES


def is_ignored_marker(marker: str) -> bool:
    return marker in IGNORED_MARKERS


def is_ignored_inline_marker(marker: str) -> bool:
    return marker in IGNORED_INLINE_MARKERS


def known_markers() -> frozenset[str]:
    """Every marker the USFM driver understands, for unmapped-marker warnings."""
    return frozenset(
        {CHAPTER_LABEL_STYLE, BLANK_PARAGRAPH_STYLE, CHAPTER_MARKER, VERSE_MARKER}
        | SECTION_TITLE_STYLES
        | REFERENCE_TITLE_STYLES
        | _PARAGRAPH_BREAK_SET
        | FORMATTING_STYLES
        | set(NOTE_FAMILIES)
        | NOTE_CONTENT_STYLES
        | NOTE_REFERENCE_STYLES
        | NOTE_EXTRA_SUB_MARKERS
        | IGNORED_MARKERS
        | IGNORED_INLINE_MARKERS
    )
