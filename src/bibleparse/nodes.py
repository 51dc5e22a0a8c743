"""Node classifier: decodes raw markup items into a closed set of variants.

The tree dialect delivers loosely-typed mappings (``name``/``type``/``attrs``/
``items``); the USFM lexer produces the same variants from backslash markers.
Downstream processing matches on the variants and never re-inspects raw
mappings.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TypeAlias

from bibleparse.markers import classify_node


_NUMBER_RE = re.compile(r"\d+")


@dataclass(frozen=True, slots=True)
class VerseMarker:
    """Start of a verse; ``number`` is None when the marker is unparsable."""

    number: int | None
    raw: str | None = None


@dataclass(frozen=True, slots=True)
class Text:
    text: str
    verse_id: str | None = None


@dataclass(frozen=True, slots=True)
class Note:
    style: str
    verse_id: str | None
    items: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class CharacterSpan:
    style: str
    items: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class Unknown:
    name: str
    type: str
    has_items: bool = False


Node: TypeAlias = VerseMarker | Text | Note | CharacterSpan | Unknown


@dataclass(frozen=True, slots=True)
class Paragraph:
    style: str
    items: tuple[Node, ...] = ()


def parse_number(raw: object) -> int | None:
    """Parse a positive verse/chapter number from a string or int."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw >= 1 else None
    if not isinstance(raw, str):
        return None
    candidate = raw.strip()
    if not _NUMBER_RE.fullmatch(candidate):
        return None
    number = int(candidate)
    return number if number >= 1 else None


def parse_verse_id(verse_id: str, book_id: str, chapter_number: str | int) -> int | None:
    """Resolve ``"{bookId}.{chapter}.{verse}"`` to a verse number in this chapter."""
    prefix = f"{book_id}.{chapter_number}."
    if not verse_id.startswith(prefix):
        return None
    return parse_number(verse_id[len(prefix):])


def _attrs(item: Mapping[str, object]) -> Mapping[str, object]:
    attrs = item.get("attrs")
    return attrs if isinstance(attrs, Mapping) else {}


def _str_attr(attrs: Mapping[str, object], key: str) -> str | None:
    value = attrs.get(key)
    if value is None:
        return None
    return str(value)


def _child_items(item: Mapping[str, object]) -> list[object]:
    items = item.get("items")
    if isinstance(items, Sequence) and not isinstance(items, (str, bytes)):
        return list(items)
    return []


def decode_items(items: Sequence[object]) -> tuple[Node, ...]:
    return tuple(decode_item(item) for item in items)


def decode_item(item: object) -> Node:
    """Classify one tree item into its node variant (pure, recursive)."""
    if not isinstance(item, Mapping):
        return Unknown(name="(no name)", type=type(item).__name__)

    name = str(item.get("name") or "")
    type_ = str(item.get("type") or "")
    attrs = _attrs(item)
    children = _child_items(item)

    match classify_node(name, type_):
        case "verse_marker":
            raw = _str_attr(attrs, "number")
            return VerseMarker(number=parse_number(raw), raw=raw)
        case "text":
            text = item.get("text")
            return Text(
                text=text if isinstance(text, str) else "",
                verse_id=_str_attr(attrs, "verseId"),
            )
        case "note":
            return Note(
                style=_str_attr(attrs, "style") or "",
                verse_id=_str_attr(attrs, "verseId"),
                items=decode_items(children),
            )
        case "character_span":
            return CharacterSpan(
                style=_str_attr(attrs, "style") or "",
                items=decode_items(children),
            )
        case _:
            return Unknown(
                name=name or "(no name)",
                type=type_ or "(no type)",
                has_items=bool(children),
            )


def is_paragraph_tag(item: Mapping[str, object]) -> bool:
    return item.get("name") == "para" and item.get("type") == "tag"


def decode_paragraph(item: Mapping[str, object]) -> Paragraph | None:
    """Decode a top-level ``para`` tag, or None when the entry is not one."""
    if not is_paragraph_tag(item):
        return None
    return Paragraph(
        style=_str_attr(_attrs(item), "style") or "",
        items=decode_items(_child_items(item)),
    )


def flatten_text(items: Sequence[Node]) -> str:
    """Concatenate the literal text of nested nodes, dropping all markup."""
    parts: list[str] = []
    for node in items:
        match node:
            case Text(text=text):
                parts.append(text)
            case CharacterSpan(items=children) | Note(items=children):
                parts.append(flatten_text(children))
            case _:
                pass
    return "".join(parts)
