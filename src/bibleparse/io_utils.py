"""I/O utilities for JSON and markup text files.

JSON goes through orjson. Files exported from Windows tools frequently start
with a UTF-8 byte order mark, which both readers strip before decoding.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson

_UTF8_BOM = b"\xef\xbb\xbf"


def strip_bom(raw: bytes) -> bytes:
    if raw.startswith(_UTF8_BOM):
        return raw[len(_UTF8_BOM):]
    return raw


def decode_json_text(text: str | bytes) -> Any:
    """Decode a JSON document from a string or bytes (BOM tolerated)."""
    raw = text.encode("utf-8") if isinstance(text, str) else text
    return orjson.loads(strip_bom(raw))


def load_json(path: Path) -> Any:
    """Load JSON from a file."""
    return decode_json_text(path.read_bytes())


def dumps_json(obj: Any, *, pretty: bool = True) -> str:
    opts = orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS if pretty else orjson.OPT_SORT_KEYS
    return orjson.dumps(obj, option=opts).decode("utf-8")


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON with sorted keys."""
    path.parent.mkdir(parents=True, exist_ok=True)
    opts = orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS if pretty else orjson.OPT_SORT_KEYS
    path.write_bytes(orjson.dumps(obj, option=opts))


def read_text(path: Path) -> str:
    """Read a UTF-8 text file, dropping a leading byte order mark."""
    return strip_bom(path.read_bytes()).decode("utf-8")
