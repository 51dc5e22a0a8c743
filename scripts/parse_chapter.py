#!/usr/bin/env python3
"""Parse a saved api.bible chapter response into verse JSON.

The input is either the full response envelope (``{"data": {...}}``) or a
bare ``content`` array, which then needs ``--book-id`` and ``--chapter``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from bibleparse.apibible import parse_chapter_detailed, parse_chapter_response
from bibleparse.errors import ParseError
from bibleparse.io_utils import dumps_json, load_json, save_json
from bibleparse.types import ChapterParseResult, verse_to_dict, warning_to_dict

log = logging.getLogger("parse_chapter")


def _parse(payload: object, book_id: str | None, chapter: str | None) -> ChapterParseResult:
    if isinstance(payload, list):
        if not book_id or not chapter:
            raise ParseError(
                "malformed_document",
                "a bare content array needs --book-id and --chapter",
            )
        return parse_chapter_detailed(payload, book_id, chapter)
    return parse_chapter_response(payload)


def main() -> int:
    parser = argparse.ArgumentParser(description="Parse an api.bible chapter into verses")
    parser.add_argument("input", type=Path, help="api.bible chapter JSON file")
    parser.add_argument("--book-id", default=None, help="book id for a bare content array (e.g. PSA)")
    parser.add_argument("--chapter", default=None, help="chapter number for a bare content array")
    parser.add_argument("--out", type=Path, default=None, help="write the full result JSON here")
    parser.add_argument("--json", action="store_true", help="print the full result instead of a summary")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        result = _parse(load_json(args.input), args.book_id, args.chapter)
    except ParseError as exc:
        log.error("%s: %s", args.input, exc)
        return 1

    payload = {
        "input": str(args.input),
        "verses": [verse_to_dict(verse) for verse in result.verses],
        "warnings": [warning_to_dict(warning) for warning in result.warnings],
    }
    if args.out is not None:
        save_json(payload, args.out)

    if args.json:
        print(dumps_json(payload))
    else:
        print(
            dumps_json(
                {
                    "input": str(args.input),
                    "verse_count": len(result.verses),
                    "reference_count": sum(len(verse.references) for verse in result.verses),
                    "title_count": sum(len(verse.titles) for verse in result.verses),
                    "warning_count": len(result.warnings),
                    "out": str(args.out) if args.out is not None else None,
                },
            ),
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
