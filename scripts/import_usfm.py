#!/usr/bin/env python3
"""Parse USFM book files and report per-book results.

Each file is one book. Fatal errors abort only the file that raised them;
the exit status is 1 when any file failed to parse or validate.
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

from bibleparse.books import book_order
from bibleparse.errors import ParseError, ValidationError
from bibleparse.io_utils import dumps_json, save_json
from bibleparse.types import BookParseResult, book_to_dict, warning_to_dict
from bibleparse.usfm import parse_usfm_file
from bibleparse.validation import validate_book

log = logging.getLogger("import_usfm")


def _collect_paths(inputs: list[Path]) -> list[Path]:
    paths: list[Path] = []
    for item in inputs:
        if item.is_dir():
            paths.extend(sorted(p for p in item.iterdir() if p.suffix.lower() == ".usfm"))
        else:
            paths.append(item)
    return paths


def _summary(path: Path, result: BookParseResult) -> dict[str, object]:
    book = result.book
    return {
        "file": str(path),
        "abbreviation": book.abbreviation,
        "name": book.name,
        "chapters": len(book.chapters),
        "verses": sum(len(chapter.verses) for chapter in book.chapters),
        "references": sum(
            len(verse.references) for chapter in book.chapters for verse in chapter.verses
        ),
        "warnings": len(result.warnings),
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Import USFM book files")
    parser.add_argument("inputs", nargs="+", type=Path, help=".usfm files or directories")
    parser.add_argument("--validate", action="store_true", help="run import validation on each book")
    parser.add_argument("--out", type=Path, default=None, help="write full parsed books JSON here")
    parser.add_argument("--json", action="store_true", help="print full books instead of summaries")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    results: list[tuple[Path, BookParseResult]] = []
    failures: list[dict[str, str]] = []
    for path in _collect_paths(args.inputs):
        try:
            result = parse_usfm_file(path)
            if args.validate:
                validate_book(result.book)
        except (ParseError, ValidationError) as exc:
            log.error("%s: %s", path, exc)
            failures.append({"file": str(path), "kind": exc.kind, "message": str(exc)})
            continue
        log.info("parsed %s (%d chapters)", path.name, len(result.book.chapters))
        results.append((path, result))

    results.sort(key=lambda item: book_order(item[1].book.abbreviation))

    full = {
        "books": [
            {
                **book_to_dict(result.book),
                "warnings": [warning_to_dict(w) for w in result.warnings],
            }
            for _, result in results
        ],
        "failures": failures,
    }
    if args.out is not None:
        save_json(full, args.out)

    if args.json:
        print(dumps_json(full))
    else:
        print(
            dumps_json(
                {
                    "books": [_summary(path, result) for path, result in results],
                    "failures": failures,
                    "out": str(args.out) if args.out is not None else None,
                },
            ),
        )
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
