"""USFM (line dialect) front end: inline lexer, book driver and file adapter."""

from bibleparse.usfm.adapter import (
    id_abbreviation,
    parse_usfm_document,
    parse_usfm_file,
    resolve_abbreviation,
)
from bibleparse.usfm.book_parser import leading_marker, parse_book, split_block_markers
from bibleparse.usfm.lexer import is_block_marker, lex_inline

__all__ = [
    "id_abbreviation",
    "is_block_marker",
    "leading_marker",
    "lex_inline",
    "parse_book",
    "parse_usfm_document",
    "parse_usfm_file",
    "resolve_abbreviation",
    "split_block_markers",
]
