"""Tests for warning collection, output types and error kinds."""

import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from bibleparse.diagnostics import LOGGER_NAME, WarningSink, truncate_snippet
from bibleparse.errors import ParseError, ValidationError
from bibleparse.types import (
    Reference,
    Title,
    Verse,
    placeholder,
    verse_to_dict,
    warning_to_dict,
)


class TestTruncateSnippet:
    def test_short_text_is_trimmed_only(self) -> None:
        assert truncate_snippet("  short  ") == "short"

    def test_long_text_is_cut_with_ellipsis(self) -> None:
        snippet = truncate_snippet("x" * 80)
        assert snippet == "x" * 50 + "…"

    def test_custom_length(self) -> None:
        assert truncate_snippet("abcdef", max_length=3) == "abc…"


class TestWarningSink:
    def test_collects_until_flushed(self) -> None:
        sink = WarningSink()
        assert not sink.has_warnings()
        sink.add("first", context="TST.1")
        sink.add("second")
        assert len(sink) == 2
        assert sink.records[0].context == {"context": "TST.1"}

    def test_flush_logs_once_and_empties(self, caplog: pytest.LogCaptureFixture) -> None:
        sink = WarningSink()
        sink.add("text skipped.", reason="no current verse", context="TST.1")
        with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
            flushed = sink.flush()
            sink.flush()
        assert len(flushed) == 1
        assert len(caplog.records) == 1
        message = caplog.records[0].getMessage()
        assert message.startswith("text skipped.")
        # context keys are logged sorted
        assert message.index("context=") < message.index("reason=")
        assert not sink.has_warnings()

    def test_flush_to_custom_logger(self, caplog: pytest.LogCaptureFixture) -> None:
        sink = WarningSink()
        sink.add("custom")
        logger = logging.getLogger("bibleparse.test_custom")
        with caplog.at_level(logging.WARNING, logger="bibleparse.test_custom"):
            sink.flush(logger)
        assert [record.name for record in caplog.records] == ["bibleparse.test_custom"]


class TestTypes:
    def test_placeholder(self) -> None:
        assert placeholder("3") == "{{3}}"

    def test_verse_rejects_non_positive_number(self) -> None:
        with pytest.raises(ValueError):
            Verse(number=0, text="x")

    def test_reference_rejects_empty_slug(self) -> None:
        with pytest.raises(ValueError):
            Reference(slug="", text="x")

    def test_title_rejects_unknown_kind(self) -> None:
        with pytest.raises(ValueError):
            Title(text="x", kind="chapter")  # type: ignore[arg-type]

    def test_verse_to_dict(self) -> None:
        verse = Verse(
            number=1,
            text="a{{1}}",
            titles=(Title("T", "section", "end"),),
            references=(Reference("1", "nota"),),
        )
        assert verse_to_dict(verse) == {
            "number": 1,
            "text": "a{{1}}",
            "titles": [{"text": "T", "kind": "section", "position": "end"}],
            "references": [{"slug": "1", "text": "nota"}],
        }

    def test_warning_to_dict_sorts_context(self) -> None:
        sink = WarningSink()
        sink.add("m", z=1, a=2)
        row = warning_to_dict(sink.records[0])
        assert list(row["context"]) == ["a", "z"]


class TestErrors:
    def test_parse_error_carries_kind(self) -> None:
        error = ParseError("missing_book_name", "no \\h")
        assert error.kind == "missing_book_name"
        assert str(error) == "missing_book_name: no \\h"
        assert isinstance(error, RuntimeError)

    def test_validation_error_carries_kind(self) -> None:
        error = ValidationError("empty_verse", "verse 1 is empty")
        assert error.kind == "empty_verse"
        assert "verse 1 is empty" in str(error)
