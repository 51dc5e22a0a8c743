"""Tests for the inline USFM lexer."""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from bibleparse.diagnostics import WarningSink
from bibleparse.nodes import CharacterSpan, Note, Text, VerseMarker
from bibleparse.usfm.lexer import is_block_marker, lex_inline, verse_number_from_token


def _lex(text: str) -> tuple[list, WarningSink]:
    sink = WarningSink()
    return lex_inline(text, warnings=sink, context="GEN.1", line=7), sink


class TestVerseAndNotes:
    def test_footnote_becomes_note_with_segments(self) -> None:
        nodes, sink = _lex("\\v 1 texto\\f + \\fr 1:1 \\ft nota\\f* fim")
        assert nodes == [
            VerseMarker(number=1, raw="1"),
            Text(text="texto"),
            Note(
                style="f",
                verse_id=None,
                items=(
                    CharacterSpan(style="fr", items=(Text(text="1:1 "),)),
                    CharacterSpan(style="ft", items=(Text(text="nota"),)),
                ),
            ),
            Text(text=" fim"),
        ]
        assert not sink.has_warnings()

    def test_cross_reference_without_explicit_content_marker(self) -> None:
        nodes, _ = _lex("\\v 2 a\\x - \\xo 1.2 \\xt Jo 3.16\\x*")
        note = nodes[2]
        assert isinstance(note, Note)
        assert [span.style for span in note.items] == ["xo", "xt"]

    def test_bare_note_body_opens_content_segment(self) -> None:
        nodes, _ = _lex("\\v 1 a\\f + nota simples\\f*")
        note = nodes[2]
        assert note.items == (CharacterSpan(style="ft", items=(Text(text="nota simples"),)),)

    def test_inline_quotation_is_a_note(self) -> None:
        nodes, sink = _lex("\\v 1 disse\\rq Is 1.1\\rq* e foi")
        note = nodes[2]
        assert isinstance(note, Note)
        assert note.style == "rq"
        assert note.items == (CharacterSpan(style="rq", items=(Text(text="Is 1.1"),)),)
        assert nodes[3] == Text(text=" e foi")
        assert not sink.has_warnings()

    def test_verse_bridge_keeps_first_number(self) -> None:
        nodes, _ = _lex("\\v 4-5 texto")
        assert nodes[0] == VerseMarker(number=4, raw="4-5")

    def test_verse_number_tokens(self) -> None:
        assert verse_number_from_token("12") == 12
        assert verse_number_from_token("3a") == 3
        assert verse_number_from_token("0") is None
        assert verse_number_from_token("x") is None

    def test_text_before_verse_is_right_trimmed(self) -> None:
        nodes, _ = _lex("\\v 1 um   \\v 2 dois")
        assert nodes == [
            VerseMarker(number=1, raw="1"),
            Text(text="um"),
            VerseMarker(number=2, raw="2"),
            Text(text="dois"),
        ]

    def test_unterminated_note_closed_at_next_verse(self) -> None:
        nodes, sink = _lex("\\v 1 a\\f + \\ft nota \\v 2 b")
        assert isinstance(nodes[2], Note)
        assert nodes[3] == VerseMarker(number=2, raw="2")
        assert sink.records[0].message == "unterminated note closed at verse marker."


class TestCharacterSpans:
    def test_span_keeps_text(self) -> None:
        nodes, _ = _lex("\\v 1 um \\it dois\\it* três")
        assert nodes[2] == CharacterSpan(style="it", items=(Text(text="dois"),))

    def test_word_attributes_are_dropped(self) -> None:
        nodes, _ = _lex('\\v 1 \\w graça|lemma="charis"\\w* final')
        assert nodes[1] == CharacterSpan(style="w", items=(Text(text="graça"),))

    def test_words_of_jesus_reopen_after_verse_marker(self) -> None:
        nodes, sink = _lex("\\v 1 \\wj a \\v 2 b\\wj*")
        assert [type(node).__name__ for node in nodes] == [
            "VerseMarker", "CharacterSpan", "VerseMarker", "CharacterSpan",
        ]
        assert nodes[3] == CharacterSpan(style="wj", items=(Text(text="b"),))
        assert not sink.has_warnings()

    def test_nested_plus_marker(self) -> None:
        nodes, _ = _lex("\\v 1 \\wj a \\+nd Senhor\\+nd*\\wj*")
        span = nodes[1]
        assert span.style == "wj"
        assert span.items[1] == CharacterSpan(style="nd", items=(Text(text="Senhor"),))

    def test_alternate_numbering_is_dropped(self) -> None:
        nodes, sink = _lex("\\v 1 \\va 2\\va* texto")
        assert len(nodes) == 2
        assert nodes[1].text.strip() == "texto"
        assert not sink.has_warnings()


class TestWarnings:
    def test_stray_closer_is_warned(self) -> None:
        nodes, sink = _lex("\\v 1 a\\it* b")
        assert [node.text for node in nodes[1:]] == ["a", " b"]
        record = sink.records[0]
        assert record.message == "closing marker without matching opener ignored."
        assert record.context["line"] == 7
        assert record.context["context"] == "GEN.1"

    def test_unterminated_span_closed_at_end(self) -> None:
        nodes, sink = _lex("\\v 1 a \\bd b")
        assert nodes[2] == CharacterSpan(style="bd", items=(Text(text="b"),))
        assert sink.records[0].message == "unterminated marker closed at end of paragraph."

    def test_sub_marker_outside_note(self) -> None:
        nodes, sink = _lex("\\v 1 \\ft solto")
        assert nodes[1] == Text(text="solto")
        assert sink.records[0].context["marker"] == "\\ft"

    def test_unmapped_marker_kept_as_span(self) -> None:
        nodes, sink = _lex("\\v 1 \\zz x\\zz*")
        assert nodes[1] == CharacterSpan(style="zz", items=(Text(text="x"),))
        assert sink.records[0].message == "unmapped USFM marker."

    def test_block_marker_inline_is_dropped(self) -> None:
        nodes, sink = _lex("\\v 1 a \\p b")
        assert [node.text for node in nodes[1:]] == ["a ", "b"]
        assert sink.records[0].message == "paragraph-level marker inside inline text ignored."


class TestBlockMarkers:
    def test_is_block_marker(self) -> None:
        for name in ("c", "p", "q2", "s1", "b", "cl", "toc1", "mt1"):
            assert is_block_marker(name), name
        for name in ("v", "f", "it", "wj", "va"):
            assert not is_block_marker(name), name
