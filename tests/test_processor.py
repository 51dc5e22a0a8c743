"""Tests for the shared paragraph/item processor."""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from bibleparse.nodes import CharacterSpan, Note, Paragraph, Text, VerseMarker
from bibleparse.processor import (
    ChapterState,
    ParagraphContext,
    begin_paragraph,
    extract_note_text,
    finish_chapter,
    process_items,
    process_paragraph,
)


def _line_state() -> ChapterState:
    return ChapterState(book_id="GEN", chapter_number="1", resolve_mode="current_verse")


def _footnote(text: str, verse_id: str | None = None) -> Note:
    return Note(style="f", verse_id=verse_id, items=(CharacterSpan(style="ft", items=(Text(text=text),)),))


class TestLineMode:
    def test_text_follows_current_verse(self) -> None:
        state = _line_state()
        process_paragraph(state, Paragraph("p", (VerseMarker(1), Text("um "), VerseMarker(2), Text("dois"))))
        verses = finish_chapter(state)
        assert [(v.number, v.text) for v in verses] == [(1, "um"), (2, "dois")]

    def test_note_targets_current_verse(self) -> None:
        state = _line_state()
        process_paragraph(state, Paragraph("p", (VerseMarker(3), Text("texto"), _footnote("nota"))))
        verse = finish_chapter(state)[0]
        assert verse.text == "texto{{1}}"
        assert verse.references[0].text == "nota"

    def test_note_before_any_verse_targets_first_verse(self) -> None:
        state = _line_state()
        process_paragraph(state, Paragraph("cl", (Text("Salmo 1"), _footnote("rótulo"))))
        process_paragraph(state, Paragraph("p", (VerseMarker(1), Text("texto"))))
        verse = finish_chapter(state)[0]
        assert verse.text == "{{1}}\ntexto"
        assert len(state.warnings) == 1

    def test_text_before_any_verse_is_warned(self) -> None:
        state = _line_state()
        process_paragraph(state, Paragraph("p", (Text("solto"),)))
        assert finish_chapter(state) == []
        assert state.warnings.records[0].context["reason"] == "no current verse"

    def test_context_key(self) -> None:
        assert _line_state().context_key == "GEN.1"


class TestBreakRule:
    def test_newline_inserted_once_per_paragraph(self) -> None:
        state = _line_state()
        process_paragraph(state, Paragraph("q1", (VerseMarker(1), Text("a"))))
        ctx = begin_paragraph(state, "q2")
        process_items(state, [Text("b"), CharacterSpan("it", (Text(" c"),)), Text(" d")], ctx)
        assert finish_chapter(state)[0].text == "a\nb c d"

    def test_each_paragraph_restarts_the_rule(self) -> None:
        state = _line_state()
        for style, text in (("q1", "a"), ("q2", "b"), ("q2", "c")):
            items = (VerseMarker(1), Text(text)) if style == "q1" else (Text(text),)
            process_paragraph(state, Paragraph(style, items))
        assert finish_chapter(state)[0].text == "a\nb\nc"

    def test_chapter_label_prefix_counts_as_content(self) -> None:
        state = _line_state()
        process_paragraph(state, Paragraph("cl", (_footnote("rótulo"),)))
        assert state.verses.has_content(1)
        process_paragraph(state, Paragraph("q1", (VerseMarker(1), Text("a"))))
        process_paragraph(state, Paragraph("b"))
        verse = finish_chapter(state)[0]
        assert verse.text == "{{1}}\na"
        assert verse.references[0].text == "rótulo"

    def test_non_break_context_never_adds_newline(self) -> None:
        state = _line_state()
        process_items(state, [VerseMarker(1), Text("a")], ParagraphContext(style="x"))
        process_items(state, [Text("b")], ParagraphContext(style="x"))
        assert finish_chapter(state)[0].text == "ab"

    def test_unknown_style_warns_when_opened(self) -> None:
        state = _line_state()
        ctx = begin_paragraph(state, "zz")
        assert not ctx.is_break
        assert state.warnings.records[0].context["style"] == "zz"

    def test_empty_style_is_silent(self) -> None:
        state = _line_state()
        begin_paragraph(state, "")
        assert not state.warnings.has_warnings()


class TestTitleAttachment:
    def test_buffered_titles_attach_start_in_order(self) -> None:
        state = _line_state()
        process_paragraph(state, Paragraph("s1", (Text("Seção"),)))
        process_paragraph(state, Paragraph("r", (Text("(Ref)"),)))
        process_paragraph(state, Paragraph("p", (VerseMarker(1), Text("x"))))
        titles = finish_chapter(state)[0].titles
        assert [(t.text, t.kind, t.position) for t in titles] == [
            ("Seção", "section", "start"),
            ("(Ref)", "reference", "start"),
        ]

    def test_title_between_verses_attaches_end_to_started_verse(self) -> None:
        state = _line_state()
        process_paragraph(state, Paragraph("p", (VerseMarker(1), Text("a"))))
        process_paragraph(state, Paragraph("s1", (Text("Meio"),)))
        process_paragraph(state, Paragraph("p", (VerseMarker(2), Text("b"))))
        verses = finish_chapter(state)
        assert [(t.text, t.position) for t in verses[0].titles] == [("Meio", "end")]
        assert verses[1].titles == ()

    def test_empty_title_is_dropped(self) -> None:
        state = _line_state()
        process_paragraph(state, Paragraph("s1", (Text("   "),)))
        process_paragraph(state, Paragraph("p", (VerseMarker(1), Text("x"))))
        assert finish_chapter(state)[0].titles == ()

    def test_verse_marker_inside_title_is_warned(self) -> None:
        state = _line_state()
        process_paragraph(state, Paragraph("s1", (VerseMarker(1), Text("Título"))))
        assert state.warnings.records[0].message == "verse marker inside title paragraph ignored."

    def test_title_spans_keep_their_text(self) -> None:
        state = _line_state()
        process_paragraph(state, Paragraph("d", (Text("Para o "), CharacterSpan("sc", (Text("mestre"),)))))
        process_paragraph(state, Paragraph("q1", (VerseMarker(1), Text("x"))))
        assert finish_chapter(state)[0].titles[0].text == "Para o mestre"


class TestExtractNoteText:
    def test_content_styles_joined_without_separator(self) -> None:
        state = _line_state()
        note = Note(
            style="x",
            verse_id=None,
            items=(
                CharacterSpan("xo", (Text("1.1: "),)),
                CharacterSpan("xt", (Text("Jo 1.1; "),)),
                CharacterSpan("xt", (Text("Gn 1.1"),)),
            ),
        )
        assert extract_note_text(state, note) == "Jo 1.1; Gn 1.1"
        assert not state.warnings.has_warnings()

    def test_bare_text_in_note_is_ignored(self) -> None:
        state = _line_state()
        note = Note(style="f", verse_id=None, items=(Text("solto"), CharacterSpan("ft", (Text("nota"),))))
        assert extract_note_text(state, note) == "nota"
