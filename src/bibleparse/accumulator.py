"""Per-chapter accumulation state: verse builders and the pending title queue.

Both structures live for exactly one chapter parse. ``VerseAccumulator``
creates verse entries lazily, the first time a verse marker, text or note
references a number, and freezes them into ``Verse`` records in ``build``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from bibleparse.types import Reference, Title, TitlePosition, Verse


class TitleBuffer:
    """FIFO of titles not yet attached to a verse."""

    def __init__(self) -> None:
        self._titles: list[Title] = []

    def add(self, title: Title) -> None:
        self._titles.append(title)

    def flush(self) -> list[Title]:
        titles = self._titles
        self._titles = []
        return titles

    def is_empty(self) -> bool:
        return not self._titles

    def __len__(self) -> int:
        return len(self._titles)


@dataclass(slots=True)
class VerseState:
    """Mutable in-progress verse.

    ``prefix`` only receives placeholders from chapter-label notes; it is
    rendered before ``text`` in the final verse.
    """

    number: int
    text: str = ""
    prefix: str = ""
    titles: list[Title] = field(default_factory=list)
    references: list[Reference] = field(default_factory=list)
    slug_count: int = 0

    def has_content(self) -> bool:
        return self.text != "" or self.prefix != ""

    def full_text(self) -> str:
        return self.prefix + self.text

    def next_slug(self) -> str:
        self.slug_count += 1
        return str(self.slug_count)

    def add_reference(self, text: str) -> str:
        """Allocate the next slug, record the reference and return the slug."""
        slug = self.next_slug()
        self.references.append(Reference(slug=slug, text=text))
        return slug

    def add_title(self, title: Title, position: TitlePosition) -> None:
        self.titles.append(replace(title, position=position))


def _clean_verse_text(text: str) -> str:
    # Newlines survive only between content; trailing blank lines are trimmed.
    return text.strip()


class VerseAccumulator:
    """Map of verse number to in-progress ``VerseState``."""

    def __init__(self) -> None:
        self._verses: dict[int, VerseState] = {}

    def get_or_create(self, number: int) -> VerseState:
        verse = self._verses.get(number)
        if verse is None:
            verse = VerseState(number=number)
            self._verses[number] = verse
        return verse

    def exists(self, number: int) -> bool:
        return number in self._verses

    def has_content(self, number: int) -> bool:
        verse = self._verses.get(number)
        return verse is not None and verse.has_content()

    def append_text(self, number: int, text: str) -> None:
        self.get_or_create(number).text += text

    def append_prefix(self, number: int, text: str) -> None:
        self.get_or_create(number).prefix += text

    def next_slug(self, number: int) -> str:
        return self.get_or_create(number).next_slug()

    def last_number_with_content(self) -> int | None:
        numbers = [number for number, verse in self._verses.items() if verse.has_content()]
        return max(numbers) if numbers else None

    def __len__(self) -> int:
        return len(self._verses)

    def build(self) -> list[Verse]:
        return [
            Verse(
                number=number,
                text=_clean_verse_text(verse.full_text()),
                titles=tuple(verse.titles),
                references=tuple(verse.references),
            )
            for number, verse in sorted(self._verses.items())
        ]
