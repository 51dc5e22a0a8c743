"""Warning collection for a single parse.

Warnings describe content that was dropped or structurally irregular. They
are collected while a unit is parsed and flushed once, at the end, to a
stdlib logger; they never interrupt parsing.
"""

from __future__ import annotations

import logging

from bibleparse.types import ParseWarning


LOGGER_NAME = "bibleparse"
SNIPPET_MAX_LENGTH = 50

log = logging.getLogger(LOGGER_NAME)


def truncate_snippet(text: str, max_length: int = SNIPPET_MAX_LENGTH) -> str:
    """Trim and shorten text for a warning context."""
    text = text.strip()
    if len(text) <= max_length:
        return text
    return text[:max_length] + "…"


def _format_context(context: dict[str, object]) -> str:
    return " ".join(f"{key}={value!r}" for key, value in sorted(context.items()))


class WarningSink:
    """Accumulates ``ParseWarning`` records until flushed."""

    def __init__(self) -> None:
        self._records: list[ParseWarning] = []

    def add(self, message: str, **context: object) -> None:
        self._records.append(ParseWarning(message=message, context=dict(context)))

    @property
    def records(self) -> tuple[ParseWarning, ...]:
        return tuple(self._records)

    def has_warnings(self) -> bool:
        return bool(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def flush(self, logger: logging.Logger | None = None) -> list[ParseWarning]:
        """Log every pending warning once and empty the sink."""
        target = logger or log
        flushed = self._records
        self._records = []
        for record in flushed:
            if record.context:
                target.warning("%s %s", record.message, _format_context(record.context))
            else:
                target.warning("%s", record.message)
        return flushed
