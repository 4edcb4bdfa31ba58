"""
trigger_resolver.py

Finds the macro trigger sitting immediately before the caret and swaps it
for its replacement.

The resolver never touches a widget directly. It reads the caret through a
``TextSource`` and edits through a ``TextMutator``; ``text_buffer.TkTextBuffer``
provides both for a Tk ``Text`` widget, tests provide fakes.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable, NamedTuple, Optional, Protocol

from macro_table import MacroTable

log = logging.getLogger("macross.resolver")

DEFAULT_TRIGGER_KEYS = (" ", "\t")

SHORTEST = "shortest"
LONGEST = "longest"
MATCH_POLICIES = (SHORTEST, LONGEST)


class CaretContext(NamedTuple):
    """Current line up to the caret. *line* and *column* are 1-based."""

    line_prefix: str
    line: int
    column: int


class Match(NamedTuple):
    trigger: str  # text as it appears in the document
    replacement: str
    length: int


class TextSource(Protocol):
    def caret_context(self) -> CaretContext:
        ...


class TextMutator(Protocol):
    def delete_before_caret(self, count: int) -> None:
        ...

    def insert_at_caret(self, text: str) -> None:
        ...


class TriggerResolver:
    """Per-keystroke macro expansion over a :class:`MacroTable`.

    With the ``"shortest"`` policy the scan grows the window one character
    at a time leftwards from the caret and takes the first hit, so a
    one-character trigger wins over a longer trigger ending in the same
    character. ``"longest"`` tries the widest window first.
    """

    def __init__(
        self,
        table: MacroTable,
        trigger_keys: Iterable[str] = DEFAULT_TRIGGER_KEYS,
        policy: str = SHORTEST,
        on_error: Optional[Callable[[str], None]] = None,
    ):
        if policy not in MATCH_POLICIES:
            raise ValueError(
                f"unknown match policy {policy!r}; expected one of {', '.join(MATCH_POLICIES)}"
            )
        self.table = table
        self.trigger_keys = frozenset(trigger_keys)
        self.policy = policy
        self.on_error = on_error
        self.expansions = 0
        self.failures = 0

    def is_trigger_key(self, key: str) -> bool:
        return key in self.trigger_keys

    def _window_lengths(self, available: int) -> range:
        limit = min(available, self.table.max_trigger_length)
        if self.policy == LONGEST:
            return range(limit, 0, -1)
        return range(1, limit + 1)

    def resolve(self, key: str, context: CaretContext) -> Optional[Match]:
        """Return the match for *key* pressed at *context*, or None.

        Only the current line's prefix is scanned, so a match never spans
        a line break and stops at the start of the buffer.
        """
        if not self.is_trigger_key(key):
            return None
        prefix = context.line_prefix
        for length in self._window_lengths(len(prefix)):
            candidate = prefix[-length:]
            replacement = self.table.lookup(candidate)
            if replacement is not None:
                return Match(candidate, replacement, length)
        return None

    def handle_key(self, key: str, source: TextSource, mutator: TextMutator) -> bool:
        """Expand the trigger before the caret, if any.

        Returns True when the keystroke must be suppressed. Errors from the
        text source or mutator are reported and the key is let through; a
        delete that already happened is not rolled back.
        """
        if not self.is_trigger_key(key):
            return False
        try:
            context = source.caret_context()
            match = self.resolve(key, context)
            if match is None:
                return False
            mutator.delete_before_caret(match.length)
            mutator.insert_at_caret(match.replacement)
        except Exception as exc:
            self.failures += 1
            log.warning("Macro expansion failed: %s", exc, exc_info=True)
            if self.on_error is not None:
                self.on_error(f"Macross: expansion failed ({exc})")
            return False
        self.expansions += 1
        log.debug(
            "Expanded %r at %d:%d into %r",
            match.trigger, context.line, context.column, match.replacement,
        )
        return True
