"""
text_buffer.py

Adapter exposing a Tk ``Text`` widget as the ``TextSource`` / ``TextMutator``
pair the trigger resolver works against.
"""
from __future__ import annotations

from typing import Any

from trigger_resolver import CaretContext


class TkTextBuffer:
    """Caret reads and edits on the ``insert`` mark of a Text widget."""

    def __init__(self, widget: Any):
        self.widget = widget

    def caret_context(self) -> CaretContext:
        line, col = map(int, self.widget.index("insert").split("."))
        prefix = self.widget.get("insert linestart", "insert")
        # Tk columns count from 0
        return CaretContext(prefix, line, col + 1)

    def delete_before_caret(self, count: int) -> None:
        if count <= 0:
            return
        self.widget.delete(f"insert - {count}c", "insert")

    def insert_at_caret(self, text: str) -> None:
        self.widget.insert("insert", text)
