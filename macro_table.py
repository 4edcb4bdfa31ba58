"""
macro_table.py

Trigger -> replacement table used by the Macross extension, and the loader
that builds it from a flat ``trigger,replacement`` text file.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

log = logging.getLogger("macross.macros")

# ── Defaults ─────────────────────────────────────────────────────────
MACROS_FILENAME = "Macross.txt"
DELIMITER = ","

DEFAULT_MACROS: Dict[str, str] = {
    "LKZ": "lukiller:",
}


class MacroTable:
    """Case-insensitive, read-only mapping of trigger to replacement.

    Instances are built by :func:`load_macros` (or directly from a mapping)
    and are not changed afterwards.
    """

    def __init__(self, entries: Optional[Mapping[str, str]] = None):
        # lowercased trigger -> (trigger as written, replacement)
        self._entries: Dict[str, Tuple[str, str]] = {}
        self._max_len = 0
        if entries:
            for trigger, replacement in entries.items():
                self._put(trigger, replacement)

    def _put(self, trigger: str, replacement: str) -> bool:
        """Insert or overwrite *trigger*; return True when it overwrote."""
        if not trigger:
            raise ValueError("macro trigger must not be empty")
        key = trigger.lower()
        existed = key in self._entries
        self._entries[key] = (trigger, replacement)
        self._max_len = max(self._max_len, len(key))
        return existed

    def lookup(self, trigger: str) -> Optional[str]:
        """Return the replacement for *trigger* (any letter case) or None."""
        if not trigger:
            return None
        entry = self._entries.get(trigger.lower())
        return entry[1] if entry else None

    def __contains__(self, trigger: object) -> bool:
        return isinstance(trigger, str) and self.lookup(trigger) is not None

    def __getitem__(self, trigger: str) -> str:
        value = self.lookup(trigger)
        if value is None:
            raise KeyError(trigger)
        return value

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(sorted(self._entries.values(), key=lambda e: e[0].lower()))

    def search(self, query: str = "") -> List[Tuple[str, str]]:
        """Macros whose trigger or replacement contains *query* (any case)."""
        q = query.strip().lower()
        return [
            (trigger, replacement)
            for trigger, replacement in self
            if not q or q in trigger.lower() or q in replacement.lower()
        ]

    @property
    def max_trigger_length(self) -> int:
        return self._max_len

    def __repr__(self) -> str:
        return f"MacroTable({len(self)} macros)"


class LoadReport:
    """Outcome of a macro file load."""

    def __init__(
        self,
        table: MacroTable,
        path: Optional[Path] = None,
        loaded: int = 0,
        skipped: int = 0,
        blank: int = 0,
        overwritten: int = 0,
        error: Optional[str] = None,
    ):
        self.table = table
        self.path = path
        self.loaded = loaded
        self.skipped = skipped  # malformed lines
        self.blank = blank
        self.overwritten = overwritten
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    def summary(self) -> str:
        """One-line text suitable for the status bar."""
        if self.error:
            return f"Macross: could not load macros ({self.error}); {len(self.table)} built-in macro(s) active"
        msg = f"Macross loaded successfully! {len(self.table)} macro(s)"
        if self.skipped:
            msg += f", {self.skipped} malformed line(s) skipped"
        return msg


def parse_line(line: str) -> Optional[Tuple[str, str]]:
    """Split one file line into ``(trigger, replacement)``.

    Returns None unless the line has exactly two fields and a non-empty
    trigger. No quoting or escaping is supported.
    """
    fields = line.rstrip("\r\n").split(DELIMITER)
    if len(fields) != 2 or not fields[0]:
        return None
    return fields[0], fields[1]


def load_macros(
    path: Union[str, os.PathLike, None] = MACROS_FILENAME,
    seed: Optional[Mapping[str, str]] = None,
) -> LoadReport:
    """Build a :class:`MacroTable` from *seed* plus the entries in *path*.

    *seed* defaults to :data:`DEFAULT_MACROS`. File entries overwrite seed
    entries and earlier file entries with the same trigger. If the file
    cannot be read the report carries the error and the table holds the
    seed only.
    """
    table = MacroTable(DEFAULT_MACROS if seed is None else seed)
    if path is None:
        return LoadReport(table)

    p = Path(os.path.expanduser(os.fspath(path)))
    report = LoadReport(table, path=p)
    entries = []
    try:
        with open(p, "r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, 1):
                parsed = parse_line(line)
                if parsed is not None:
                    entries.append(parsed)
                elif line.strip():
                    report.skipped += 1
                    log.warning("%s:%d: skipping malformed macro line", p, lineno)
                else:
                    report.blank += 1
    except (OSError, UnicodeDecodeError) as exc:
        report.error = str(exc)
        report.skipped = report.blank = 0
        log.warning("Could not load macros from %s: %s", p, exc)
        return report

    for trigger, replacement in entries:
        if table._put(trigger, replacement):
            report.overwritten += 1
        report.loaded += 1

    log.info(
        "Loaded %d macro line(s) from %s (%d skipped, %d overwritten); %d macro(s) active",
        report.loaded, p, report.skipped, report.overwritten, len(table),
    )
    return report
