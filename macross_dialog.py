"""
macross_dialog.py

Read-only window opened from Tools ▸ Macross…: lists the loaded macros,
with a filter box, and the result of the last macro file load.
"""
from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

if TYPE_CHECKING:
    from macro_table import LoadReport
    from trigger_resolver import TriggerResolver


# ── Colour palette (Catppuccin Mocha-inspired) ───────────────────────
BG        = "#1e1e2e"
FG        = "#cdd6f4"
FG_DIM    = "#7f849c"
RED       = "#f38ba8"
BORDER    = "#45475a"
SEARCH_BG = "#313244"


def _display(text: str) -> str:
    return text.replace("\t", "⇥").replace("\n", "⏎")


class MacrossDialog(tk.Toplevel):
    """Macro list window. Never modifies the table."""

    def __init__(
        self,
        master: tk.Misc,
        report: "LoadReport",
        resolver: Optional["TriggerResolver"] = None,
    ):
        super().__init__(master)
        self.report = report
        self.resolver = resolver
        self.title("⚡  Macross")
        self.geometry("560x420")
        self.minsize(420, 300)
        self.configure(bg=BG)

        self._search_var = tk.StringVar()
        self._search_var.trace_add("write", lambda *_: self._refresh())

        self._build_ui()
        self._refresh()
        self.bind("<Escape>", lambda e: self.destroy())

    def _build_ui(self):
        header = tk.Frame(self, bg=BG)
        header.pack(fill="x", padx=16, pady=(14, 4))
        tk.Label(header, text="Macros", bg=BG, fg=FG,
                 font=("Segoe UI", 16, "bold")).pack(side="left")

        search_frame = tk.Frame(self, bg=SEARCH_BG,
                                highlightbackground=BORDER, highlightthickness=1)
        search_frame.pack(fill="x", padx=16, pady=(4, 6))
        tk.Label(search_frame, text="🔍", bg=SEARCH_BG, fg=FG_DIM,
                 font=("Segoe UI Emoji", 12)).pack(side="left", padx=(8, 2))
        entry = tk.Entry(
            search_frame, textvariable=self._search_var,
            bg=SEARCH_BG, fg=FG, insertbackground=FG,
            font=("Consolas", 11), bd=0, highlightthickness=0,
        )
        entry.pack(side="left", fill="x", expand=True, padx=4, pady=6)
        entry.focus_set()

        body = tk.Frame(self, bg=BG)
        body.pack(fill="both", expand=True, padx=16, pady=4)
        self._tree = ttk.Treeview(body, columns=("trigger", "replacement"),
                                  show="headings", selectmode="browse")
        self._tree.heading("trigger", text="Trigger")
        self._tree.heading("replacement", text="Replacement")
        self._tree.column("trigger", width=140, stretch=False)
        self._tree.column("replacement", width=360)
        scroll = ttk.Scrollbar(body, orient="vertical", command=self._tree.yview)
        self._tree.configure(yscrollcommand=scroll.set)
        self._tree.pack(side="left", fill="both", expand=True)
        scroll.pack(side="right", fill="y")

        source = str(self.report.path) if self.report.path else "(built-in only)"
        tk.Label(self, text=f"Source: {source}", bg=BG, fg=FG_DIM,
                 font=("Segoe UI", 9), anchor="w").pack(fill="x", padx=16)
        tk.Label(self, text=self.report.summary(), bg=BG,
                 fg=RED if not self.report.ok else FG_DIM, wraplength=520,
                 justify="left", font=("Segoe UI", 9), anchor="w").pack(fill="x", padx=16)

        self._status = tk.Label(self, text="", bg=BG, fg=FG_DIM,
                                font=("Segoe UI", 9), anchor="w")
        self._status.pack(fill="x", padx=16, pady=(0, 8))

        tk.Button(self, text="Close", command=self.destroy).pack(pady=(0, 12))

    def _rows(self) -> Iterable[Tuple[str, str]]:
        return self.report.table.search(self._search_var.get())

    def _refresh(self):
        self._tree.delete(*self._tree.get_children())
        count = 0
        for trigger, replacement in self._rows():
            self._tree.insert("", "end", values=(_display(trigger), _display(replacement)))
            count += 1
        text = f"Showing {count} of {len(self.report.table)} macro{'s' if len(self.report.table) != 1 else ''}"
        if self.resolver is not None:
            text += (f"  |  keys: {', '.join(repr(k) for k in sorted(self.resolver.trigger_keys))}"
                     f"  |  policy: {self.resolver.policy}"
                     f"  |  expanded {self.resolver.expansions}, failed {self.resolver.failures}")
        self._status.config(text=text)
