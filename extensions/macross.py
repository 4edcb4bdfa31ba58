"""
Macross — Extension for the Macross SQL Editor

Type a macro trigger and press Space or Tab: the trigger right before the
caret is replaced by its expansion and the key itself is swallowed.
Macros come from a ``trigger,replacement`` file (Macross.txt by default)
on top of the built-in ones. Tools ▸ Macross… lists what is loaded.
"""
import logging

from extension_api import BaseExtension
from macro_table import DEFAULT_MACROS, MACROS_FILENAME, load_macros
from text_buffer import TkTextBuffer
from trigger_resolver import DEFAULT_TRIGGER_KEYS, SHORTEST, TriggerResolver

log = logging.getLogger("macross.extensions.macross")

MENU_LABEL = "Macross…"
DIALOG_KEY = "<Control-Alt-m>"


class MacrossExtension(BaseExtension):
    name = "Macross"
    version = "1.0.0"
    description = "Expands typed macro triggers into longer text on Space or Tab."
    author = "LKZ"
    icon = "⚡"
    category = "Editing"
    tags = ["macros", "expansion", "productivity"]

    def __init__(self):
        super().__init__()
        self.report = None
        self.resolver = None
        self._buffer = None
        self._menu = None
        self._dialog = None

    def default_settings(self):
        return {
            "macros_file": MACROS_FILENAME,
            "trigger_keys": list(DEFAULT_TRIGGER_KEYS),
            "match_policy": SHORTEST,
        }

    @property
    def table(self):
        return self.report.table if self.report else None

    def activate(self, editor):
        self.report = load_macros(self.get_setting("macros_file"), seed=DEFAULT_MACROS)
        self.resolver = TriggerResolver(
            self.report.table,
            trigger_keys=self.get_setting("trigger_keys") or DEFAULT_TRIGGER_KEYS,
            policy=self.get_setting("match_policy") or SHORTEST,
            on_error=lambda msg: self.show_notification(editor, msg),
        )
        self._buffer = TkTextBuffer(editor.text)
        self.register_keybinding(editor, DIALOG_KEY, lambda e: self.open_dialog(editor))

        self.set_status(editor, self.report.summary())
        if not self.report.ok:
            self.show_notification(editor, self.report.summary(), duration_ms=6000)

    def deactivate(self, editor):
        if self._menu is not None:
            try:
                self._menu.delete(MENU_LABEL)
            except Exception:
                log.debug("Menu entry already removed")
            self._menu = None
        if self._dialog is not None:
            self._dialog.destroy()
            self._dialog = None
        if self.resolver is not None:
            log.info("Session totals: %d expansion(s), %d failure(s)",
                     self.resolver.expansions, self.resolver.failures)
        self.resolver = None
        self._buffer = None
        self.clear_status(editor)

    def on_key(self, editor, event):
        if self.resolver is None:
            return None
        if self.resolver.handle_key(event.char, self._buffer, self._buffer):
            return "break"
        return None

    def contribute_menu(self, editor, menubar):
        menu = getattr(editor, "tools_menu", None)
        if menu is None:
            import tkinter as tk
            menu = tk.Menu(menubar, tearoff=False)
            menubar.add_cascade(label="Tools", menu=menu)
        menu.add_command(label=MENU_LABEL, accelerator="Ctrl+Alt+M",
                         command=lambda: self.open_dialog(editor))
        self._menu = menu

    def open_dialog(self, editor):
        from macross_dialog import MacrossDialog

        if self._dialog is not None and self._dialog.winfo_exists():
            self._dialog.lift()
            return "break"
        self._dialog = MacrossDialog(editor.root, self.report, self.resolver)
        return "break"
