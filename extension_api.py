"""
extension_api.py

Defines the base class for all Macross editor extensions.
Every extension .py file placed in the extensions/ directory must define
a class that inherits from BaseExtension.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

if TYPE_CHECKING:
    import tkinter as tk

log = logging.getLogger("macross.extensions")

# Settings are stored per-extension under extensions/settings/
SETTINGS_DIR = Path(__file__).parent / "extensions" / "settings"


class BaseExtension:
    """Abstract base class for editor extensions.

    Subclasses MUST set the class-level metadata attributes and override
    ``activate`` / ``deactivate`` at minimum.
    """

    # ── Metadata (override in subclass) ──────────────────────────────
    name: str = "Unnamed Extension"
    version: str = "0.1.0"
    description: str = ""
    author: str = "Unknown"
    icon: str = "🧩"
    category: str = "Other"  # Editing | Tools | Other
    tags: List[str] = []

    def __init__(self) -> None:
        self._keybindings: Dict[str, str] = {}  # key_sequence -> binding_id
        self._settings_cache: Dict[str, Any] = {}

    # ── Lifecycle ────────────────────────────────────────────────────
    def activate(self, editor: Any) -> None:
        """Called when the extension is activated.

        *editor* is the ``MacrossEditorApp`` instance; extensions use it to
        reach the text widget, menus and status bar.
        """

    def deactivate(self, editor: Any) -> None:
        """Called when the extension is deactivated.

        Keybindings registered via ``register_keybinding`` are removed by the
        manager before this runs.
        """

    def on_shutdown(self, editor: Any) -> None:
        """Called once when the application is closing (after ``deactivate``)."""

    # ── Event hooks (optional overrides) ─────────────────────────────
    def on_key(self, editor: Any, event: "tk.Event") -> Optional[str]:
        """Called on every key press in the text widget, before Tk inserts it.

        Return ``"break"`` to suppress the keystroke, or ``None`` to let it
        through.
        """
        return None

    def contribute_menu(self, editor: Any, menubar: "tk.Menu") -> None:
        """Called once during activation so the extension can add menus."""

    # ── Settings ─────────────────────────────────────────────────────
    def default_settings(self) -> Dict[str, Any]:
        """Override to declare configurable settings with defaults."""
        return {}

    def get_setting(self, key: str) -> Any:
        """Read a persisted setting value (falls back to default)."""
        if not self._settings_cache:
            self._settings_cache = self._load_settings()
        defaults = self.default_settings()
        return self._settings_cache.get(key, defaults.get(key))

    def _settings_path(self) -> Path:
        return SETTINGS_DIR / f"{self.__class__.__name__.lower()}.json"

    def _load_settings(self) -> Dict[str, Any]:
        p = self._settings_path()
        if p.exists():
            try:
                return json.loads(p.read_text(encoding="utf-8"))
            except (OSError, ValueError) as exc:
                log.warning("Ignoring unreadable settings %s: %s", p, exc)
        return dict(self.default_settings())

    # ── Keybinding helpers ───────────────────────────────────────────
    def register_keybinding(
        self, editor: Any, key_sequence: str, callback: Callable[[Any], Optional[str]]
    ) -> None:
        """Bind *key_sequence* (e.g. ``"<Control-Alt-m>"``) to *callback*.

        The binding is automatically removed on deactivation.
        """
        bid = editor.text.bind(key_sequence, callback, add=True)
        self._keybindings[key_sequence] = bid

    def unregister_keybinding(self, editor: Any, key_sequence: str) -> None:
        """Remove a previously registered keybinding."""
        bid = self._keybindings.pop(key_sequence, None)
        if bid:
            try:
                editor.text.unbind(key_sequence, bid)
            except Exception:
                log.debug("Keybinding %s already gone", key_sequence)

    def unregister_all_keybindings(self, editor: Any) -> None:
        """Remove all keybindings registered by this extension."""
        for key_seq in list(self._keybindings):
            self.unregister_keybinding(editor, key_seq)

    # ── Notification helpers ─────────────────────────────────────────
    @staticmethod
    def show_notification(
        editor: Any, message: str, duration_ms: int = 3000
    ) -> None:
        """Show a transient notification toast at the bottom-right."""
        if hasattr(editor, "_show_toast"):
            editor._show_toast(message, duration_ms)

    @staticmethod
    def set_status(editor: Any, msg: str) -> None:
        """Update the status bar."""
        editor.status_var.set(msg)

    @staticmethod
    def clear_status(editor: Any) -> None:
        editor.status_var.set("")
