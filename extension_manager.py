"""
extension_manager.py

Handles discovery, loading, enabling/disabling and event dispatch for the
.py extension files in the ``extensions/`` directory.
"""
from __future__ import annotations

import importlib.util
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Any, Dict, Optional

from extension_api import BaseExtension

log = logging.getLogger("macross.extensions")

# ── Paths ────────────────────────────────────────────────────────────
EXTENSIONS_DIR = Path(__file__).parent / "extensions"
STATE_FILENAME = "extensions.json"


class ExtensionInfo:
    """Lightweight record that tracks a loaded extension module."""

    def __init__(
        self,
        module_name: str,
        file_path: Path,
        module: Any = None,
        instance: Optional[BaseExtension] = None,
        enabled: bool = True,
        error: Optional[str] = None,
    ):
        self.module_name = module_name
        self.file_path = file_path
        self.module = module
        self.instance = instance
        self.enabled = enabled
        self.error = error  # traceback string if load/activate failed

    # handy metadata proxies
    @property
    def name(self) -> str:
        return getattr(self.instance, "name", self.module_name) if self.instance else self.module_name

    @property
    def version(self) -> str:
        return getattr(self.instance, "version", "?") if self.instance else "?"

    @property
    def description(self) -> str:
        return getattr(self.instance, "description", "") if self.instance else ""

    @property
    def icon(self) -> str:
        return getattr(self.instance, "icon", "🧩") if self.instance else "🧩"


class ExtensionManager:
    """Central controller for the extension subsystem."""

    def __init__(self, editor: Any, extensions_dir: Optional[Path] = None):
        self.editor = editor
        self.extensions_dir = Path(extensions_dir or EXTENSIONS_DIR)
        self.state_file = self.extensions_dir / STATE_FILENAME
        self.extensions: Dict[str, ExtensionInfo] = {}
        self._shutting_down = False
        log.info("Initialising extension subsystem from %s", self.extensions_dir)
        self._load_state()
        self.discover_and_load()
        loaded = [n for n, i in self.extensions.items() if i.enabled]
        log.info("Extension subsystem ready — %d extension(s) active: %s",
                 len(loaded), ", ".join(loaded) or "(none)")

    # ── State helpers ────────────────────────────────────────────────
    def _load_state(self):
        """Load persisted enabled/disabled flags."""
        self._state: Dict[str, bool] = {}
        if self.state_file.exists():
            try:
                with open(self.state_file, "r", encoding="utf-8") as f:
                    self._state = json.load(f)
            except (OSError, ValueError) as exc:
                log.warning("Ignoring unreadable %s: %s", self.state_file, exc)
                self._state = {}

    def _save_state(self):
        try:
            with open(self.state_file, "w", encoding="utf-8") as f:
                json.dump(
                    {name: info.enabled for name, info in self.extensions.items()},
                    f,
                    indent=2,
                )
        except OSError as exc:
            log.warning("Could not save extension state: %s", exc)

    # ── Discovery & loading ──────────────────────────────────────────
    def discover_and_load(self):
        """Scan the extensions directory for .py files, load & activate enabled ones."""
        for py_file in sorted(self.extensions_dir.glob("*.py")):
            mod_name = py_file.stem
            if mod_name.startswith("_"):
                continue
            if mod_name not in self.extensions:
                log.debug("Discovered extension file: %s", py_file.name)
                self._load_extension(py_file)

    def _load_extension(self, path: Path) -> Optional[ExtensionInfo]:
        mod_name = path.stem
        try:
            spec = importlib.util.spec_from_file_location(
                f"ext_{mod_name}", str(path)
            )
            if spec is None or spec.loader is None:
                return None
            module = importlib.util.module_from_spec(spec)
            sys.modules[spec.name] = module
            spec.loader.exec_module(module)

            ext_cls = self._find_extension_class(module)
            if ext_cls is None:
                log.debug("%s defines no extension class", path.name)
                return None

            instance = ext_cls()
            enabled = self._state.get(mod_name, True)
            info = ExtensionInfo(mod_name, path, module, instance, enabled)
            self.extensions[mod_name] = info

            if enabled:
                self._activate(info)
            return info
        except Exception:
            info = ExtensionInfo(mod_name, path, error=traceback.format_exc())
            info.enabled = False
            self.extensions[mod_name] = info
            log.error("Failed to load %s:\n%s", mod_name, info.error)
            return info

    @staticmethod
    def _find_extension_class(module: Any):
        """Return the first BaseExtension subclass defined in *module*."""
        for attr_name in dir(module):
            obj = getattr(module, attr_name)
            if (
                isinstance(obj, type)
                and issubclass(obj, BaseExtension)
                and obj is not BaseExtension
                and obj.__module__ == module.__name__
            ):
                return obj
        return None

    # ── Activation / deactivation ────────────────────────────────────
    def _get_menubar(self):
        """Resolve the actual tk.Menu widget from the editor root."""
        root = getattr(self.editor, "root", None)
        if root is None:
            return None
        menu_path = root.cget("menu")
        if menu_path:
            return root.nametowidget(menu_path)
        return None

    def _activate(self, info: ExtensionInfo):
        try:
            if info.instance:
                log.info("Activating extension: %s", info.name)
                info.instance.activate(self.editor)
                menubar = self._get_menubar()
                if menubar is not None:
                    info.instance.contribute_menu(self.editor, menubar)
                info.error = None
        except Exception:
            info.error = traceback.format_exc()
            log.error("Activate failed for %s:\n%s", info.module_name, info.error)

    def _deactivate(self, info: ExtensionInfo):
        try:
            if info.instance:
                log.info("Deactivating extension: %s", info.name)
                info.instance.unregister_all_keybindings(self.editor)
                info.instance.deactivate(self.editor)
        except Exception:
            log.exception("Deactivate failed for %s", info.module_name)

    def enable(self, mod_name: str):
        info = self.extensions.get(mod_name)
        if info and info.instance and not info.enabled:
            info.enabled = True
            self._activate(info)
            self._save_state()

    def disable(self, mod_name: str):
        info = self.extensions.get(mod_name)
        if info and info.enabled:
            self._deactivate(info)
            info.enabled = False
            self._save_state()

    # ── Shutdown ─────────────────────────────────────────────────────
    def shutdown_all(self):
        """Deactivate every extension, call on_shutdown, and save state.

        Safe to call multiple times.
        """
        if self._shutting_down:
            return
        self._shutting_down = True
        log.info("Shutting down %d extension(s)…", len(self.extensions))
        for mod_name, info in list(self.extensions.items()):
            if info.enabled and info.instance:
                self._deactivate(info)
            if info.instance:
                try:
                    info.instance.on_shutdown(self.editor)
                except Exception:
                    log.exception("on_shutdown failed for %s", mod_name)
        self._save_state()
        log.info("All extensions shut down.")

    # ── Event dispatch ───────────────────────────────────────────────
    def dispatch_key(self, event) -> Optional[str]:
        for info in self.extensions.values():
            if info.enabled and info.instance:
                try:
                    if info.instance.on_key(self.editor, event) == "break":
                        return "break"
                except Exception:
                    log.exception("on_key failed for %s", info.module_name)
        return None

