from __future__ import annotations

import json

from conftest import FakeEditor, key
from extension_api import BaseExtension
from extension_manager import ExtensionManager

GOOD = '''
from extension_api import BaseExtension


class Shouter(BaseExtension):
    name = "Shouter"

    def __init__(self):
        super().__init__()
        self.events = []

    def activate(self, editor):
        self.events.append("activate")

    def deactivate(self, editor):
        self.events.append("deactivate")

    def on_shutdown(self, editor):
        self.events.append("shutdown")

    def on_key(self, editor, event):
        self.events.append(event.char)
        return "break" if event.char == "!" else None
'''

EXPLODING = '''
from extension_api import BaseExtension


class Exploding(BaseExtension):
    def activate(self, editor):
        raise RuntimeError("boom")

    def on_key(self, editor, event):
        raise RuntimeError("boom")
'''


def _manager(tmp_path, settings_dir, **files):
    for name, src in files.items():
        (tmp_path / f"{name}.py").write_text(src, encoding="utf-8")
    return ExtensionManager(FakeEditor(), tmp_path)


def test_discovers_and_activates(tmp_path, settings_dir):
    manager = _manager(tmp_path, settings_dir, shouter=GOOD, _private=GOOD)

    assert list(manager.extensions) == ["shouter"]
    info = manager.extensions["shouter"]
    assert info.name == "Shouter"
    assert info.instance.events == ["activate"]


def test_key_dispatch_break(tmp_path, settings_dir):
    manager = _manager(tmp_path, settings_dir, shouter=GOOD)

    assert manager.dispatch_key(key("a")) is None
    assert manager.dispatch_key(key("!")) == "break"


def test_failing_extension_does_not_break_others(tmp_path, settings_dir):
    manager = _manager(tmp_path, settings_dir, a_exploding=EXPLODING, shouter=GOOD)

    assert "boom" in manager.extensions["a_exploding"].error
    assert manager.dispatch_key(key("!")) == "break"
    assert manager.extensions["shouter"].instance.events == ["activate", "!"]


def test_syntax_error_is_recorded(tmp_path, settings_dir):
    manager = _manager(tmp_path, settings_dir, broken="def oops(:\n")

    info = manager.extensions["broken"]
    assert info.enabled is False
    assert "SyntaxError" in info.error


def test_shutdown_is_idempotent_and_saves_state(tmp_path, settings_dir):
    manager = _manager(tmp_path, settings_dir, shouter=GOOD)
    instance = manager.extensions["shouter"].instance

    manager.shutdown_all()
    manager.shutdown_all()

    assert instance.events == ["activate", "deactivate", "shutdown"]
    assert json.loads((tmp_path / "extensions.json").read_text()) == {"shouter": True}


def test_settings_read_from_json_with_defaults(tmp_path, settings_dir):
    settings_dir.mkdir()
    (settings_dir / "shouter.json").write_text(json.dumps({"colour": "blue"}), encoding="utf-8")
    manager = _manager(tmp_path, settings_dir, shouter=GOOD)
    instance = manager.extensions["shouter"].instance
    instance.default_settings = lambda: {"colour": "red", "size": 3}

    assert instance.get_setting("colour") == "blue"
    assert instance.get_setting("size") == 3
    assert instance.get_setting("missing") is None


def test_unreadable_settings_fall_back_to_defaults(tmp_path, settings_dir):
    settings_dir.mkdir()
    (settings_dir / "shouter.json").write_text("{not json", encoding="utf-8")
    manager = _manager(tmp_path, settings_dir, shouter=GOOD)
    instance = manager.extensions["shouter"].instance
    instance.default_settings = lambda: {"colour": "red"}

    assert instance.get_setting("colour") == "red"


def test_extension_contract_is_key_driven():
    for hook in ("on_file_open", "on_file_save", "set_setting"):
        assert not hasattr(BaseExtension, hook)
    for dispatch in ("dispatch_file_open", "dispatch_file_save"):
        assert not hasattr(ExtensionManager, dispatch)
