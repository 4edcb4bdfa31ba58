from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from conftest import FakeEditor, key
from extension_manager import ExtensionManager

ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def ext_dir(tmp_path, settings_dir):
    path = tmp_path / "extensions"
    path.mkdir()
    shutil.copy(ROOT / "extensions" / "macross.py", path / "macross.py")
    return path


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    path = tmp_path / "work"
    path.mkdir()
    monkeypatch.chdir(path)
    return path


def _type(manager, editor, text, trigger=" "):
    """Append *text* at the caret, then press *trigger* the way Tk would."""
    editor.text.insert("insert", text)
    if manager.dispatch_key(key(trigger)) != "break":
        editor.text.insert("insert", trigger)


def test_loads_macro_file_from_working_directory(ext_dir, workdir):
    (workdir / "Macross.txt").write_text("sel,SELECT * FROM \n", encoding="utf-8")
    editor = FakeEditor()

    manager = ExtensionManager(editor, ext_dir)

    info = manager.extensions["macross"]
    assert info.enabled and info.error is None
    assert info.instance.table.lookup("SEL") == "SELECT * FROM "
    assert editor.status_var.get() == "Macross loaded successfully! 2 macro(s)"
    assert editor.toasts == []

    _type(manager, editor, "sel")
    _type(manager, editor, "Users", trigger="\t")

    assert editor.text.content == "SELECT * FROM Users\t"


def test_missing_macro_file_falls_back_to_builtins(ext_dir, workdir):
    editor = FakeEditor()
    manager = ExtensionManager(editor, ext_dir)

    assert len(editor.toasts) == 1
    assert "could not load macros" in editor.toasts[0]

    _type(manager, editor, "-- lkz")

    assert editor.text.content == "-- lukiller:"


def test_settings_choose_file_keys_and_policy(ext_dir, workdir, settings_dir, tmp_path):
    macros = tmp_path / "team.txt"
    macros.write_text("lkz,LONG\nz,SHORT\n", encoding="utf-8")
    settings_dir.mkdir()
    (settings_dir / "macrossextension.json").write_text(json.dumps({
        "macros_file": str(macros),
        "trigger_keys": ["\t"],
        "match_policy": "longest",
    }), encoding="utf-8")
    editor = FakeEditor()
    manager = ExtensionManager(editor, ext_dir)

    _type(manager, editor, "lkz", trigger=" ")
    assert editor.text.content == "lkz "

    _type(manager, editor, "lkz", trigger="\t")
    assert editor.text.content == "lkz LONG"


def test_shortest_policy_by_default(ext_dir, workdir):
    (workdir / "Macross.txt").write_text("lkz,LONG\nz,SHORT\n", encoding="utf-8")
    editor = FakeEditor()
    manager = ExtensionManager(editor, ext_dir)

    _type(manager, editor, "lkz")

    assert editor.text.content == "lkSHORT"


def test_expansion_stays_on_current_line(ext_dir, workdir):
    editor = FakeEditor()
    manager = ExtensionManager(editor, ext_dir)

    _type(manager, editor, "l\nkz")

    assert editor.text.content == "l\nkz "


def test_failed_edit_is_notified_and_key_passes(ext_dir, workdir, monkeypatch):
    editor = FakeEditor()
    manager = ExtensionManager(editor, ext_dir)
    editor.toasts.clear()

    def broken_insert(idx, text):
        raise RuntimeError("stale caret")

    editor.text.insert("insert", "lkz")
    monkeypatch.setattr(editor.text, "insert", broken_insert)

    assert manager.dispatch_key(key(" ")) is None
    assert editor.toasts == ["Macross: expansion failed (stale caret)"]
    assert manager.extensions["macross"].instance.resolver.failures == 1


def test_dialog_keybinding_is_registered_and_removed(ext_dir, workdir):
    editor = FakeEditor()
    manager = ExtensionManager(editor, ext_dir)

    assert "<Control-Alt-m>" in editor.text.bindings

    manager.disable("macross")

    assert "<Control-Alt-m>" not in editor.text.bindings
    assert manager.extensions["macross"].instance.resolver is None
    assert editor.status_var.get() == ""
    assert json.loads((ext_dir / "extensions.json").read_text()) == {"macross": False}


def test_disabled_extension_does_not_expand(ext_dir, workdir):
    (ext_dir / "extensions.json").write_text('{"macross": false}', encoding="utf-8")
    editor = FakeEditor()
    manager = ExtensionManager(editor, ext_dir)

    _type(manager, editor, "lkz")

    assert editor.text.content == "lkz "

    manager.enable("macross")
    _type(manager, editor, "lkz")

    assert editor.text.content == "lkz lukiller:"
