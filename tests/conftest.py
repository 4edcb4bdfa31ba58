import re
import types

import pytest

import extension_api


class FakeText:
    """Just enough of a Tk Text widget for the caret-relative calls we make."""

    def __init__(self, content="", caret=None):
        self.content = content
        self.caret = len(content) if caret is None else caret
        self.bindings = {}
        self._next_id = 0

    def _before(self):
        return self.content[: self.caret]

    def index(self, idx):
        assert idx == "insert"
        before = self._before()
        line = before.count("\n") + 1
        col = len(before) - (before.rfind("\n") + 1)
        return f"{line}.{col}"

    def get(self, start, end):
        assert (start, end) == ("insert linestart", "insert")
        before = self._before()
        return before[before.rfind("\n") + 1:]

    def delete(self, start, end):
        m = re.fullmatch(r"insert - (\d+)c", start)
        assert m and end == "insert"
        n = min(int(m.group(1)), self.caret)
        self.content = self.content[: self.caret - n] + self.content[self.caret:]
        self.caret -= n

    def insert(self, idx, text):
        assert idx == "insert"
        self.content = self.content[: self.caret] + text + self.content[self.caret:]
        self.caret += len(text)

    def bind(self, sequence, callback, add=None):
        self._next_id += 1
        bid = f"bind{self._next_id}"
        self.bindings[sequence] = (bid, callback)
        return bid

    def unbind(self, sequence, funcid=None):
        self.bindings.pop(sequence, None)


class FakeVar:
    def __init__(self, value=""):
        self.value = value

    def set(self, value):
        self.value = value

    def get(self):
        return self.value


class FakeEditor:
    def __init__(self, content=""):
        self.text = FakeText(content)
        self.status_var = FakeVar("Ready")
        self.toasts = []

    def _show_toast(self, message, duration_ms=3000):
        self.toasts.append(message)


def key(char):
    return types.SimpleNamespace(char=char)


@pytest.fixture
def settings_dir(tmp_path, monkeypatch):
    path = tmp_path / "settings"
    monkeypatch.setattr(extension_api, "SETTINGS_DIR", path)
    return path


@pytest.fixture
def editor():
    return FakeEditor()
