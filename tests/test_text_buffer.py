from conftest import FakeText

from text_buffer import TkTextBuffer
from trigger_resolver import CaretContext


def test_caret_context_is_one_based_and_stops_at_line_start():
    widget = FakeText("first line\nSELECT lk", caret=None)

    assert TkTextBuffer(widget).caret_context() == CaretContext("SELECT lk", 2, 10)


def test_caret_context_mid_line():
    widget = FakeText("abc def", caret=3)

    assert TkTextBuffer(widget).caret_context() == CaretContext("abc", 1, 4)


def test_delete_then_insert_at_caret():
    widget = FakeText("x lkz tail", caret=5)
    buf = TkTextBuffer(widget)

    buf.delete_before_caret(3)
    buf.insert_at_caret("lukiller:")

    assert widget.content == "x lukiller: tail"
    assert widget.caret == len("x lukiller:")


def test_delete_zero_is_a_no_op():
    widget = FakeText("abc")

    TkTextBuffer(widget).delete_before_caret(0)

    assert widget.content == "abc"
