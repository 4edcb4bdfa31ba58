"""
syntax_highlighter.py

Pygments-driven syntax highlighting for the editor's Tk Text widget.
SQL by default; any Pygments lexer alias can be passed instead.
"""
import logging
from typing import Any, Dict

from pygments import lex
from pygments.lexers import SqlLexer, get_lexer_by_name
from pygments.util import ClassNotFound

log = logging.getLogger("macross.editor")

# Pygments token suffix -> tag name; more specific suffixes first
TOKEN_TAGS = (
    ("Keyword.Type", "type"),
    ("Keyword", "keyword"),
    ("Name.Builtin", "builtin"),
    ("Name.Function", "function"),
    ("Literal.String", "string"),
    ("Literal.Number", "number"),
    ("Comment", "comment"),
    ("Operator", "operator"),
    ("Punctuation", "punctuation"),
)

TAG_COLOURS: Dict[str, Dict[str, str]] = {
    "keyword": {"foreground": "blue"},
    "type": {"foreground": "#1c9d00"},
    "builtin": {"foreground": "#6b6"},
    "function": {"foreground": "#6a5acd"},
    "string": {"foreground": "#d14"},
    "number": {"foreground": "#b000b0"},
    "comment": {"foreground": "#888"},
    "operator": {"foreground": "#333"},
    "punctuation": {"foreground": "#333"},
}


def tag_for_token(ttype: Any) -> str:
    """Map a Pygments token type to one of our tag names ('' for plain text)."""
    name = str(ttype)
    for suffix, tag in TOKEN_TAGS:
        if suffix in name:
            return tag
    return ""


def get_lexer(language: str = "sql"):
    if not language or language == "sql":
        return SqlLexer()
    try:
        return get_lexer_by_name(language)
    except ClassNotFound:
        log.warning("No lexer for %r, using SQL", language)
        return SqlLexer()


def token_spans(text: str, language: str = "sql"):
    """Yield ``(tag, start, end)`` character spans for *text*."""
    pos = 0
    for ttype, value in lex(text, get_lexer(language)):
        if not value:
            continue
        start, pos = pos, pos + len(value)
        tag = tag_for_token(ttype)
        if tag:
            yield tag, start, pos


class SyntaxHighlighter:
    def __init__(self, text_widget):
        self.text = text_widget

    def create_tags(self):
        for tag, options in TAG_COLOURS.items():
            self.text.tag_configure(tag, **options)

    def highlight_all(self, language: str = "sql"):
        """Re-tag the whole widget content."""
        text = self.text.get("1.0", "end-1c")
        for tag in TAG_COLOURS:
            self.text.tag_remove(tag, "1.0", "end")
        for tag, start, end in token_spans(text, language):
            self.text.tag_add(tag, f"1.0+{start}c", f"1.0+{end}c")
