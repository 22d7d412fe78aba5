"""Lexer for UI source files (JS/TS with optional JSX markup).

The tokenizer is total: any input text produces a token stream, never an
exception. It is not a parser for the host language; it only recovers
enough structure to tell active code apart from markup text, string
literals and comments:

- code regions yield IDENT, STRING, COMMENT, bracket tokens and TEXT runs
- JSX element children and tag internals are MARKUP, lexed as TEXT (with
  STRING tokens for quoted attribute values)
- ``{`` inside markup opens a JSX_EXPR code region until its matching ``}``
- template literals are split into STRING chunks around ``${ ... }`` code

An unmatched closing bracket in code switches to lenient mode: the bracket
and everything after it become one TEXT token.
"""

from __future__ import annotations

import bisect
import logging
import re
import string
from dataclasses import dataclass
from typing import List, Optional

from .models import Region, Token, TokenKind

logger = logging.getLogger(__name__)


_IDENT_START = frozenset(string.ascii_letters + "_$")
_IDENT_CHARS = _IDENT_START | frozenset(string.digits)
_QUOTES = "'\""

# After these, `<` starts a JSX element and `/` starts a regex literal.
_EXPR_PRECEDERS = frozenset("(,=:?{[!&|;")
_EXPR_KEYWORDS = frozenset({"return", "yield", "default", "case", "await"})

# `<T,>(x) => x` and `<T extends U>(x) => x`: type parameters, not an element.
_GENERIC_PARAMS_RE = re.compile(r"<\s*[A-Za-z_$][\w$]*(?![\w$])(?:\s*,|\s+extends\b)")

_BRACKET_FRAMES = frozenset({"brace", "jsx_brace", "paren", "tmpl_expr"})
_BRACE_FRAMES = frozenset({"brace", "jsx_brace", "tmpl_expr"})


@dataclass
class _Frame:
    kind: str  # brace | jsx_brace | paren | tmpl_expr | template | tag | element
    region: Region
    closing: bool = False
    start: int = 0


class _Lexer:
    def __init__(self, text: str, jsx: bool):
        self.text = text
        self.n = len(text)
        self.jsx = jsx
        self.pos = 0
        self.tokens: List[Token] = []
        self.stack: List[_Frame] = []
        self.depth = 0
        self.last_sig = ""
        self._pending: Optional[tuple[int, Region, int]] = None
        self._line_starts = [0] + [i + 1 for i, ch in enumerate(text) if ch == "\n"]

    # --- bookkeeping ---

    def _region(self) -> Region:
        return self.stack[-1].region if self.stack else Region.CODE

    def _top(self) -> Optional[str]:
        return self.stack[-1].kind if self.stack else None

    def _loc(self, offset: int) -> tuple[int, int]:
        line = bisect.bisect_right(self._line_starts, offset)
        return line, offset - self._line_starts[line - 1] + 1

    def _flush(self) -> None:
        if self._pending is None:
            return
        start, region, depth = self._pending
        self._pending = None
        if start >= self.pos:
            return
        line, col = self._loc(start)
        self.tokens.append(Token(TokenKind.TEXT, self.text[start:self.pos], start, line, col, depth, region))

    def _emit(self, kind: TokenKind, end: int, region: Optional[Region] = None) -> None:
        self._flush()
        line, col = self._loc(self.pos)
        self.tokens.append(
            Token(kind, self.text[self.pos:end], self.pos, line, col, self.depth, region or self._region())
        )
        self.pos = end

    def _text_to(self, end: int) -> None:
        region = self._region()
        if self._pending is not None and self._pending[1] != region:
            self._flush()
        if self._pending is None:
            self._pending = (self.pos, region, self.depth)
        self.pos = max(end, self.pos + 1)

    def _push(self, frame: _Frame) -> None:
        self.stack.append(frame)
        if frame.kind in _BRACKET_FRAMES:
            self.depth += 1

    def _pop(self) -> _Frame:
        frame = self.stack.pop()
        if frame.kind in _BRACKET_FRAMES:
            self.depth -= 1
        return frame

    def _expr_position(self) -> bool:
        last = self.last_sig
        return last == "" or last == "=>" or last in _EXPR_KEYWORDS or (len(last) == 1 and last in _EXPR_PRECEDERS)

    def _generic_params_ahead(self) -> bool:
        return _GENERIC_PARAMS_RE.match(self.text, self.pos) is not None

    def _peek(self, k: int = 1) -> str:
        i = self.pos + k
        return self.text[i] if i < self.n else ""

    def _lenient(self) -> None:
        self._flush()
        line, col = self._loc(self.pos)
        logger.debug("Unmatched %r at %s:%s; emitting remainder as text", self.text[self.pos], line, col)
        self.tokens.append(Token(TokenKind.TEXT, self.text[self.pos:], self.pos, line, col, self.depth, self._region()))
        self.pos = self.n

    # --- driver ---

    def run(self) -> List[Token]:
        while self.pos < self.n:
            top = self._top()
            if top == "template":
                self._lex_template()
            elif top == "tag":
                self._lex_tag()
            elif top == "element":
                self._lex_children()
            else:
                self._lex_code()
        if self._top() == "template":
            self._template_chunk(self.n)
        self._flush()
        return self.tokens

    # --- code regions ---

    def _lex_code(self) -> None:
        text, pos = self.text, self.pos
        c = text[pos]
        nxt = self._peek()

        if c == "/" and nxt == "/":
            end = text.find("\n", pos)
            self._emit(TokenKind.COMMENT, self.n if end == -1 else end)
        elif c == "/" and nxt == "*":
            end = text.find("*/", pos + 2)
            self._emit(TokenKind.COMMENT, self.n if end == -1 else end + 2)
        elif c in _QUOTES:
            self._lex_quoted(c)
        elif c == "`":
            self._flush()
            self._push(_Frame("template", self._region(), start=pos))
            self.pos += 1
        elif c == "{":
            self._emit(TokenKind.LBRACE, pos + 1)
            self._push(_Frame("brace", self._region()))
            self.last_sig = "{"
        elif c == "}":
            self._close_brace()
        elif c == "(":
            self._emit(TokenKind.LPAREN, pos + 1)
            self._push(_Frame("paren", self._region()))
            self.last_sig = "("
        elif c == ")":
            if self._top() != "paren":
                self._lenient()
                return
            self._flush()
            self._pop()
            self._emit(TokenKind.RPAREN, pos + 1)
            self.last_sig = ")"
        elif c in _IDENT_START:
            end = pos + 1
            while end < self.n and text[end] in _IDENT_CHARS:
                end += 1
            self._emit(TokenKind.IDENT, end)
            self.last_sig = text[pos:end]
        elif c.isdigit():
            end = pos + 1
            while end < self.n and (text[end] in _IDENT_CHARS or text[end] == "."):
                end += 1
            self._text_to(end)
            self.last_sig = "0"
        elif (
            c == "<"
            and self.jsx
            and self._expr_position()
            and (nxt.isalpha() or nxt == ">")
            and not self._generic_params_ahead()
        ):
            self._open_tag(closing=False)
        elif c == "/" and self._expr_position():
            self._lex_regex()
        elif c.isspace():
            self._text_to(pos + 1)
        else:
            self._text_to(pos + 1)
            if c == ">" and pos > 0 and text[pos - 1] == "=":
                self.last_sig = "=>"
            else:
                self.last_sig = c

    def _close_brace(self) -> None:
        top = self._top()
        if top not in _BRACE_FRAMES:
            self._lenient()
            return
        self._flush()
        self._pop()
        self._emit(TokenKind.RBRACE, self.pos + 1)
        self.last_sig = "}"
        if top == "tmpl_expr" and self._top() == "template":
            self.stack[-1].start = self.pos

    def _lex_quoted(self, quote: str, multiline: bool = False) -> None:
        text = self.text
        j = self.pos + 1
        while j < self.n:
            ch = text[j]
            if ch == "\\":
                j += 2
                continue
            if ch == quote:
                self._emit(TokenKind.STRING, j + 1)
                self.last_sig = '"'
                return
            if ch == "\n" and not multiline:
                break
            j += 1
        # Unterminated: the quote is plain text and scanning resumes after it.
        self._text_to(self.pos + 1)
        self.last_sig = quote

    def _lex_regex(self) -> None:
        text = self.text
        j = self.pos + 1
        in_class = False
        while j < self.n:
            ch = text[j]
            if ch == "\\":
                j += 2
                continue
            if ch == "\n":
                break
            if in_class:
                if ch == "]":
                    in_class = False
            elif ch == "[":
                in_class = True
            elif ch == "/":
                j += 1
                while j < self.n and text[j].isalpha():
                    j += 1
                self._text_to(j)
                self.last_sig = "0"
                return
            j += 1
        self._text_to(self.pos + 1)
        self.last_sig = "/"

    # --- template literals ---

    def _template_chunk(self, end: int) -> None:
        frame = self.stack[-1]
        if end > frame.start:
            line, col = self._loc(frame.start)
            self.tokens.append(
                Token(TokenKind.STRING, self.text[frame.start:end], frame.start, line, col, self.depth, frame.region)
            )
        self._pop()

    def _lex_template(self) -> None:
        text = self.text
        frame = self.stack[-1]
        j = self.pos
        while j < self.n:
            ch = text[j]
            if ch == "\\":
                j += 2
                continue
            if ch == "`":
                self._template_chunk(j + 1)
                self.pos = j + 1
                self.last_sig = '"'
                return
            if ch == "$" and j + 1 < self.n and text[j + 1] == "{":
                if j > frame.start:
                    line, col = self._loc(frame.start)
                    self.tokens.append(
                        Token(TokenKind.STRING, text[frame.start:j], frame.start, line, col, self.depth, frame.region)
                    )
                self.pos = j
                self._emit(TokenKind.LBRACE, j + 2, frame.region)
                self._push(_Frame("tmpl_expr", frame.region))
                self.last_sig = "{"
                return
            j += 1
        self.pos = self.n

    # --- markup ---

    def _open_tag(self, closing: bool) -> None:
        self._text_to(self.pos + (2 if closing else 1))
        self._push(_Frame("tag", Region.MARKUP, closing=closing))

    def _lex_tag(self) -> None:
        c = self.text[self.pos]
        if c == ">":
            self._text_to(self.pos + 1)
            frame = self._pop()
            if not frame.closing:
                self._push(_Frame("element", Region.MARKUP))
                return
            if self._top() == "element":
                self._pop()
            self.last_sig = ")"
        elif c == "/" and self._peek() == ">":
            self._text_to(self.pos + 2)
            self._pop()
            self.last_sig = ")"
        elif c in _QUOTES:
            self._lex_quoted(c, multiline=True)
        elif c == "{":
            self._emit(TokenKind.LBRACE, self.pos + 1)
            self._push(_Frame("jsx_brace", Region.JSX_EXPR))
            self.last_sig = "{"
        else:
            self._text_to(self.pos + 1)

    def _lex_children(self) -> None:
        text, pos = self.text, self.pos
        c = text[pos]
        if c == "{":
            self._emit(TokenKind.LBRACE, pos + 1)
            self._push(_Frame("jsx_brace", Region.JSX_EXPR))
            self.last_sig = "{"
        elif c == "<":
            nxt = self._peek()
            if nxt == "/":
                self._open_tag(closing=True)
            elif nxt.isalpha() or nxt == ">":
                self._open_tag(closing=False)
            else:
                self._text_to(pos + 1)
        else:
            ends = [i for i in (text.find("<", pos), text.find("{", pos)) if i != -1]
            self._text_to(min(ends) if ends else self.n)


def tokenize(text: str, jsx: bool = True) -> List[Token]:
    """Split source text into tokens. Never raises on arbitrary input."""
    return _Lexer(text or "", jsx).run()
