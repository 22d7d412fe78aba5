from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Pattern, Sequence

from .models import CallSite, Enclosing, Location, Region, Token, TokenKind


class _State(Enum):
    SEEKING = "seeking"
    SEEN_IDENT = "seen_ident"
    SEEN_LPAREN = "seen_lparen"
    SEEN_STRING = "seen_string"


# Every TokenKind is either matched structurally or searched for call-shaped text.
STRUCTURAL_KINDS = frozenset({TokenKind.IDENT, TokenKind.LBRACE, TokenKind.RBRACE, TokenKind.LPAREN, TokenKind.RPAREN})
RAW_SCAN_ENCLOSING = {
    TokenKind.TEXT: Enclosing.PLAIN_TEXT,
    TokenKind.STRING: Enclosing.STRING_LITERAL,
    TokenKind.COMMENT: Enclosing.COMMENT,
}

_REGION_ENCLOSING = {
    Region.JSX_EXPR: Enclosing.JSX_EXPR,
    Region.CODE: Enclosing.CODE,
    Region.MARKUP: Enclosing.PLAIN_TEXT,
}

_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|.)", re.DOTALL)
_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
    # Line continuations.
    "\n": "",
    "\r": "",
    "\r\n": "",
}


@dataclass
class RecognizedCalls:
    genuine: List[CallSite] = field(default_factory=list)
    rejected: List[CallSite] = field(default_factory=list)


def _is_complete_literal(value: str) -> bool:
    return len(value) >= 2 and value[0] in "'\"`" and value[-1] == value[0]


def _decode_escape(m: "re.Match[str]") -> str:
    seq = m.group(1)
    if len(seq) > 1 and seq[0] in "ux":
        code = int(seq[2:-1] if seq.startswith("u{") else seq[1:], 16)
        return chr(code) if code <= 0x10FFFF else m.group(0)
    return _SIMPLE_ESCAPES.get(seq, seq)


def unescape(body: str) -> str:
    """Decode JS string escapes (`\\n`, `\\xHH`, `\\uHHHH`, `\\u{H...}`); any other `\\X` is `X`."""
    return _ESCAPE_RE.sub(_decode_escape, body)


def call_pattern(call_names: Sequence[str]) -> Pattern[str]:
    """Regex for call-shaped text like ``t("key")`` inside a single token's raw value."""
    names = "|".join(re.escape(n) for n in sorted(set(call_names), key=len, reverse=True))
    return re.compile(
        r"(?<![\w$])(?:%s)\s*\(\s*"
        r"(?:\"((?:\\.|[^\"\\\n])*)\"|'((?:\\.|[^'\\\n])*)'|`((?:\\.|[^`\\])*)`)"
        r"\s*[,)]" % names
    )


def _site(path: str, raw_key: str, line: int, col: int, enclosing: Enclosing) -> CallSite:
    return CallSite(raw_key=raw_key, location=Location(path=path, line=line, col=col), enclosing=enclosing)


def _raw_sites(tok: Token, path: str, pattern: Pattern[str]) -> Iterable[CallSite]:
    enclosing = RAW_SCAN_ENCLOSING[tok.kind]
    for m in pattern.finditer(tok.value):
        body = next(g for g in m.groups() if g is not None)
        prefix = tok.value[: m.start()]
        newlines = prefix.count("\n")
        if newlines:
            line, col = tok.line + newlines, m.start() - prefix.rfind("\n")
        else:
            line, col = tok.line, tok.col + m.start()
        yield _site(path, unescape(body), line, col, enclosing)


class _Matcher:
    """IDENT LPAREN STRING (RPAREN | ',') with a one-token reset on mismatch."""

    def __init__(self, path: str, call_names: Sequence[str]):
        self.path = path
        self.call_names = frozenset(call_names)
        self._reset()

    def _reset(self) -> None:
        self.state = _State.SEEKING
        self.ident: Optional[Token] = None
        self.key: Optional[Token] = None

    def feed(self, tok: Token) -> Optional[CallSite]:
        if tok.kind is TokenKind.COMMENT or (tok.kind is TokenKind.TEXT and not tok.value.strip()):
            return None

        if self.state is _State.SEEKING:
            if tok.kind is TokenKind.IDENT and tok.value in self.call_names:
                self.state = _State.SEEN_IDENT
                self.ident = tok
            return None

        if self.state is _State.SEEN_IDENT and tok.kind is TokenKind.LPAREN:
            self.state = _State.SEEN_LPAREN
            return None

        if self.state is _State.SEEN_LPAREN and tok.kind is TokenKind.STRING and _is_complete_literal(tok.value):
            self.state = _State.SEEN_STRING
            self.key = tok
            return None

        if self.state is _State.SEEN_STRING and (
            tok.kind is TokenKind.RPAREN or (tok.kind is TokenKind.TEXT and tok.value.lstrip().startswith(","))
        ):
            ident, key = self.ident, self.key
            self._reset()
            return _site(
                self.path,
                unescape(key.value[1:-1]),
                ident.line,
                ident.col,
                _REGION_ENCLOSING[ident.region],
            )

        # Unexpected token: start over at this token.
        self._reset()
        return self.feed(tok)


def recognize(tokens: Sequence[Token], path: str = "", call_names: Sequence[str] = ("t",)) -> RecognizedCalls:
    """Find extraction calls in a token stream.

    Structural matches in code regions are genuine. Call-shaped text inside
    TEXT, STRING or COMMENT tokens is returned separately as rejected sites.
    """
    out = RecognizedCalls()
    matcher = _Matcher(path, call_names)
    pattern = call_pattern(call_names)

    for tok in tokens:
        if tok.kind in RAW_SCAN_ENCLOSING:
            out.rejected.extend(_raw_sites(tok, path, pattern))
        site = matcher.feed(tok)
        if site is None:
            continue
        if site.is_genuine:
            out.genuine.append(site)
        else:
            out.rejected.append(site)
    return out
