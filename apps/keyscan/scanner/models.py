from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenKind(str, Enum):
    STRING = "string"
    IDENT = "ident"
    LBRACE = "lbrace"
    RBRACE = "rbrace"
    LPAREN = "lparen"
    RPAREN = "rparen"
    COMMENT = "comment"
    TEXT = "text"


class Region(str, Enum):
    CODE = "code"
    JSX_EXPR = "jsx_expr"
    MARKUP = "markup"


class Enclosing(str, Enum):
    JSX_EXPR = "jsx_expr"
    CODE = "code"
    PLAIN_TEXT = "plain_text"
    STRING_LITERAL = "string_literal"
    COMMENT = "comment"


GENUINE_ENCLOSINGS = frozenset({Enclosing.JSX_EXPR, Enclosing.CODE})


class KeyStatus(str, Enum):
    VALID = "valid"
    UNKNOWN = "unknown"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    offset: int
    line: int
    col: int
    # Open bracket frames at the token start, and the region it was lexed in.
    depth: int = 0
    region: Region = Region.CODE


class SourceUnit(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    text: str


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    line: int
    col: int


class CallSite(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw_key: str
    location: Location
    enclosing: Enclosing

    @property
    def is_genuine(self) -> bool:
        return self.enclosing in GENUINE_ENCLOSINGS


class NormalizedKey(BaseModel):
    key: str
    segments: List[str]
    occurrences: List[CallSite] = Field(default_factory=list)
    is_well_formed: bool


class Finding(BaseModel):
    key: NormalizedKey
    status: KeyStatus


class ScanReport(BaseModel):
    findings: List[Finding] = Field(default_factory=list)
    rejected_sites: List[CallSite] = Field(default_factory=list)

    # Sorted and duplicate-free so serialized reports diff cleanly.
    unused_catalog_keys: List[str] = Field(default_factory=list)

    files_scanned: int = 0

    def counts(self) -> Dict[KeyStatus, int]:
        out = {status: 0 for status in KeyStatus}
        for finding in self.findings:
            out[finding.status] += 1
        return out

    def by_path(self) -> Dict[str, List[Finding]]:
        grouped: Dict[str, List[Finding]] = {}
        for finding in self.findings:
            seen: set[str] = set()
            for site in finding.key.occurrences:
                path = site.location.path
                if path in seen:
                    continue
                seen.add(path)
                grouped.setdefault(path, []).append(finding)
        return grouped


# --- HTTP request/response shapes ---


class ScanRequest(BaseModel):
    units: List[SourceUnit]
    catalog: List[str] = Field(default_factory=list)
    strict: bool = False

    # If omitted, KEYSCAN_CALL_NAMES is used.
    call_names: Optional[List[str]] = None


class ScanResponse(BaseModel):
    report: ScanReport
    exit_code: int


class TokenizeRequest(BaseModel):
    text: str


class TokenRecord(BaseModel):
    kind: TokenKind
    value: str
    offset: int
    line: int
    col: int
    depth: int
    region: Region


class TokenizeResponse(BaseModel):
    tokens: List[TokenRecord]
    total: int
