from __future__ import annotations

import re
from typing import Dict, Iterable, List, Tuple

from .models import CallSite, NormalizedKey

_IDENT_SEGMENT_RE = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")
_NUMERIC_SEGMENT_RE = re.compile(r"[0-9]+")


def split_key(raw_key: str) -> Tuple[str, List[str]]:
    # Only the whole key is trimmed; interior segments are kept verbatim.
    key = raw_key.strip()
    return key, key.split(".")


def is_well_formed(segments: List[str]) -> bool:
    if not segments:
        return False
    last = len(segments) - 1
    for idx, seg in enumerate(segments):
        if _IDENT_SEGMENT_RE.fullmatch(seg):
            continue
        if idx == last and _NUMERIC_SEGMENT_RE.fullmatch(seg):
            continue
        return False
    return True


class KeyIndex:
    """Insertion-ordered dedup map from key string to its occurrences.

    Owned by a single thread: parallel scans return per-file partial results
    that are folded into one index sequentially.
    """

    def __init__(self) -> None:
        self._keys: Dict[str, NormalizedKey] = {}
        self._seen: Dict[str, set] = {}

    def add(self, site: CallSite) -> None:
        key, segments = split_key(site.raw_key)
        loc = (site.location.path, site.location.line, site.location.col)
        entry = self._keys.get(key)
        if entry is None:
            self._keys[key] = NormalizedKey(
                key=key,
                segments=segments,
                occurrences=[site],
                is_well_formed=is_well_formed(segments),
            )
            self._seen[key] = {loc}
            return
        if loc in self._seen[key]:
            return
        self._seen[key].add(loc)
        entry.occurrences.append(site)

    def extend(self, sites: Iterable[CallSite]) -> "KeyIndex":
        for site in sites:
            self.add(site)
        return self

    def merge(self, other: "KeyIndex") -> "KeyIndex":
        for entry in other.keys():
            self.extend(entry.occurrences)
        return self

    def keys(self) -> List[NormalizedKey]:
        return list(self._keys.values())

    def __len__(self) -> int:
        return len(self._keys)


def normalize(call_sites: Iterable[CallSite]) -> List[NormalizedKey]:
    return KeyIndex().extend(call_sites).keys()
