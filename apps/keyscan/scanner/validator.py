from __future__ import annotations

from typing import AbstractSet, Iterable, List

from .models import Finding, KeyStatus, NormalizedKey


def classify(key: NormalizedKey, catalog: AbstractSet[str]) -> KeyStatus:
    # Malformed wins over catalog membership so a key is never reported twice.
    if not key.is_well_formed:
        return KeyStatus.MALFORMED
    if key.key in catalog:
        return KeyStatus.VALID
    return KeyStatus.UNKNOWN


def validate(normalized_keys: Iterable[NormalizedKey], catalog: AbstractSet[str]) -> List[Finding]:
    return [Finding(key=key, status=classify(key, catalog)) for key in normalized_keys]
