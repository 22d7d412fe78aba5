from __future__ import annotations

from typing import AbstractSet, Iterable, List

from .models import CallSite, Finding, KeyStatus, ScanReport


def build(
    findings: List[Finding],
    rejected_sites: Iterable[CallSite],
    catalog: AbstractSet[str],
    files_scanned: int = 0,
) -> ScanReport:
    used = {f.key.key for f in findings if f.status != KeyStatus.MALFORMED}
    return ScanReport(
        findings=list(findings),
        rejected_sites=list(rejected_sites),
        unused_catalog_keys=sorted(set(catalog) - used),
        files_scanned=int(files_scanned),
    )
