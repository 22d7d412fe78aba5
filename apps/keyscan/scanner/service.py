from __future__ import annotations

import logging
import threading
from collections.abc import Set
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, List, Optional, Sequence

from ..settings import call_names as default_call_names, settings
from .models import CallSite, KeyStatus, ScanReport, SourceUnit
from .normalizer import KeyIndex
from .recognizer import recognize
from .report import build
from .tokenizer import tokenize
from .validator import validate

logger = logging.getLogger(__name__)

# Plain TypeScript has `<T>expr` casts, so JSX markup is only recognized elsewhere.
_NO_JSX_SUFFIXES = (".ts", ".mts", ".cts")


class ScanContractError(ValueError):
    pass


@dataclass
class UnitScan:
    path: str
    genuine: List[CallSite] = field(default_factory=list)
    rejected: List[CallSite] = field(default_factory=list)


def scan_unit(unit: SourceUnit, call_names: Sequence[str] = ("t",)) -> UnitScan:
    jsx = not unit.path.lower().endswith(_NO_JSX_SUFFIXES)
    calls = recognize(tokenize(unit.text, jsx=jsx), path=unit.path, call_names=call_names)
    return UnitScan(path=unit.path, genuine=calls.genuine, rejected=calls.rejected)


def _check_contract(units, catalog) -> List[SourceUnit]:
    if units is None:
        raise ScanContractError("units must be a sequence of SourceUnit, got None")
    if not isinstance(catalog, Set):
        raise ScanContractError(f"catalog must be a set of keys, got {type(catalog).__name__}")
    try:
        items = list(units)
    except TypeError as exc:
        raise ScanContractError(f"units must be iterable: {exc}") from exc
    for item in items:
        if not isinstance(item, SourceUnit):
            raise ScanContractError(f"expected SourceUnit, got {type(item).__name__}")
    return items


def _fan_out(
    units: List[SourceUnit],
    names: Sequence[str],
    workers: int,
    cancel: Optional[threading.Event],
) -> Iterable[UnitScan]:
    def _job(unit: SourceUnit) -> Optional[UnitScan]:
        if cancel is not None and cancel.is_set():
            return None
        return scan_unit(unit, names)

    if workers <= 1 or len(units) <= 1:
        return (_job(u) for u in units)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="keyscan") as pool:
        # map() keeps input order, which keeps the fold deterministic.
        return list(pool.map(_job, units))


def scan(
    units: Iterable[SourceUnit],
    catalog: AbstractSet[str],
    *,
    call_names: Optional[Sequence[str]] = None,
    workers: Optional[int] = None,
    cancel: Optional[threading.Event] = None,
) -> ScanReport:
    items = _check_contract(units, catalog)
    names = list(call_names) if call_names else default_call_names()
    workers = settings.KEYSCAN_WORKERS if workers is None else int(workers)

    index = KeyIndex()
    rejected: List[CallSite] = []
    files_scanned = 0
    for result in _fan_out(items, names, workers, cancel):
        if result is None:
            continue
        index.extend(result.genuine)
        rejected.extend(result.rejected)
        files_scanned += 1

    if files_scanned < len(items):
        logger.warning("Scan cancelled after %s of %s files", files_scanned, len(items))

    report = build(validate(index.keys(), catalog), rejected, catalog, files_scanned=files_scanned)
    counts = report.counts()
    logger.info(
        "Scanned %s files: %s keys (%s valid, %s unknown, %s malformed), %s rejected sites, %s unused catalog keys",
        files_scanned,
        len(report.findings),
        counts[KeyStatus.VALID],
        counts[KeyStatus.UNKNOWN],
        counts[KeyStatus.MALFORMED],
        len(report.rejected_sites),
        len(report.unused_catalog_keys),
    )
    return report


def exit_code(report: ScanReport, strict: bool = False) -> int:
    if any(f.status != KeyStatus.VALID for f in report.findings):
        return 1
    if strict and report.unused_catalog_keys:
        return 1
    return 0
