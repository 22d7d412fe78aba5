from __future__ import annotations

import logging
from pathlib import Path
from typing import AbstractSet, Iterable, List, Optional

from .scanner.models import SourceUnit
from .settings import include_exts

logger = logging.getLogger(__name__)


EXCLUDE_DIR_PARTS = {
    "node_modules",
    "dist",
    "build",
    ".git",
}


def _wanted(path: Path, exts: AbstractSet[str], base: Optional[Path] = None) -> bool:
    if not path.is_file():
        return False
    if path.suffix not in exts:
        return False
    parts = path.relative_to(base).parts if base is not None else path.parts
    return not any(part in EXCLUDE_DIR_PARTS for part in parts)


def iter_source_files(src_dir: Path, exts: Optional[AbstractSet[str]] = None) -> Iterable[Path]:
    exts = exts or include_exts()
    if not src_dir.exists():
        return
    for path in sorted(src_dir.rglob("*")):
        if _wanted(path, exts, src_dir):
            yield path


def iter_paths_from_args(args: List[str], root: Path, exts: Optional[AbstractSet[str]] = None) -> Iterable[Path]:
    exts = exts or include_exts()
    for raw in args:
        p = (root / raw).resolve() if not Path(raw).is_absolute() else Path(raw).resolve()
        if p.is_file():
            if _wanted(p, exts):
                yield p
            continue
        if p.is_dir():
            yield from iter_source_files(p, exts)


def _display_path(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def read_units(paths: Iterable[Path], root: Path) -> List[SourceUnit]:
    units: List[SourceUnit] = []
    for path in paths:
        try:
            raw = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            logger.warning("Non UTF-8 bytes in %s; decoding with replacement", path)
            raw = path.read_text(encoding="utf-8", errors="replace")
        units.append(SourceUnit(path=_display_path(path, root), text=raw))
    return units
