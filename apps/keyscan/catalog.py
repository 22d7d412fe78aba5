"""Load translation catalogs into a flat set of dotted keys.

Supported layouts:
- nested JSON (``{"common": {"hello": "Hi"}}`` -> ``common.hello``)
- flat JSON (``{"common.hello": "Hi"}``)
- JS/TS dictionary modules (``'common.hello': 'Hi',`` entries, the translate.js layout)
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable, Optional

from .settings import settings, split_csv

logger = logging.getLogger(__name__)

_JS_EXTS = {".js", ".mjs", ".cjs", ".ts", ".jsx", ".tsx"}

# Keys like:  'some.key': 'value',
_JS_KEY_RE = re.compile(r"['\"]([^'\"\n]+)['\"]\s*:\s*")


class CatalogError(ValueError):
    pass


def flatten_keys(data: Any, prefix: str = "") -> set[str]:
    keys: set[str] = set()
    if not isinstance(data, dict):
        return keys
    for k, v in data.items():
        current = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict) and v:
            keys |= flatten_keys(v, current)
        else:
            keys.add(current)
    return keys


def extract_js_keys(text: str, language: Optional[str] = None) -> set[str]:
    if language:
        marker = re.search(r"\b%s\s*:\s*\{" % re.escape(language), text)
        if not marker:
            raise CatalogError(f"Could not find language block for: {language}")
        text = _balanced_block(text, marker.end() - 1)
    return set(_JS_KEY_RE.findall(text))


def _balanced_block(text: str, start_brace: int) -> str:
    depth = 0
    for i in range(start_brace, len(text)):
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start_brace + 1 : i]
    return text[start_brace + 1 :]


def load_catalog(path: str | Path, language: Optional[str] = None) -> frozenset[str]:
    p = Path(path)
    if not p.is_file():
        raise CatalogError(f"Catalog file not found: {p}")
    try:
        raw = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CatalogError(f"Could not read catalog {p}: {exc}") from exc

    if p.suffix.lower() in _JS_EXTS:
        keys = extract_js_keys(raw, language)
    else:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CatalogError(f"Invalid JSON in catalog {p}: {exc}") from exc
        if not isinstance(data, dict):
            raise CatalogError(f"Catalog {p} must be a JSON object")
        if language:
            if language not in data:
                raise CatalogError(f"Could not find language block for: {language}")
            data = data[language]
        keys = flatten_keys(data)

    logger.info("Loaded %s catalog keys from %s", len(keys), p)
    return frozenset(keys)


def merge_catalogs(paths: Iterable[str | Path], language: Optional[str] = None) -> frozenset[str]:
    paths = list(paths)
    if not paths:
        raise CatalogError("No catalog files configured")
    keys: set[str] = set()
    for p in paths:
        keys |= load_catalog(p, language)
    return frozenset(keys)


def load_configured_catalog(root: Path) -> frozenset[str]:
    paths = [root / p for p in split_csv(settings.KEYSCAN_CATALOG_PATH)]
    return merge_catalogs(paths, language=settings.KEYSCAN_CATALOG_LANGUAGE or None)
