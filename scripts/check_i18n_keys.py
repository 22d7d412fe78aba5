"""Check translation keys referenced in UI sources against the catalog.

Usage: python scripts/check_i18n_keys.py [paths...]

Without arguments, scans KEYSCAN_SOURCE_DIR. The catalog comes from
KEYSCAN_CATALOG_PATH (comma-separated files are merged, KEYSCAN_CATALOG_LANGUAGE
picks a language block); KEYSCAN_STRICT=true also fails on unused catalog keys.

Exit codes: 0 clean, 1 findings, 2 catalog could not be loaded.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from apps.keyscan.catalog import CatalogError, load_configured_catalog
from apps.keyscan.scanner import exit_code, scan
from apps.keyscan.scanner.models import KeyStatus
from apps.keyscan.settings import settings
from apps.keyscan.sources import iter_paths_from_args, iter_source_files, read_units


ROOT = Path.cwd()


def main() -> int:
    # Windows consoles/pipes may default to cp1252; force UTF-8 so we can print non-ASCII keys safely.
    try:
        sys.stdout.reconfigure(encoding="utf-8")
    except AttributeError:
        pass
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    try:
        catalog = load_configured_catalog(ROOT)
    except CatalogError as e:
        print(f"Catalog error: {e}", file=sys.stderr)
        return 2

    argv = sys.argv[1:]
    targets = list(iter_paths_from_args(argv, ROOT)) if argv else list(iter_source_files(ROOT / settings.KEYSCAN_SOURCE_DIR))
    report = scan(read_units(targets, ROOT), catalog)

    counts = report.counts()
    print("Files scanned:", report.files_scanned)
    print("Keys referenced:", len(report.findings))
    print("Unknown:", counts[KeyStatus.UNKNOWN])
    print("Malformed:", counts[KeyStatus.MALFORMED])

    # Show a compact report, grouped by file.
    for path, findings in report.by_path().items():
        bad = [f for f in findings if f.status != KeyStatus.VALID]
        if not bad:
            continue
        print(f"\n{path} ({len(bad)})")
        for f in bad:
            lines = sorted({o.location.line for o in f.key.occurrences if o.location.path == path})
            print(f"- [{f.status.value}] {f.key.key} (line {', '.join(str(n) for n in lines)})")

    if report.rejected_sites:
        print(f"\nIgnored call-shaped text: {len(report.rejected_sites)}")
        for site in report.rejected_sites[:50]:
            loc = site.location
            print(f"- {loc.path}:{loc.line}:{loc.col} [{site.enclosing.value}] {site.raw_key}")

    if report.unused_catalog_keys:
        print(f"\nUnused catalog keys: {len(report.unused_catalog_keys)}")
        for k in report.unused_catalog_keys[:100]:
            print("-", k)

    return exit_code(report, strict=settings.KEYSCAN_STRICT)


if __name__ == "__main__":
    raise SystemExit(main())
