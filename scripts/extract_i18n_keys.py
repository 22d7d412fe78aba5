from __future__ import annotations

import logging
import sys
from pathlib import Path

from apps.keyscan.catalog import CatalogError, load_configured_catalog
from apps.keyscan.scanner import scan
from apps.keyscan.settings import settings
from apps.keyscan.sources import iter_paths_from_args, iter_source_files, read_units


ROOT = Path.cwd()


def main() -> int:
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    out_file = ROOT / settings.KEYSCAN_INVENTORY_PATH
    out_file.parent.mkdir(parents=True, exist_ok=True)

    # The inventory is still useful without a catalog; every key is then "unknown".
    try:
        catalog = load_configured_catalog(ROOT)
    except CatalogError as e:
        print(f"Catalog not loaded ({e}); statuses will be unknown")
        catalog = frozenset()

    argv = sys.argv[1:]
    targets = list(iter_paths_from_args(argv, ROOT)) if argv else list(iter_source_files(ROOT / settings.KEYSCAN_SOURCE_DIR))
    report = scan(read_units(targets, ROOT), catalog)

    lines = ["key\tstatus\toccurrences\tfirst_location"]
    for f in sorted(report.findings, key=lambda x: x.key.key):
        first = f.key.occurrences[0].location
        key = f.key.key.replace("\t", " ").replace("\n", " ")
        lines.append(f"{key}\t{f.status.value}\t{len(f.key.occurrences)}\t{first.path}:{first.line}:{first.col}")

    out_file.write_text("\n".join(lines) + "\n", encoding="utf-8")

    print("Extracted keys:", len(report.findings))
    print("Wrote:", out_file.as_posix())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
