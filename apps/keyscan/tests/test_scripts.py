from __future__ import annotations

import importlib.util
import json
import sys
from pathlib import Path

import pytest

from apps.keyscan.settings import settings


SCRIPTS_DIR = Path(__file__).resolve().parents[3] / "scripts"


def _load_script(name: str):
    spec = importlib.util.spec_from_file_location(name, SCRIPTS_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def project(tmp_path, monkeypatch):
    src = tmp_path / "src"
    src.mkdir()
    (src / "App.tsx").write_text('const a = <p>{t("common.hello")}</p>;\n', encoding="utf-8")
    (src / "Other.tsx").write_text(
        'const b = <p>{t("common.hello")}{t("common.missing")}</p>;\n// t("common.old")\n',
        encoding="utf-8",
    )
    (tmp_path / "en.json").write_text(json.dumps({"common": {"hello": "Hi"}}), encoding="utf-8")

    monkeypatch.setattr(settings, "KEYSCAN_SOURCE_DIR", "src")
    monkeypatch.setattr(settings, "KEYSCAN_CATALOG_PATH", "en.json")
    monkeypatch.setattr(settings, "KEYSCAN_CATALOG_LANGUAGE", "")
    monkeypatch.setattr(settings, "KEYSCAN_INVENTORY_PATH", "out/keys.tsv")
    monkeypatch.setattr(settings, "KEYSCAN_STRICT", False)
    monkeypatch.setattr(settings, "KEYSCAN_WORKERS", 1)
    monkeypatch.setattr(sys, "argv", ["script.py"])
    return tmp_path


def _write_catalog(root: Path, data) -> None:
    (root / "en.json").write_text(json.dumps(data), encoding="utf-8")


def test_check_fails_on_unknown_key(project, monkeypatch, capsys):
    check = _load_script("check_i18n_keys")
    monkeypatch.setattr(check, "ROOT", project)

    assert check.main() == 1
    out = capsys.readouterr().out
    assert "Files scanned: 2" in out
    assert "Unknown: 1" in out
    assert "src/Other.tsx (1)" in out
    assert "- [unknown] common.missing (line 1)" in out
    assert "src/Other.tsx:2:4 [comment] common.old" in out


def test_check_passes_with_complete_catalog(project, monkeypatch):
    check = _load_script("check_i18n_keys")
    monkeypatch.setattr(check, "ROOT", project)
    _write_catalog(project, {"common": {"hello": "Hi", "missing": "Now here", "unused": "x"}})

    assert check.main() == 0
    monkeypatch.setattr(settings, "KEYSCAN_STRICT", True)
    assert check.main() == 1


def test_check_with_explicit_paths_and_language_block(project, monkeypatch):
    check = _load_script("check_i18n_keys")
    monkeypatch.setattr(check, "ROOT", project)
    _write_catalog(project, {"en": {"common": {"hello": "Hi"}}, "fr": {"common": {"bonjour": "Salut"}}})
    monkeypatch.setattr(settings, "KEYSCAN_CATALOG_LANGUAGE", "en")
    monkeypatch.setattr(sys, "argv", ["check_i18n_keys.py", "src/App.tsx"])

    assert check.main() == 0


def test_check_reports_catalog_error(project, monkeypatch, capsys):
    check = _load_script("check_i18n_keys")
    monkeypatch.setattr(check, "ROOT", project)
    monkeypatch.setattr(settings, "KEYSCAN_CATALOG_PATH", "missing.json")

    assert check.main() == 2
    captured = capsys.readouterr()
    assert "Catalog error" in captured.err
    assert "missing.json" in captured.err


def test_extract_writes_inventory(project, monkeypatch):
    extract = _load_script("extract_i18n_keys")
    monkeypatch.setattr(extract, "ROOT", project)

    assert extract.main() == 0
    lines = (project / "out" / "keys.tsv").read_text(encoding="utf-8").splitlines()
    assert lines == [
        "key\tstatus\toccurrences\tfirst_location",
        "common.hello\tvalid\t2\tsrc/App.tsx:1:15",
        "common.missing\tunknown\t1\tsrc/Other.tsx:1:34",
    ]


def test_extract_without_catalog_marks_keys_unknown(project, monkeypatch):
    extract = _load_script("extract_i18n_keys")
    monkeypatch.setattr(extract, "ROOT", project)
    monkeypatch.setattr(settings, "KEYSCAN_CATALOG_PATH", "missing.json")

    assert extract.main() == 0
    rows = (project / "out" / "keys.tsv").read_text(encoding="utf-8").splitlines()[1:]
    assert [row.split("\t")[1] for row in rows] == ["unknown", "unknown"]
