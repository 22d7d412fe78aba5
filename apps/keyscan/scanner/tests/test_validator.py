from __future__ import annotations

from apps.keyscan.scanner.models import CallSite, Enclosing, KeyStatus, Location
from apps.keyscan.scanner.normalizer import normalize
from apps.keyscan.scanner.report import build
from apps.keyscan.scanner.validator import validate


def _keys(*raw: str):
    sites = [
        CallSite(raw_key=k, location=Location(path="a.tsx", line=i + 1, col=1), enclosing=Enclosing.CODE)
        for i, k in enumerate(raw)
    ]
    return normalize(sites)


def test_statuses():
    findings = validate(_keys("common.hello", "common.missing", "123.products"), {"common.hello"})
    assert [(f.key.key, f.status) for f in findings] == [
        ("common.hello", KeyStatus.VALID),
        ("common.missing", KeyStatus.UNKNOWN),
        ("123.products", KeyStatus.MALFORMED),
    ]


def test_malformed_takes_precedence_over_catalog():
    assert validate(_keys("a..b"), set())[0].status is KeyStatus.MALFORMED
    assert validate(_keys("a..b"), {"a..b"})[0].status is KeyStatus.MALFORMED


def test_unused_catalog_keys():
    catalog = {"common.hello", "common.unused"}
    report = build(validate(_keys("common.hello"), catalog), [], catalog)
    assert report.unused_catalog_keys == ["common.unused"]


def test_malformed_reference_does_not_mark_catalog_key_used():
    catalog = {"a..b", "z.y", "m.n"}
    report = build(validate(_keys("a..b", "m.n"), catalog), [], catalog, files_scanned=1)
    assert report.unused_catalog_keys == ["a..b", "z.y"]
    assert report.files_scanned == 1
    assert report.counts() == {KeyStatus.VALID: 1, KeyStatus.UNKNOWN: 0, KeyStatus.MALFORMED: 1}
