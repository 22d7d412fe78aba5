from __future__ import annotations

import importlib

from fastapi import FastAPI
from fastapi.testclient import TestClient

from apps.keyscan.scanner import router as scanner_router


def _make_app():
    app = FastAPI()
    app.include_router(scanner_router)
    return app


def test_post_scan():
    client = TestClient(_make_app())

    res = client.post(
        "/scan",
        json={
            "units": [
                {"path": "Footer.tsx", "text": 'const f = <p>{t("common.bye")}223 t("common.bye")</p>;'},
            ],
            "catalog": ["common.bye", "common.unused"],
        },
    )
    assert res.status_code == 200
    body = res.json()
    assert body["exit_code"] == 0
    report = body["report"]
    assert [f["key"]["key"] for f in report["findings"]] == ["common.bye"]
    assert report["findings"][0]["status"] == "valid"
    assert report["rejected_sites"][0]["enclosing"] == "plain_text"
    assert report["unused_catalog_keys"] == ["common.unused"]
    assert report["files_scanned"] == 1


def test_post_scan_strict_and_unknown():
    client = TestClient(_make_app())
    payload = {
        "units": [{"path": "a.ts", "text": 'tr("a.b");'}],
        "catalog": ["a.b", "c.d"],
        "call_names": ["tr"],
    }

    assert client.post("/scan", json=payload).json()["exit_code"] == 0
    assert client.post("/scan", json={**payload, "strict": True}).json()["exit_code"] == 1

    res = client.post("/scan", json={**payload, "catalog": []})
    assert res.json()["report"]["findings"][0]["status"] == "unknown"
    assert res.json()["exit_code"] == 1


def test_post_scan_rejects_missing_units():
    client = TestClient(_make_app())
    res = client.post("/scan", json={"catalog": []})
    assert res.status_code == 422


def test_post_scan_contract_error_is_400(monkeypatch):
    r = importlib.import_module("apps.keyscan.scanner.router")
    service = importlib.import_module("apps.keyscan.scanner.service")

    def _boom(*args, **kwargs):
        raise service.ScanContractError("catalog must be a set of keys, got list")

    monkeypatch.setattr(r, "scan", _boom)
    client = TestClient(_make_app())

    res = client.post("/scan", json={"units": [], "catalog": []})
    assert res.status_code == 400
    assert "catalog" in res.json()["detail"]


def test_post_tokenize():
    client = TestClient(_make_app())
    res = client.post("/tokenize", json={"text": 't("a.b")'})
    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 4
    assert [tok["kind"] for tok in body["tokens"]] == ["ident", "lparen", "string", "rparen"]
    assert "".join(tok["value"] for tok in body["tokens"]) == 't("a.b")'


def test_health():
    main = importlib.import_module("apps.keyscan.main")
    client = TestClient(main.app)
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}
