from __future__ import annotations

from fastapi import APIRouter, HTTPException

from .models import (
    ScanRequest,
    ScanResponse,
    TokenizeRequest,
    TokenizeResponse,
    TokenRecord,
)
from .service import ScanContractError, exit_code, scan
from .tokenizer import tokenize


router = APIRouter(prefix="", tags=["Scanner"])


@router.post("/scan", response_model=ScanResponse)
def scan_sources(req: ScanRequest):
    try:
        report = scan(req.units, set(req.catalog), call_names=req.call_names)
    except ScanContractError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ScanResponse(report=report, exit_code=exit_code(report, strict=req.strict))


@router.post("/tokenize", response_model=TokenizeResponse)
def tokenize_text(req: TokenizeRequest):
    tokens = [
        TokenRecord(
            kind=tok.kind,
            value=tok.value,
            offset=tok.offset,
            line=tok.line,
            col=tok.col,
            depth=tok.depth,
            region=tok.region,
        )
        for tok in tokenize(req.text)
    ]
    return TokenizeResponse(tokens=tokens, total=len(tokens))
