from __future__ import annotations
# File: apps/keyscan/main.py
import logging

from fastapi import FastAPI

# --- Local Imports ---
from .settings import settings
from .scanner import router as scanner_router


logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

app = FastAPI(title="Keyscan API")


# --- Core Endpoints ---

@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(scanner_router)
