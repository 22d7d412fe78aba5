from pydantic_settings import BaseSettings
from pydantic import Field
import os
from pathlib import Path
from typing import List
import dotenv

# Always load apps/.env (relative to this file), regardless of where the process is started.
_APPS_DIR = Path(__file__).resolve().parents[1]
dotenv.load_dotenv(dotenv_path=_APPS_DIR / ".env", override=False)


class Settings(BaseSettings):
    # Comma-separated names of the translation lookup function, e.g. "t,tr".
    KEYSCAN_CALL_NAMES: str = Field(default=os.getenv("KEYSCAN_CALL_NAMES", "t"))

    # If true, unused catalog keys also make a scan fail (exit code 1).
    KEYSCAN_STRICT: bool = Field(default=(os.getenv("KEYSCAN_STRICT", "false").strip().lower() == "true"))

    # Thread pool size for multi-file scans. 1 scans sequentially.
    KEYSCAN_WORKERS: int = Field(default=int(os.getenv("KEYSCAN_WORKERS", "4")))

    # Source discovery (CLI host only)
    KEYSCAN_SOURCE_DIR: str = Field(default=os.getenv("KEYSCAN_SOURCE_DIR", "src"))
    KEYSCAN_INCLUDE_EXTS: str = Field(default=os.getenv("KEYSCAN_INCLUDE_EXTS", ".js,.jsx,.ts,.tsx"))

    # Catalog file: nested/flat JSON or a JS dictionary module (translate.js layout).
    # Comma-separated catalog files are merged into one key set.
    KEYSCAN_CATALOG_PATH: str = Field(default=os.getenv("KEYSCAN_CATALOG_PATH", "src/i18n/en.json"))
    # Language block to read from multi-language catalogs, e.g. "en". Empty reads the whole file.
    KEYSCAN_CATALOG_LANGUAGE: str = Field(default=os.getenv("KEYSCAN_CATALOG_LANGUAGE", ""))
    KEYSCAN_INVENTORY_PATH: str = Field(default=os.getenv("KEYSCAN_INVENTORY_PATH", "extras/i18n_keys.tsv"))

    LOG_LEVEL: str = Field(default=os.getenv("LOG_LEVEL", "INFO"))
    APP_HOST: str = Field(default=os.getenv("APP_HOST", "0.0.0.0"))
    APP_PORT: int = Field(default=int(os.getenv("APP_PORT", "8000")))

    class Config:
        env_file = ".env"
        extra = "ignore"


def split_csv(raw: str) -> List[str]:
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


def call_names() -> List[str]:
    return split_csv(settings.KEYSCAN_CALL_NAMES) or ["t"]


def include_exts() -> set[str]:
    exts = set()
    for ext in split_csv(settings.KEYSCAN_INCLUDE_EXTS):
        exts.add(ext if ext.startswith(".") else f".{ext}")
    return exts


settings = Settings()
