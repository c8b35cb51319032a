from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .draft import DEFAULT_DEBOUNCE_MS
from .normalizer import MAX_LENGTH
from .storage import DB_PATH, DEFAULT_COLLECTION, DEFAULT_SUB_PATH, Settings

DEFAULT_LOG_PATH = Path.home() / ".ideainbox.log"


@dataclass
class AppConfig:
    db_path: Path
    log_path: Path
    verbose: bool
    enhancer: str
    handoff: str
    debounce_ms: int
    max_length: Optional[int]
    default_settings: Settings


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name, "").strip()
    return Path(raw).expanduser() if raw else default


def load_config(project_root: Optional[Path] = None) -> AppConfig:
    """
    Load configuration from .env and IDEAINBOX_* environment variables.

    Values already present in the environment win over .env entries.
    IDEAINBOX_MAX_LENGTH=0 disables the upper length check.
    """

    if project_root is None:
        # Assume this file is ideainbox/config.py
        project_root = Path(__file__).resolve().parents[1]

    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    debounce_ms = _env_int("IDEAINBOX_DEBOUNCE_MS", DEFAULT_DEBOUNCE_MS)
    if debounce_ms < 0:
        raise RuntimeError("IDEAINBOX_DEBOUNCE_MS must not be negative")

    max_length_raw = _env_int("IDEAINBOX_MAX_LENGTH", MAX_LENGTH)
    max_length = max_length_raw if max_length_raw > 0 else None

    default_settings = Settings(
        collection_name=os.getenv("IDEAINBOX_DEFAULT_COLLECTION", DEFAULT_COLLECTION).strip()
        or DEFAULT_COLLECTION,
        sub_path=os.getenv("IDEAINBOX_DEFAULT_SUB_PATH", DEFAULT_SUB_PATH).strip(),
    )

    return AppConfig(
        db_path=_env_path("IDEAINBOX_DB_PATH", DB_PATH),
        log_path=_env_path("IDEAINBOX_LOG_PATH", DEFAULT_LOG_PATH),
        verbose=os.getenv("IDEAINBOX_VERBOSE", "0").strip() == "1",
        enhancer=os.getenv("IDEAINBOX_ENHANCER", "local").strip().lower() or "local",
        handoff=os.getenv("IDEAINBOX_HANDOFF", "clipboard").strip().lower() or "clipboard",
        debounce_ms=debounce_ms,
        max_length=max_length,
        default_settings=default_settings,
    )
