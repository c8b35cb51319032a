"""Persistent storage layer for IdeaInbox.

This module is intentionally small and focused. It provides:

- A SQLite database at ~/.ideainbox.db (override with IDEAINBOX_DB_PATH)
- A `kv` table holding whole-value entries under fixed keys
- Repositories for the two logical keys: `settings` and `draft`

Every write replaces the whole value for one key inside a single
transaction, so a crash never leaves a half-written settings object and
writing one key never touches another.

Nothing in here knows about normalization or hand-off providers.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

log = logging.getLogger(__name__)

# Default location of the IdeaInbox database
DB_PATH: Path = Path.home() / ".ideainbox.db"

SETTINGS_KEY = "settings"
DRAFT_KEY = "draft"

DEFAULT_COLLECTION = "MyVault"
DEFAULT_SUB_PATH = ""


@dataclass(frozen=True)
class Settings:
    """User settings for the hand-off target.

    collection_name is the vault/workspace name in the external app;
    sub_path is a folder inside it ("" means the vault root).
    """

    collection_name: str = DEFAULT_COLLECTION
    sub_path: str = DEFAULT_SUB_PATH

    @classmethod
    def from_dict(cls, raw: Any, defaults: Optional["Settings"] = None) -> "Settings":
        """Build Settings from a decoded JSON object.

        Unknown or wrongly-typed fields fall back to ``defaults``. The
        camelCase keys written by earlier versions are still accepted.
        """
        base = defaults or cls()
        if not isinstance(raw, dict):
            return base

        collection = raw.get("collection_name", raw.get("vaultName"))
        sub_path = raw.get("sub_path", raw.get("folderPath"))

        return replace(
            base,
            collection_name=collection if isinstance(collection, str) else base.collection_name,
            sub_path=sub_path if isinstance(sub_path, str) else base.sub_path,
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "collection_name": self.collection_name,
            "sub_path": self.sub_path,
        }


class KeyValueStore:
    """Tiny SQLite-backed key/value store.

    The connection is opened lazily and the schema is created on first
    use, so constructing a store never touches the filesystem.
    """

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = Path(db_path) if db_path else DB_PATH
        self._conn: Optional[sqlite3.Connection] = None

    def _get_connection(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        # Autosave timers write from a worker thread
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        self._init_schema(conn)

        self._conn = conn
        return conn

    def _init_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key         TEXT PRIMARY KEY,
                value       TEXT NOT NULL,
                updated_at  TEXT NOT NULL
            )
            """
        )
        conn.commit()

    def get(self, key: str) -> Optional[str]:
        cur = self._get_connection().execute(
            "SELECT value FROM kv WHERE key = ?",
            (key,),
        )
        row = cur.fetchone()
        return row["value"] if row is not None else None

    def put(self, key: str, value: str) -> None:
        """Overwrite the whole value stored under key."""
        conn = self._get_connection()
        now = datetime.now().isoformat(timespec="seconds")
        with conn:
            conn.execute(
                """
                INSERT INTO kv (key, value, updated_at)
                VALUES (:key, :value, :updated_at)
                ON CONFLICT(key) DO UPDATE SET
                    value      = excluded.value,
                    updated_at = excluded.updated_at
                """,
                {"key": key, "value": value, "updated_at": now},
            )

    def delete(self, key: str) -> None:
        conn = self._get_connection()
        with conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None


class SettingsRepository:
    """Load/save the Settings object under the `settings` key."""

    def __init__(self, store: KeyValueStore, defaults: Optional[Settings] = None) -> None:
        self._store = store
        self.defaults = defaults or Settings()

    def load(self) -> Settings:
        raw = self._store.get(SETTINGS_KEY)
        if raw is None:
            return self.defaults

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            log.warning(f"[settings] stored settings are malformed, using defaults: {e}")
            return self.defaults

        return Settings.from_dict(data, self.defaults)

    def save(self, settings: Settings) -> None:
        self._store.put(SETTINGS_KEY, json.dumps(settings.to_dict()))
        log.info(f"[settings] saved collection={settings.collection_name!r} sub_path={settings.sub_path!r}")


class DraftRepository:
    """Load/save/clear the in-progress draft text under the `draft` key."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def load(self) -> str:
        return self._store.get(DRAFT_KEY) or ""

    def save(self, text: str) -> None:
        self._store.put(DRAFT_KEY, text)
        log.debug(f"[draft] persisted {len(text)} chars")

    def clear(self) -> None:
        self._store.delete(DRAFT_KEY)
        log.debug("[draft] cleared")
