"""File download hand-off provider for IdeaInbox.

Writes the export text as `<file_base_name>.md` into a download
directory, the way a browser saves a downloaded blob: an existing file
is never overwritten, a numbered suffix is added instead.

Configuration (via environment variables):
- IDEAINBOX_DOWNLOAD_DIR: target directory (defaults to ~/Downloads).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from ..errors import HandoffError
from ..payload import NOTE_SUFFIX, SyncPayload
from .base import BaseHandoffProvider, HandoffResult

log = logging.getLogger(__name__)


class FileDownloadProvider(BaseHandoffProvider):
    name: str = "file"

    def __init__(self, download_dir: Optional[Path] = None) -> None:
        if download_dir is None:
            raw = os.environ.get("IDEAINBOX_DOWNLOAD_DIR", "").strip()
            download_dir = Path(raw).expanduser() if raw else Path.home() / "Downloads"
        self.download_dir = Path(download_dir)

    def _unique_path(self, base_name: str) -> Path:
        path = self.download_dir / f"{base_name}{NOTE_SUFFIX}"
        n = 1
        while path.exists():
            path = self.download_dir / f"{base_name} ({n}){NOTE_SUFFIX}"
            n += 1
        return path

    def deliver(self, payload: SyncPayload) -> HandoffResult:
        try:
            self.download_dir.mkdir(parents=True, exist_ok=True)
            path = self._unique_path(payload.file_base_name)
            # newline="" keeps the export text byte-for-byte on every platform
            with path.open("x", encoding="utf-8", newline="") as f:
                f.write(payload.export_text)
        except OSError as e:
            raise HandoffError(self.name, f"could not write note file: {e}", target=str(self.download_dir))

        log.info(f"[{self.name}] wrote {path}")
        return HandoffResult(method=self.name, target=str(path))
