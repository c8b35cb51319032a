"""Clipboard hand-off provider for IdeaInbox.

Pipes the export text into the first platform clipboard tool found on
PATH. The user then pastes it into a new note by hand.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import List, Optional, Sequence

from ..errors import HandoffError
from ..payload import SyncPayload
from .base import BaseHandoffProvider, HandoffResult

log = logging.getLogger(__name__)

CLIPBOARD_COMMANDS: Sequence[List[str]] = (
    ["pbcopy"],
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["clip"],
)


class ClipboardProvider(BaseHandoffProvider):
    name: str = "clipboard"

    def __init__(self, commands: Sequence[List[str]] = CLIPBOARD_COMMANDS) -> None:
        self.commands = commands

    def _find_command(self) -> Optional[List[str]]:
        for cmd in self.commands:
            if shutil.which(cmd[0]):
                return list(cmd)
        return None

    def deliver(self, payload: SyncPayload) -> HandoffResult:
        cmd = self._find_command()
        if cmd is None:
            raise HandoffError(self.name, "no clipboard tool found on PATH")

        try:
            subprocess.run(
                cmd,
                input=payload.export_text,
                encoding="utf-8",
                capture_output=True,
                check=True,
                timeout=10,
            )
        except FileNotFoundError:
            raise HandoffError(self.name, f"{cmd[0]} disappeared from PATH", target=cmd[0])
        except subprocess.CalledProcessError as e:
            msg = (e.stderr or "").strip() or str(e)
            raise HandoffError(self.name, f"{cmd[0]} failed: {msg}", target=cmd[0])
        except subprocess.TimeoutExpired:
            raise HandoffError(self.name, f"{cmd[0]} timed out", target=cmd[0])

        log.info(f"[{self.name}] copied {len(payload.export_text)} chars with {cmd[0]}")
        return HandoffResult(method=self.name, target=cmd[0], detail=payload.file_name)
