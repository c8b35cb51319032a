"""Deep-link hand-off provider for IdeaInbox.

Opens a custom-scheme URI (obsidian://new?vault=...&file=...&content=...)
with the system URL handler so the note app creates the note itself.

Configuration (via environment variables):
- IDEAINBOX_URI_SCHEME: URI scheme (defaults to "obsidian").
- IDEAINBOX_URI_ACTION: URI action/host (defaults to "new").
"""

from __future__ import annotations

import logging
import os
import webbrowser

from ..errors import HandoffError
from ..payload import SyncPayload, build_uri
from .base import BaseHandoffProvider, HandoffResult

log = logging.getLogger(__name__)


class DeepLinkProvider(BaseHandoffProvider):
    name: str = "deeplink"

    def __init__(self) -> None:
        self.scheme = os.environ.get("IDEAINBOX_URI_SCHEME", "").strip() or "obsidian"
        self.action = os.environ.get("IDEAINBOX_URI_ACTION", "").strip() or "new"

    def deliver(self, payload: SyncPayload) -> HandoffResult:
        if not payload.collection_name.strip():
            raise HandoffError(self.name, "no vault name configured; set one in settings first")

        uri = build_uri(payload, scheme=self.scheme, action=self.action)

        try:
            opened = webbrowser.open(uri)
        except webbrowser.Error as e:
            raise HandoffError(self.name, f"could not open link: {e}", target=uri)

        if not opened:
            raise HandoffError(self.name, f"no handler accepted the {self.scheme}:// link", target=uri)

        log.info(f"[{self.name}] opened {self.scheme}:// link for {payload.destination_ref}")
        return HandoffResult(method=self.name, target=uri)
