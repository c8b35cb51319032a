"""Proxy enhancer for IdeaInbox.

Sends the raw text to a small serverless proxy that holds the real AI
API key and answers with an already-shaped note:

    request:  POST {"content": "<raw text>"}
    response: {"title": "...", "content": "...", "tags": ["...", ...]}

Configuration (via environment variables):
- IDEAINBOX_PROXY_URL: required endpoint URL.
- IDEAINBOX_REQUEST_TIMEOUT: request timeout in seconds (default: 30).
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Optional

from ..errors import EnhancementServiceError
from ..normalizer import MAX_LENGTH, Note
from .base import BaseEnhancer, coerce_note, post_json, request_timeout

log = logging.getLogger(__name__)


class ProxyEnhancer(BaseEnhancer):
    name: str = "proxy"

    def __init__(self, max_length: Optional[int] = MAX_LENGTH) -> None:
        self.max_length = max_length
        self.url = os.environ.get("IDEAINBOX_PROXY_URL", "").strip()
        self.timeout = request_timeout()

    def validate_connection(self) -> bool:
        return bool(self.url)

    async def enhance(self, raw_text: str) -> Note:
        text = self.validate_input(raw_text)

        if not self.url:
            raise EnhancementServiceError(self.name, "IDEAINBOX_PROXY_URL is not set")

        log.info(f"[{self.name}] enhancing {len(text)} chars via {self.url}")
        data = await asyncio.to_thread(
            post_json, self.url, {"content": text}, self.name, self.timeout
        )

        if isinstance(data, dict) and data.get("error"):
            raise EnhancementServiceError(self.name, f"proxy error: {data['error']}")

        return coerce_note(data, raw_text, self.name)
