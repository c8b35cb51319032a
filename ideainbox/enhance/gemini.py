"""Gemini enhancer for IdeaInbox.

Asks the Google Generative Language REST API to restructure the raw
text as JSON with a title, markdown content and a few tags, using the
API's structured-output mode so the reply is a bare JSON object.

Configuration (via environment variables):
- IDEAINBOX_GEMINI_API_KEY: required API key.
- IDEAINBOX_GEMINI_MODEL: model name (defaults to gemini-2.0-flash).
- IDEAINBOX_GEMINI_BASE_URL: optional override of the base REST URL
  (defaults to https://generativelanguage.googleapis.com/v1beta).
- IDEAINBOX_REQUEST_TIMEOUT: request timeout in seconds (default: 30).
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any, Dict, Optional

from ..errors import EnhancementServiceError
from ..normalizer import MAX_LENGTH, Note
from .base import BaseEnhancer, coerce_note, post_json, request_timeout

log = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

PROMPT = (
    "Analyze this idea and return JSON with: title, content (markdown), "
    "and 3 tags.\nIdea: {text}"
)

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING"},
        "content": {"type": "STRING"},
        "tags": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
    "required": ["title", "content", "tags"],
}


class GeminiEnhancer(BaseEnhancer):
    name: str = "gemini"

    def __init__(self, max_length: Optional[int] = MAX_LENGTH) -> None:
        self.max_length = max_length
        self._api_key = os.environ.get("IDEAINBOX_GEMINI_API_KEY", "").strip()
        self.model = os.environ.get("IDEAINBOX_GEMINI_MODEL", "").strip() or DEFAULT_MODEL
        # Allow overriding the base URL for testing or regional endpoints.
        self._base_url = (
            os.environ.get("IDEAINBOX_GEMINI_BASE_URL", DEFAULT_BASE_URL)
            .strip()
            .rstrip("/")
        )
        self.timeout = request_timeout()

    def validate_connection(self) -> bool:
        return bool(self._api_key)

    def _build_request(self, text: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": PROMPT.format(text=text)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    def _extract_payload(self, data: Any) -> Any:
        """Pull the JSON note out of a generateContent response."""
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise EnhancementServiceError(self.name, "response has no candidate text")

        try:
            return json.loads(text)
        except (TypeError, json.JSONDecodeError) as e:
            raise EnhancementServiceError(self.name, f"candidate text is not JSON: {e}")

    async def enhance(self, raw_text: str) -> Note:
        text = self.validate_input(raw_text)

        if not self._api_key:
            raise EnhancementServiceError(self.name, "IDEAINBOX_GEMINI_API_KEY is not set")

        url = f"{self._base_url}/models/{self.model}:generateContent"
        log.info(f"[{self.name}] enhancing {len(text)} chars with {self.model}")

        data = await asyncio.to_thread(
            post_json,
            url,
            self._build_request(text),
            self.name,
            self.timeout,
            {"x-goog-api-key": self._api_key},
        )
        return coerce_note(self._extract_payload(data), raw_text, self.name)
