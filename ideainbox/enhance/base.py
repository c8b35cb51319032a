"""Base enhancer interface for IdeaInbox.

An enhancer turns raw note text into a Note. The local heuristic
normalizer and every external text-enhancement service sit behind the
same async interface so the session controller can swap them by
configuration.

Remote enhancers must raise EnhancementServiceError for transport
failures or unusable responses; the session controller then falls back
to the local enhancer. Responses that are usable but incomplete are
repaired field by field with coerce_note().
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from urllib import error as urlerror
from urllib import request as urlrequest

from ..errors import EnhancementServiceError
from ..normalizer import (
    MAX_LENGTH,
    MAX_TAGS,
    MIN_TAGS,
    TITLE_MAX,
    Note,
    NormalizerOptions,
    canonical_tag,
    clean_title,
    dedupe,
    normalize,
    validate_raw_text,
)

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class BaseEnhancer(ABC):
    """Abstract base class for enhancers."""

    name: str = "base"
    max_length: Optional[int] = MAX_LENGTH

    @abstractmethod
    async def enhance(self, raw_text: str) -> Note:
        """Produce a Note from raw text.

        Raises:
            ValidationError: raw_text is unusable (checked before any I/O).
            EnhancementServiceError: an external service failed.
        """
        raise NotImplementedError

    def validate_connection(self) -> bool:
        """True if the enhancer has what it needs to run.

        Default implementation returns True. Remote enhancers override it
        to check for API keys or endpoint URLs.
        """
        return True

    def validate_input(self, raw_text: object) -> str:
        """Check raw text against this enhancer's length bounds and trim it."""
        return validate_raw_text(raw_text, NormalizerOptions(max_length=self.max_length))


def coerce_note(data: Any, raw_text: str, provider: str) -> Note:
    """Turn an external {title, content, tags} response into a Note.

    Missing or malformed fields are replaced with the local normalizer's
    output for the same text, so the result never carries a partial
    note. A response that is not a JSON object at all is rejected.
    """
    if not isinstance(data, dict):
        raise EnhancementServiceError(provider, f"{provider} returned a non-object response")

    local = normalize(raw_text, max_length=None)

    title = data.get("title")
    title = clean_title(title, TITLE_MAX) if isinstance(title, str) else ""
    if not title:
        log.debug(f"[{provider}] response has no usable title, using local title")
        title = local.title

    body = data.get("content", data.get("body"))
    body = body.strip() if isinstance(body, str) else ""
    if not body:
        log.debug(f"[{provider}] response has no usable content, using local body")
        body = local.body
    elif not body.startswith("# "):
        body = f"# {title}\n\n{body}"

    raw_tags = data.get("tags")
    tags: List[str] = []
    if isinstance(raw_tags, list):
        tags = dedupe([canonical_tag(t) for t in raw_tags if isinstance(t, str)])
    else:
        log.debug(f"[{provider}] response has no tag list, using local tags")

    if len(tags) < MIN_TAGS:
        tags = dedupe([*tags, *local.tags])

    return Note(
        raw_text=raw_text,
        title=title,
        body=body,
        tags=tuple(tags[:MAX_TAGS]),
    )


def post_json(
    url: str,
    payload: Dict[str, Any],
    provider: str,
    timeout: float,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    """POST a JSON payload and decode the JSON response.

    Blocking; enhancers call it through asyncio.to_thread.
    """
    data = json.dumps(payload).encode("utf-8")
    req = urlrequest.Request(url, data=data, method="POST")
    req.add_header("Content-Type", "application/json")
    for key, value in (headers or {}).items():
        req.add_header(key, value)

    try:
        with urlrequest.urlopen(req, timeout=timeout) as resp:
            raw = resp.read()
    except urlerror.HTTPError as e:
        raise EnhancementServiceError(provider, f"HTTPError {e.code}: {e.reason}")
    except urlerror.URLError as e:
        raise EnhancementServiceError(provider, f"URLError: {e.reason}")
    except OSError as e:
        raise EnhancementServiceError(provider, f"connection failed: {e}")

    try:
        return json.loads(raw.decode("utf-8") or "{}")
    except UnicodeDecodeError as e:
        raise EnhancementServiceError(provider, f"{provider} returned a non-UTF-8 response: {e}")
    except json.JSONDecodeError as e:
        raise EnhancementServiceError(provider, f"{provider} returned invalid JSON: {e}")


def request_timeout() -> float:
    """Seconds to wait for a remote enhancer, from IDEAINBOX_REQUEST_TIMEOUT."""
    raw = os.environ.get("IDEAINBOX_REQUEST_TIMEOUT", "").strip()
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        raise RuntimeError(f"IDEAINBOX_REQUEST_TIMEOUT must be a number, got {raw!r}")
    if timeout <= 0:
        raise RuntimeError("IDEAINBOX_REQUEST_TIMEOUT must be positive")
    return timeout
