"""Error types shared across IdeaInbox.

All errors derive from IdeaInboxError so the CLI and the session
controller can catch them at the action boundary and turn them into a
user-visible message.
"""

from __future__ import annotations

from typing import Optional


class IdeaInboxError(Exception):
    """Base class for IdeaInbox failures."""


class ValidationError(IdeaInboxError):
    """Raw note text is missing, too short, or too long."""


class EnhancementServiceError(IdeaInboxError):
    """An external text-enhancement service failed or returned junk."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(message)


class HandoffError(IdeaInboxError):
    """Delivering a note to the external app failed."""

    def __init__(self, method: str, message: str, target: Optional[str] = None):
        self.method = method
        self.target = target
        super().__init__(message)
