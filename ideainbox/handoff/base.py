"""Base hand-off provider interface for IdeaInbox.

A hand-off provider delivers a SyncPayload to the external note-taking
app: by clipboard, as a downloaded Markdown file, or through a
custom-scheme deep link. IdeaInbox does not verify that the app actually
received the note; a provider only reports whether its own step worked.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..payload import SyncPayload


@dataclass(frozen=True)
class HandoffResult:
    """Outcome of a successful hand-off."""

    method: str
    target: str  # clipboard command, written file path, or opened URI
    detail: str = ""


class BaseHandoffProvider(ABC):
    """Abstract base class for hand-off providers.

    Implementations raise HandoffError when their step fails so the
    caller can suggest another method.
    """

    name: str = "base"

    @abstractmethod
    def deliver(self, payload: SyncPayload) -> HandoffResult:
        raise NotImplementedError


class NoopHandoffProvider(BaseHandoffProvider):
    """A provider that delivers nothing. Useful for previews and tests."""

    name: str = "noop"

    def deliver(self, payload: SyncPayload) -> HandoffResult:
        return HandoffResult(method=self.name, target=payload.destination_ref, detail="not delivered")
