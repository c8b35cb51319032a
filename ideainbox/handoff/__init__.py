"""Hand-off provider registry for IdeaInbox.

This module wires together the base provider interface and concrete
implementations (clipboard, file download, deep link) so that the
session controller can resolve a hand-off method name into a provider.
"""

from __future__ import annotations

import os
from typing import Callable, Dict, List, Optional

from .base import BaseHandoffProvider, HandoffResult, NoopHandoffProvider
from .clipboard import ClipboardProvider
from .deeplink import DeepLinkProvider
from .file import FileDownloadProvider

DEFAULT_METHOD = "clipboard"

_PROVIDER_FACTORIES: Dict[str, Callable[[], BaseHandoffProvider]] = {}


def _register_defaults() -> None:
    if _PROVIDER_FACTORIES:
        return

    _PROVIDER_FACTORIES["noop"] = lambda: NoopHandoffProvider()
    _PROVIDER_FACTORIES["clipboard"] = lambda: ClipboardProvider()
    _PROVIDER_FACTORIES["file"] = lambda: FileDownloadProvider()
    _PROVIDER_FACTORIES["deeplink"] = lambda: DeepLinkProvider()


def available_methods() -> List[str]:
    """Real hand-off methods, in suggestion order."""
    _register_defaults()
    return [name for name in _PROVIDER_FACTORIES if name != "noop"]


def alternatives(name: str) -> List[str]:
    """Methods worth suggesting after `name` failed."""
    key = (name or "").strip().lower()
    return [m for m in available_methods() if m != key]


def get_provider(name: Optional[str]) -> BaseHandoffProvider:
    """Return a hand-off provider for the given name.

    None or empty resolves to the clipboard provider. Unknown names raise
    KeyError so a typo never silently sends the note somewhere else.
    """

    _register_defaults()

    key = (name or DEFAULT_METHOD).strip().lower()
    factory = _PROVIDER_FACTORIES.get(key)
    if factory is None:
        raise KeyError(f"unknown hand-off method {name!r}; choose one of {', '.join(_PROVIDER_FACTORIES)}")

    return factory()


def provider_from_env() -> BaseHandoffProvider:
    """Resolve a provider based on IDEAINBOX_HANDOFF."""

    name = os.environ.get("IDEAINBOX_HANDOFF", "").strip() or None
    return get_provider(name)


__all__ = [
    "BaseHandoffProvider",
    "HandoffResult",
    "NoopHandoffProvider",
    "alternatives",
    "available_methods",
    "get_provider",
    "provider_from_env",
]
