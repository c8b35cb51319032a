"""Enhancer registry for IdeaInbox.

This module wires together the base enhancer interface and concrete
implementations (local heuristics, Gemini, a serverless proxy) so that
the session controller can resolve a configured enhancer name into an
instance.
"""

from __future__ import annotations

import os
from typing import Callable, Dict, Optional

from ..normalizer import MAX_LENGTH
from .base import BaseEnhancer, coerce_note
from .local import LocalEnhancer

# Optional: remote enhancers
try:
    from .gemini import GeminiEnhancer
except Exception:
    GeminiEnhancer = None  # type: ignore

try:
    from .proxy import ProxyEnhancer
except Exception:
    ProxyEnhancer = None  # type: ignore


_PROVIDER_FACTORIES: Dict[str, Callable[[Optional[int]], BaseEnhancer]] = {}


def _register_defaults() -> None:
    """Populate the registry with built-in enhancers.

    Kept lazy so that importing ideainbox.enhance does not construct any
    remote client until one is asked for.
    """

    if _PROVIDER_FACTORIES:
        return

    # Always available: offline heuristics
    _PROVIDER_FACTORIES["local"] = LocalEnhancer

    if GeminiEnhancer is not None:
        _PROVIDER_FACTORIES["gemini"] = GeminiEnhancer

    if ProxyEnhancer is not None:
        _PROVIDER_FACTORIES["proxy"] = ProxyEnhancer


def get_provider(name: Optional[str], max_length: Optional[int] = MAX_LENGTH) -> BaseEnhancer:
    """Return an enhancer instance for the given name.

    If the name is None, empty, or unknown, the local enhancer is
    returned so that processing always works offline. max_length is
    the upper input bound the enhancer enforces (None disables it).
    """

    _register_defaults()

    if not name:
        return LocalEnhancer(max_length)

    key = name.strip().lower()
    factory = _PROVIDER_FACTORIES.get(key)
    if factory is None:
        return LocalEnhancer(max_length)

    return factory(max_length)


def provider_from_env() -> BaseEnhancer:
    """Resolve an enhancer based on IDEAINBOX_ENHANCER."""

    name = os.environ.get("IDEAINBOX_ENHANCER", "").strip() or None
    return get_provider(name)


__all__ = [
    "BaseEnhancer",
    "LocalEnhancer",
    "coerce_note",
    "get_provider",
    "provider_from_env",
]
