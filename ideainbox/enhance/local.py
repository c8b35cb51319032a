"""Local enhancer: the offline heuristic normalizer behind the async interface."""

from __future__ import annotations

from typing import Optional

from ..normalizer import MAX_LENGTH, Note, normalize
from .base import BaseEnhancer


class LocalEnhancer(BaseEnhancer):
    name: str = "local"

    def __init__(self, max_length: Optional[int] = MAX_LENGTH) -> None:
        self.max_length = max_length

    async def enhance(self, raw_text: str) -> Note:
        return normalize(raw_text, max_length=self.max_length)
