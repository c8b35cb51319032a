"""Debounced draft autosave.

Edits arrive in bursts while the user types. DraftAutosaver keeps at
most one pending write: every update cancels the scheduled write and
schedules a new one, so only the latest text is ever persisted.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .storage import DraftRepository

log = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 500

TimerFactory = Callable[[float, Callable[[], None]], threading.Timer]


class DraftAutosaver:
    def __init__(
        self,
        repo: DraftRepository,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        timer_factory: Optional[TimerFactory] = None,
    ) -> None:
        self.repo = repo
        self.debounce_ms = debounce_ms
        self._timer_factory = timer_factory or threading.Timer
        self._lock = threading.Lock()
        # Held across every repo write so a discard never interleaves with a save
        self._write_lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[str] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def update(self, text: str) -> None:
        """Record a new draft value and (re)start the debounce window."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = text
            self._generation += 1
            generation = self._generation
            timer = self._timer_factory(self.debounce_ms / 1000.0, lambda: self._fire(generation))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def _fire(self, generation: int) -> None:
        with self._write_lock:
            with self._lock:
                # Superseded by a newer update or cancelled after expiring
                if generation != self._generation or self._timer is None:
                    return
                text = self._pending
                self._pending = None
                self._timer = None

            if text is not None:
                self._write(text)

    def flush(self) -> None:
        """Write the pending value immediately, if any."""
        with self._write_lock:
            with self._lock:
                if self._timer is not None:
                    self._timer.cancel()
                text = self._pending
                self._pending = None
                self._timer = None

            if text is not None:
                self._write(text)

    def cancel(self) -> None:
        """Drop the pending value without writing it."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = None
            self._timer = None

    def clear(self) -> None:
        """Cancel any pending write and clear the persisted draft.

        Waits for a save already in progress, so the discarded text can
        never land after the clear.
        """
        with self._write_lock:
            self.cancel()
            self.repo.clear()

    def _write(self, text: str) -> None:
        try:
            self.repo.save(text)
        except Exception as e:
            log.warning(f"[draft] failed to persist draft: {e}")
