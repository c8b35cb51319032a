"""Session controller for IdeaInbox.

The controller owns everything one capture session touches: the
Settings value, the draft text and its debounced autosave, the current
Note, and the editing/preview view state. Every user action is a method
that returns an ActionResult; failures are caught here and turned into a
message plus a safe state, so the draft and settings always stay what
they were before a failed action.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .draft import DEFAULT_DEBOUNCE_MS, DraftAutosaver
from .enhance import BaseEnhancer, LocalEnhancer
from .errors import EnhancementServiceError, HandoffError, ValidationError
from .handoff import BaseHandoffProvider, HandoffResult, alternatives
from .handoff import get_provider as get_handoff_provider
from .normalizer import MAX_LENGTH, NormalizerOptions, Note, fallback_note, validate_raw_text
from .payload import SyncPayload, build_payload, clean_sub_path
from .storage import DraftRepository, Settings, SettingsRepository

log = logging.getLogger(__name__)


class ViewState(Enum):
    EDITING = "editing"
    PREVIEW = "preview"


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    message: str
    note: Optional[Note] = None
    handoff: Optional[HandoffResult] = None


class SessionController:
    def __init__(
        self,
        settings_repo: SettingsRepository,
        draft_repo: DraftRepository,
        enhancer: Optional[BaseEnhancer] = None,
        *,
        local_enhancer: Optional[BaseEnhancer] = None,
        handoff_factory: Callable[[Optional[str]], BaseHandoffProvider] = get_handoff_provider,
        handoff_method: Optional[str] = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        max_length: Optional[int] = MAX_LENGTH,
        autosaver: Optional[DraftAutosaver] = None,
    ) -> None:
        self._settings_repo = settings_repo
        self._draft_repo = draft_repo
        self.autosaver = autosaver or DraftAutosaver(draft_repo, debounce_ms)

        self.max_length = max_length
        self.enhancer = enhancer or LocalEnhancer(max_length)
        self._local = local_enhancer or LocalEnhancer(max_length)
        self._handoff_factory = handoff_factory
        self.handoff_method = handoff_method

        self.settings: Settings = settings_repo.load()
        self.text: str = draft_repo.load()
        self.note: Optional[Note] = None
        self.view = ViewState.EDITING
        self._busy = False

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def can_process(self) -> bool:
        return bool(self.text.strip()) and not self._busy

    def edit(self, text: str) -> None:
        """Replace the draft text and schedule a debounced persist."""
        self.text = text
        self.autosaver.update(text)

    def discard(self) -> ActionResult:
        """Drop the draft and any processed note. Settings are untouched."""
        self.autosaver.clear()
        self.text = ""
        self.note = None
        self.view = ViewState.EDITING
        return ActionResult(True, "Draft cleared.")

    def back_to_edit(self) -> None:
        self.view = ViewState.EDITING

    def close(self) -> None:
        """Persist any pending draft write before shutting down."""
        self.autosaver.flush()

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    async def process(self) -> ActionResult:
        """Turn the current text into a Note and switch to preview.

        Only one request may be in flight; a second call while busy is
        refused without touching the enhancer. If the configured enhancer
        is a remote service and it fails, the local normalizer is used
        instead so the user always reaches a preview.
        """
        if self._busy:
            return ActionResult(False, "Already processing; wait for the current note to finish.")

        try:
            validate_raw_text(self.text, NormalizerOptions(max_length=self.max_length))
        except ValidationError as e:
            log.info(f"[process] rejected input: {e}")
            return ActionResult(False, str(e))

        self._busy = True
        try:
            try:
                note = await self.enhancer.enhance(self.text)
                message = "Note ready for review."
            except EnhancementServiceError as e:
                log.warning(f"[process] {e.provider} enhancement failed, using local formatting: {e}")
                note = await self._local.enhance(self.text)
                message = f"Enhancement service unavailable ({e}); used local formatting instead."
        except ValidationError as e:
            log.info(f"[process] rejected input: {e}")
            return ActionResult(False, str(e))
        finally:
            self._busy = False

        self.note = note
        self.view = ViewState.PREVIEW
        log.info(f"[process] {self.enhancer.name} produced {note.title!r} with {len(note.tags)} tags")
        return ActionResult(True, message, note=note)

    def use_verbatim(self) -> ActionResult:
        """Preview the raw text as-is under a generic title."""
        if not self.text.strip():
            return ActionResult(False, "Nothing to keep; write something first.")

        self.note = fallback_note(self.text)
        self.view = ViewState.PREVIEW
        return ActionResult(True, "Keeping your text as written.", note=self.note)

    # ------------------------------------------------------------------
    # Hand-off
    # ------------------------------------------------------------------

    def payload(self) -> Optional[SyncPayload]:
        if self.note is None:
            return None
        return build_payload(self.note, self.settings)

    def send(self, method: Optional[str] = None) -> ActionResult:
        """Hand the current note to the external app.

        A failed hand-off never ends the session; the message suggests
        the other methods.
        """
        payload = self.payload()
        if payload is None:
            return ActionResult(False, "Nothing to send; process a note first.")

        method = method or self.handoff_method
        try:
            provider = self._handoff_factory(method)
        except KeyError as e:
            return ActionResult(False, str(e.args[0]) if e.args else str(e), note=self.note)

        try:
            result = provider.deliver(payload)
        except HandoffError as e:
            others = alternatives(e.method)
            hint = f" Try {' or '.join(others)} instead." if others else ""
            log.warning(f"[send] {e.method} hand-off failed: {e}")
            return ActionResult(False, f"{e}.{hint}", note=self.note)

        log.info(f"[send] {result.method} -> {result.target}")
        return ActionResult(True, _success_message(result, payload), note=self.note, handoff=result)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def save_settings(self, collection_name: str, sub_path: str = "") -> ActionResult:
        """Persist new settings as one object, then adopt them."""
        updated = Settings(
            collection_name=(collection_name or "").strip(),
            sub_path=clean_sub_path(sub_path),
        )
        try:
            self._settings_repo.save(updated)
        except sqlite3.Error as e:
            log.error(f"[settings] failed to save settings: {e}")
            return ActionResult(False, f"Could not save settings: {e}")

        self.settings = updated
        return ActionResult(True, "Settings saved.")


def _success_message(result: HandoffResult, payload: SyncPayload) -> str:
    if result.method == "clipboard":
        return f"Copied to clipboard. Paste it into a new note named {payload.file_name}."
    if result.method == "file":
        return f"Saved {result.target}. Move it into your vault at {payload.destination_ref}.md."
    if result.method == "deeplink":
        return f"Opened {payload.collection_name} to create {payload.destination_ref}."
    return f"Prepared {payload.file_name} (not delivered)."
