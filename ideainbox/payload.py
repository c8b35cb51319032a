"""Sync payload builder for IdeaInbox.

Combines a normalized Note with the user's Settings into everything a
hand-off provider needs: the export text (used byte-for-byte by both
clipboard and file hand-offs), a file base name, and a destination
reference inside the target collection.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List
from urllib.parse import quote

from unidecode import unidecode

from .normalizer import Note
from .storage import Settings

DEFAULT_FILE_BASE_NAME = "note"
NOTE_SUFFIX = ".md"


@dataclass(frozen=True)
class SyncPayload:
    file_base_name: str
    export_text: str
    destination_ref: str
    collection_name: str

    @property
    def file_name(self) -> str:
        return f"{self.file_base_name}{NOTE_SUFFIX}"


def format_tags(tags: Iterable[str]) -> List[str]:
    """Prefix each tag with '#' unless it already has one."""
    return [t if t.startswith("#") else f"#{t}" for t in tags]


def format_tag_line(tags: Iterable[str]) -> str:
    return " ".join(format_tags(tags))


def build_export_text(note: Note) -> str:
    tag_line = format_tag_line(note.tags)
    if not tag_line:
        return note.body
    return f"{note.body}\n\n{tag_line}"


def file_base_name(title: str) -> str:
    """Derive a deterministic, filesystem-safe base name from a title.

    Non-ASCII letters are transliterated first (so "Café" keeps its "e"),
    then everything outside [A-Za-z0-9] becomes '_'. A title with no
    letters or digits at all yields DEFAULT_FILE_BASE_NAME.
    """
    ascii_title = unidecode(title or "")
    if not re.search(r"[A-Za-z0-9]", ascii_title):
        return DEFAULT_FILE_BASE_NAME
    return re.sub(r"[^A-Za-z0-9]", "_", ascii_title)


def clean_sub_path(sub_path: str) -> str:
    return (sub_path or "").strip().strip("/").strip()


def destination_ref(settings: Settings, base_name: str) -> str:
    sub = clean_sub_path(settings.sub_path)
    return f"{sub}/{base_name}" if sub else base_name


def build_payload(note: Note, settings: Settings) -> SyncPayload:
    """Build the hand-off payload for a note.

    Never raises for well-formed inputs. An empty collection name is
    passed through untouched; rejecting it is the hand-off provider's job.
    """
    base = file_base_name(note.title)
    return SyncPayload(
        file_base_name=base,
        export_text=build_export_text(note),
        destination_ref=destination_ref(settings, base),
        collection_name=settings.collection_name,
    )


def build_uri(payload: SyncPayload, scheme: str = "obsidian", action: str = "new") -> str:
    """Build a custom-scheme URI that creates the note in the target app.

    Each component is escaped on its own; the composed URI is never
    escaped again.

    Returns:
        e.g. obsidian://new?vault=Main&file=Inbox%2FMy_Idea_&content=...
    """
    vault_param = quote(payload.collection_name, safe="")
    file_param = quote(payload.destination_ref, safe="")
    content_param = quote(payload.export_text, safe="")

    return f"{scheme}://{action}?vault={vault_param}&file={file_param}&content={content_param}"
