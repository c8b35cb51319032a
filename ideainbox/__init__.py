"""IdeaInbox: capture a quick idea and hand it off to your notes vault.

IdeaInbox turns a scrap of free text into a structured note (title,
markdown body, tags), either with a local heuristic normalizer or an
external text-enhancement service, and hands the result to a note-taking
app via clipboard, a downloaded Markdown file, or a custom-URI deep link.
Settings and the in-progress draft are persisted between runs.
"""

from __future__ import annotations

from .__version__ import __version__

__all__ = ["__version__"]
