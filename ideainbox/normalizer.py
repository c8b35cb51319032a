"""Local note normalizer for IdeaInbox.

Turns raw free text into a structured Note (title, markdown body, tags)
without any network access. This is also the contract every external
enhancement service must satisfy: whatever comes back from a remote
service is coerced into the same shape (see ideainbox.enhance.base).

The tag and title thresholds below are tuning knobs rather than hard
rules; override them per call with NormalizerOptions.
"""

from __future__ import annotations

import datetime
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Sequence, Tuple

from .errors import ValidationError

MIN_LENGTH = 3
MAX_LENGTH = 5000
TITLE_MAX = 60
HEADING_LINE_MAX = 50
TOP_WORDS = 5
MIN_WORD_LENGTH = 4
MAX_TAGS = 8
MIN_TAGS = 3
QUICK_THRESHOLD = 100
DETAILED_THRESHOLD = 300

DEFAULT_TITLE = "Quick Note"
FALLBACK_TITLE = "My Note"
DEFAULT_TAGS: Tuple[str, ...] = ("note", "idea")
FALLBACK_TAGS: Tuple[str, ...] = ("note", "idea", "fallback")

MONTH_TAGS = (
    "jan", "feb", "mar", "apr", "may", "jun",
    "jul", "aug", "sep", "oct", "nov", "dec",
)

STOP_WORDS: FrozenSet[str] = frozenset({
    "the", "and", "for", "with", "this", "that", "from", "have", "has", "had",
    "was", "were", "are", "is", "be", "been", "being", "a", "an", "in", "on",
    "at", "to", "of", "by", "as", "or", "but", "not", "so", "if", "then", "else",
    "when", "where", "why", "how", "all", "any", "both", "each", "few", "more",
    "most", "other", "some", "such", "no", "nor", "too", "very", "can", "will",
    "just", "should", "now", "also", "well", "get", "got", "going",
})

# Characters that are unsafe in file names or are markdown punctuation.
UNSAFE_TITLE_CHARS = re.compile(r"[#*`\[\](){}<>:\"/\\|?]")
NUMBERED_MARKER = re.compile(r"^\d+[.)]\s*")
BULLET_MARKER = re.compile(r"^[-*+]\s*")

BULLET_LINE = re.compile(r"^[-*+]\s")
NUMBERED_LINE = re.compile(r"^\d+[.)]\s")


@dataclass(frozen=True)
class Note:
    """A normalized note, ready for preview and hand-off."""

    raw_text: str
    title: str
    body: str
    tags: Tuple[str, ...]


@dataclass(frozen=True)
class NormalizerOptions:
    min_length: int = MIN_LENGTH
    max_length: Optional[int] = MAX_LENGTH
    title_max: int = TITLE_MAX
    top_words: int = TOP_WORDS
    min_word_length: int = MIN_WORD_LENGTH
    max_tags: int = MAX_TAGS
    quick_threshold: int = QUICK_THRESHOLD
    detailed_threshold: int = DETAILED_THRESHOLD
    default_tags: Tuple[str, ...] = DEFAULT_TAGS
    stop_words: FrozenSet[str] = field(default=STOP_WORDS)


DEFAULT_OPTIONS = NormalizerOptions()


def validate_raw_text(raw_text: object, options: NormalizerOptions = DEFAULT_OPTIONS) -> str:
    """Check raw input and return it trimmed.

    Raises ValidationError for non-strings, blank input, or input outside
    the configured length bounds.
    """
    if raw_text is None or not isinstance(raw_text, str):
        raise ValidationError("Invalid input: please provide text content.")

    trimmed = raw_text.replace("\r\n", "\n").replace("\r", "\n").strip()

    if not trimmed:
        raise ValidationError("Note is empty. Please write something first.")

    if len(trimmed) < options.min_length:
        raise ValidationError(
            f"Note is too short. Please write at least {options.min_length} characters."
        )

    if options.max_length is not None and len(trimmed) > options.max_length:
        raise ValidationError(
            f"Note is too long. Please limit to {options.max_length} characters."
        )

    return trimmed


def clean_title(line: str, limit: int = TITLE_MAX) -> str:
    """Strip unsafe characters and list markers from a candidate title."""
    title = UNSAFE_TITLE_CHARS.sub("", line).strip()
    title = NUMBERED_MARKER.sub("", title)
    title = BULLET_MARKER.sub("", title)
    return title.strip()[:limit].strip()


def derive_title(text: str, options: NormalizerOptions = DEFAULT_OPTIONS) -> str:
    lines = [l for l in text.split("\n") if l.strip()]
    title = clean_title(lines[0], options.title_max) if lines else ""

    if len(title) < 2:
        # First line was mostly punctuation; fall back to significant words
        words = [w for w in text.split() if len(w) > 3]
        title = clean_title(" ".join(words[:5]), options.title_max)

    return title or DEFAULT_TITLE


def format_body(text: str, title: str) -> str:
    """Render the trimmed text as markdown with a leading top-level heading."""
    lines = [l.strip() for l in text.split("\n") if l.strip()]

    if len(lines) == 1:
        return f"# {title}\n\n{lines[0]}"

    out: List[str] = []
    for line in lines:
        if BULLET_LINE.match(line) or NUMBERED_LINE.match(line):
            out.append(line)
        elif line.endswith(":") and len(line) < HEADING_LINE_MAX:
            out.append(f"## {line}")
        else:
            out.append(line)

    body = "\n\n".join(out)
    if not body.startswith("# "):
        body = f"# {title}\n\n{body}"
    return body


def month_tag(today: Optional[datetime.date] = None) -> str:
    today = today or datetime.date.today()
    return MONTH_TAGS[today.month - 1]


def length_tag(text: str, options: NormalizerOptions = DEFAULT_OPTIONS) -> Optional[str]:
    if len(text) < options.quick_threshold:
        return "quick-note"
    if len(text) > options.detailed_threshold:
        return "detailed"
    return None


def frequent_words(text: str, options: NormalizerOptions = DEFAULT_OPTIONS) -> List[str]:
    """Return candidate tag words, most frequent first.

    Ties keep first-appearance order because Counter preserves insertion
    order and most_common() sorts stably.
    """
    cleaned = re.sub(r"[^a-z0-9\s]", " ", text.lower())
    words = [
        w for w in cleaned.split()
        if len(w) >= options.min_word_length
        and w not in options.stop_words
        and not w.isdigit()
    ]
    return [w for w, _ in Counter(words).most_common()]


def canonical_tag(tag: str) -> str:
    """Lowercase kebab-case form of a tag, without a leading '#'."""
    tag = tag.strip().lstrip("#").lower()
    tag = re.sub(r"\s+", "-", tag)
    tag = re.sub(r"[^a-z0-9\-_/]", "", tag)
    return tag.strip("-")


def dedupe(tags: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(t for t in tags if t))


def derive_tags(
    text: str,
    options: NormalizerOptions = DEFAULT_OPTIONS,
    today: Optional[datetime.date] = None,
) -> Tuple[str, ...]:
    """Build the tag list: frequent words, default tags, derived tags.

    Order is frequency first, then default tags, then derived tags. A
    frequent word that is also a default tag keeps its frequency slot.
    Default and derived tags always survive the cap; other frequent words
    give up room so the total never exceeds options.max_tags.
    """
    derived = [t for t in (length_tag(text, options), month_tag(today)) if t]
    fixed = dedupe([*options.default_tags, *derived])

    room = max(options.max_tags - len(fixed), 0)
    top: List[str] = []
    for word in frequent_words(text, options)[: options.top_words]:
        if word in fixed:
            top.append(word)
        elif room > 0:
            top.append(word)
            room -= 1

    return tuple(dedupe([*top, *fixed])[: options.max_tags])


def normalize(
    raw_text: object,
    *,
    max_length: Optional[int] = MAX_LENGTH,
    options: Optional[NormalizerOptions] = None,
    today: Optional[datetime.date] = None,
) -> Note:
    """Normalize raw text into a Note.

    Pure apart from reading the current date for the month tag. Pass
    ``max_length=None`` to skip the upper length check.
    """
    if options is None:
        options = NormalizerOptions(max_length=max_length)

    text = validate_raw_text(raw_text, options)
    title = derive_title(text, options)

    return Note(
        raw_text=raw_text,  # type: ignore[arg-type]
        title=title,
        body=format_body(text, title),
        tags=derive_tags(text, options, today),
    )


def fallback_note(raw_text: str) -> Note:
    """Minimal note that keeps the raw text verbatim.

    Used by callers that explicitly choose to skip normalization; it never
    inspects the content beyond trimming it.
    """
    content = (raw_text or "").strip()
    body = f"# {FALLBACK_TITLE}\n\n{content}" if content else f"# {FALLBACK_TITLE}"
    return Note(
        raw_text=raw_text or "",
        title=FALLBACK_TITLE,
        body=body,
        tags=FALLBACK_TAGS,
    )
