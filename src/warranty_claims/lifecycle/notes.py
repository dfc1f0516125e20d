"""Admin-only internal notes stored as one append-only text blob.

Entries are separated by a blank line. Two entry formats exist:

- current:  ``"03/01/2025 at 9:05 AM by Jane Admin\\nText of the note"``
- legacy:   ``"[3/1/2025, 9:05:00 AM] Text of the note"``

``parse_notes`` never raises. Blocks that match neither format come back as
``RawNote`` with only surrounding whitespace removed.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from warranty_claims.models.claim import Claim
from warranty_claims.utils.sanitization import sanitize_author, sanitize_note

ENTRY_SEPARATOR = "\n\n"

_BLOCK_SPLIT = re.compile(r"\n(?:[ \t]*\n)+")
_STRUCTURED_HEADER = re.compile(
    r"^(?P<date>\d{1,2}/\d{1,2}/\d{4}) at (?P<time>\d{1,2}:\d{2}\s?[APap][Mm]) by (?P<author>.+)$"
)
_LEGACY_ENTRY = re.compile(r"^\[(?P<timestamp>[^\]\n]+)\]\s*(?P<text>.*)$", re.DOTALL)

_LEGACY_FORMATS = (
    "%m/%d/%Y, %I:%M:%S %p",
    "%m/%d/%Y, %I:%M %p",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %I:%M %p",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
)


@dataclass(frozen=True)
class StructuredNote:
    timestamp: str
    author: str
    text: str
    recorded_at: Optional[datetime] = None


@dataclass(frozen=True)
class LegacyNote:
    timestamp: str
    text: str
    recorded_at: Optional[datetime] = None


@dataclass(frozen=True)
class RawNote:
    text: str


NoteEntry = Union[StructuredNote, LegacyNote, RawNote]


def format_note_timestamp(now: datetime) -> str:
    """``MM/DD/YYYY at h:MM AM``"""
    hour = now.strftime("%I").lstrip("0") or "12"
    return f"{now:%m/%d/%Y} at {hour}:{now:%M} {now:%p}"


def format_note_entry(text: str, author: str, now: datetime) -> str:
    return f"{format_note_timestamp(now)} by {author}\n{text}"


def append_note_entry(notes: str, entry: str) -> str:
    return f"{notes}{ENTRY_SEPARATOR}{entry}" if notes else entry


def add_internal_note(claim: Claim, text: str, author: str, now: datetime) -> Claim:
    """Append a timestamped entry to the claim's notes blob.

    Raises:
        ValueError: the note text is empty after sanitization.
    """
    cleaned = sanitize_note(text)
    if not cleaned:
        raise ValueError("Note text is required")
    author = sanitize_author(author) or "Admin"
    entry = format_note_entry(cleaned, author, now)
    return claim.model_copy(
        update={"internal_notes": append_note_entry(claim.internal_notes, entry)},
        deep=True,
    )


def _parse_datetime(value: str, formats: tuple[str, ...]) -> Optional[datetime]:
    value = value.strip()
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in formats:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def _parse_block(block: str) -> NoteEntry:
    first_line, _, rest = block.partition("\n")
    header = _STRUCTURED_HEADER.match(first_line.strip())
    if header:
        compact_time = re.sub(r"\s+", "", header.group("time")).upper()
        recorded_at = _parse_datetime(
            f"{header.group('date')} {compact_time}", ("%m/%d/%Y %I:%M%p",)
        )
        return StructuredNote(
            timestamp=f"{header.group('date')} at {header.group('time')}",
            author=header.group("author").strip(),
            text=rest.strip(),
            recorded_at=recorded_at,
        )
    legacy = _LEGACY_ENTRY.match(block.strip())
    if legacy:
        timestamp = legacy.group("timestamp").strip()
        return LegacyNote(
            timestamp=timestamp,
            text=legacy.group("text").strip(),
            recorded_at=_parse_datetime(timestamp, _LEGACY_FORMATS),
        )
    return RawNote(text=block)


def parse_notes(notes: Optional[str]) -> list[NoteEntry]:
    """Split the blob into entries, oldest first."""
    if not notes or not notes.strip():
        return []
    blocks = [b.strip() for b in _BLOCK_SPLIT.split(notes.strip()) if b.strip()]
    return [_parse_block(b) for b in blocks]


def count_note_entries(notes: Optional[str]) -> int:
    return len(parse_notes(notes))
