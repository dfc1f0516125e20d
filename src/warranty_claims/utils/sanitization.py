"""Free-text sanitization for comments, internal notes and templates."""

import re

from warranty_claims.config.settings import (
    MAX_COMMENT_LENGTH,
    MAX_NOTE_LENGTH,
    MAX_TEMPLATE_BODY_LENGTH,
    MAX_TEMPLATE_NAME_LENGTH,
)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_BLANK_LINE_RUN = re.compile(r"\n[ \t]*(?:\n[ \t]*)+")


def sanitize_text(text: str | None, max_length: int) -> str:
    """Strip control characters, normalize newlines and truncate to max_length."""
    if text is None or not isinstance(text, str):
        return ""
    cleaned = text.replace("\r\n", "\n").replace("\r", "\n")
    # Remove control characters (0x00-0x1F except tab/newline)
    cleaned = _CONTROL_CHARS.sub("", cleaned)
    cleaned = cleaned.strip()
    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length].rstrip()
    return cleaned


def collapse_blank_lines(text: str) -> str:
    """Replace runs of blank lines with a single newline."""
    return _BLANK_LINE_RUN.sub("\n", text)


def sanitize_comment(text: str | None) -> str:
    return sanitize_text(text, MAX_COMMENT_LENGTH)


def sanitize_note(text: str | None) -> str:
    """Sanitize note text so it cannot introduce an entry boundary (blank line)."""
    return collapse_blank_lines(sanitize_text(text, MAX_NOTE_LENGTH))


def sanitize_author(name: str | None) -> str:
    """Single-line author name: control characters stripped, whitespace runs collapsed."""
    return " ".join(sanitize_text(name, MAX_TEMPLATE_NAME_LENGTH).split())


def sanitize_template_fields(name: str | None, subject: str | None, body: str | None) -> tuple[str, str, str]:
    """Return (name, subject, body) cleaned and capped to their limits."""
    return (
        sanitize_text(name, MAX_TEMPLATE_NAME_LENGTH),
        sanitize_text(subject, MAX_TEMPLATE_NAME_LENGTH),
        sanitize_text(body, MAX_TEMPLATE_BODY_LENGTH),
    )
