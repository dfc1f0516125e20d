"""Centralized configuration from environment variables with defaults."""

import os
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _bool(key: str, default: bool) -> bool:
    raw = os.environ.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in ("true", "1", "yes")


# ---------------------------------------------------------------------------
# Notification audience
# ---------------------------------------------------------------------------

def get_internal_inbox() -> str:
    """Address that receives notifications for homeowner-authored comments."""
    return os.environ.get("WARRANTY_INTERNAL_INBOX", "warranty-team@example.com").strip()


def get_company_name() -> str:
    """Company name used in generated service-order wording."""
    return os.environ.get("WARRANTY_COMPANY_NAME", "Warranty Services").strip()


# ---------------------------------------------------------------------------
# Dispatch (notifications and service orders)
# ---------------------------------------------------------------------------

def get_dispatch_config() -> dict[str, Any]:
    """Thread pool, timeout and retry settings for outbound notifications."""
    return {
        "max_workers": _int("WARRANTY_DISPATCH_MAX_WORKERS", 4),
        "timeout_seconds": _float("WARRANTY_DISPATCH_TIMEOUT_SECONDS", 10.0),
        "retry_attempts": _int("WARRANTY_DISPATCH_RETRY_ATTEMPTS", 3),
        "retry_min_wait": _float("WARRANTY_DISPATCH_RETRY_MIN_WAIT", 1.0),
        "retry_max_wait": _float("WARRANTY_DISPATCH_RETRY_MAX_WAIT", 8.0),
    }


# ---------------------------------------------------------------------------
# Lifecycle validation
# ---------------------------------------------------------------------------

def get_require_non_warranty_explanation() -> bool:
    """Whether a non-warranty classification needs an explanation (default: False)."""
    return _bool("WARRANTY_REQUIRE_NON_WARRANTY_EXPLANATION", False)


# ---------------------------------------------------------------------------
# Free-text limits
# ---------------------------------------------------------------------------

MAX_COMMENT_LENGTH = _int("WARRANTY_MAX_COMMENT_LENGTH", 5000)
MAX_NOTE_LENGTH = _int("WARRANTY_MAX_NOTE_LENGTH", 5000)
MAX_TEMPLATE_NAME_LENGTH = _int("WARRANTY_MAX_TEMPLATE_NAME_LENGTH", 200)
MAX_TEMPLATE_BODY_LENGTH = _int("WARRANTY_MAX_TEMPLATE_BODY_LENGTH", 5000)
