"""Claim-aware logging.

Every lifecycle transition and dispatch outcome is logged as an *event*: a
message of the form ``[event] key=value, ...`` with the same data attached to
the record as ``extra_data``. The claim a record belongs to comes from either
the record itself (``claim_id`` / ``claim_number`` extras) or the thread-local
context opened by ``claim_context``; the record wins when both are set.

Output format is chosen once per handler: JSON lines (``StructuredFormatter``)
or a single human-readable line (``HumanReadableFormatter``).
"""

import json
import logging
import os
import sys
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Optional

_CONTEXT_FIELDS = ("claim_id", "claim_number", "correlation_id", "actor")

_local = threading.local()


def _get_claim_context() -> dict[str, Any]:
    return getattr(_local, "claim", {})


def _set_claim_context(data: dict[str, Any]) -> None:
    _local.claim = data


def _context_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Claim fields for a record: thread context overlaid with record extras."""
    fields = {k: v for k, v in _get_claim_context().items() if k in _CONTEXT_FIELDS and v}
    for key in ("claim_id", "claim_number"):
        value = getattr(record, key, None)
        if value:
            fields[key] = value
    return fields


def _event_data(record: logging.LogRecord) -> dict[str, Any]:
    return dict(getattr(record, "extra_data", None) or {})


class StructuredFormatter(logging.Formatter):
    """One JSON object per record; ``event`` and claim fields are top-level keys."""

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.include_timestamp:
            payload["timestamp"] = datetime.fromtimestamp(record.created, timezone.utc).isoformat()

        payload.update(_context_fields(record))
        data = _event_data(record)
        event = data.pop("event", None)
        if event:
            payload["event"] = event
        if data:
            payload["data"] = data
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        payload["source"] = f"{record.filename}:{record.lineno}"
        return json.dumps(payload, default=str)


class HumanReadableFormatter(logging.Formatter):
    """``<utc time> LEVEL [claim=..., number=...] logger: message``"""

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        fields = _context_fields(record)
        labels = []
        if "claim_id" in fields:
            labels.append(f"claim={fields['claim_id']}")
        if "claim_number" in fields:
            labels.append(f"number={fields['claim_number']}")
        if "actor" in fields:
            labels.append(f"by={fields['actor']}")
        prefix = f" [{', '.join(labels)}]" if labels else ""
        line = f"{stamp} {record.levelname:8}{prefix} {record.name}: {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class ClaimLogger(logging.LoggerAdapter):
    """Adapter that stamps one claim's id and number onto every record."""

    def __init__(self, logger: logging.Logger, claim_id: Optional[str] = None):
        super().__init__(logger, {})
        self._claim_id = claim_id
        self._claim_number: Optional[str] = None

    def set_claim_id(self, claim_id: str) -> None:
        self._claim_id = claim_id

    def set_claim_number(self, claim_number: str) -> None:
        self._claim_number = claim_number

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        if not extra.get("claim_id"):
            extra["claim_id"] = self._claim_id
        if not extra.get("claim_number"):
            extra["claim_number"] = self._claim_number
        kwargs["extra"] = extra
        return msg, kwargs

    def log_event(self, event: str, level: int = logging.INFO, **data: Any) -> None:
        log_claim_event(self, event, claim_id=self._claim_id, level=level, **data)


def _make_handler(structured: Optional[bool]) -> logging.Handler:
    if structured is None:
        structured = os.environ.get("WARRANTY_CLAIMS_LOG_FORMAT", "human").strip().lower() == "json"
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if structured else HumanReadableFormatter())
    return handler


def _level_from_env() -> int:
    name = os.environ.get("WARRANTY_CLAIMS_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(
    name: str,
    claim_id: Optional[str] = None,
    structured: Optional[bool] = None,
) -> ClaimLogger:
    """Return a ClaimLogger for ``name``, installing a stdout handler on first use.

    ``structured=None`` reads WARRANTY_CLAIMS_LOG_FORMAT (``json`` or ``human``);
    the level comes from WARRANTY_CLAIMS_LOG_LEVEL. A configured logger does not
    propagate, so records are not printed twice by a root handler.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.addHandler(_make_handler(structured))
        logger.setLevel(_level_from_env())
        logger.propagate = False
    return ClaimLogger(logger, claim_id)


def configure_logging(structured: Optional[bool] = None) -> ClaimLogger:
    """Install the package handler so every warranty_claims.* logger is formatted."""
    return get_logger("warranty_claims", structured=structured)


@contextmanager
def claim_context(
    claim_id: str,
    claim_number: Optional[str] = None,
    actor: Optional[str] = None,
    **extra: Any,
):
    """Attach a claim (and a fresh correlation id) to every record in the block.

    Contexts nest; the previous one is restored on exit.

        with claim_context(claim.id, claim.claim_number, actor="Jane"):
            log_claim_event(logger, "date_proposed", slot="AM")
    """
    previous = _get_claim_context()
    _set_claim_context(
        {
            "claim_id": claim_id,
            "claim_number": claim_number,
            "correlation_id": str(uuid.uuid4()),
            "actor": actor,
            **extra,
        }
    )
    try:
        yield
    finally:
        _set_claim_context(previous)


def log_claim_event(
    logger: logging.Logger | ClaimLogger,
    event: str,
    claim_id: Optional[str] = None,
    level: int = logging.INFO,
    **data: Any,
) -> None:
    """Log ``[event] k=v, ...`` with the event and its data attached as ``extra_data``."""
    details = ", ".join(f"{k}={v}" for k, v in data.items())
    message = f"[{event}] {details}" if details else f"[{event}]"
    logger.log(level, message, extra={"claim_id": claim_id, "extra_data": {"event": event, **data}})
