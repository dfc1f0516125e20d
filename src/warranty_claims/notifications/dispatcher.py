"""Best-effort outbound notification delivery.

``NotificationDispatcher.send`` never raises: transient transport errors are
retried with exponential backoff, and anything still failing is returned as a
``DispatchResult`` with ``ok=False`` and logged as a warning. ``submit`` runs
the same delivery on a thread pool so callers never wait on the transport.
"""

import logging
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol

from warranty_claims.config.settings import get_dispatch_config
from warranty_claims.observability.logger import log_claim_event
from warranty_claims.utils.retry import with_dispatch_retry

logger = logging.getLogger(__name__)


@dataclass
class OutboundAttachment:
    """File sent with a message: inline bytes or a stored-file reference."""

    filename: str
    media_type: str
    content: Optional[bytes] = None
    url: Optional[str] = None


@dataclass
class OutboundMessage:
    to: str
    subject: str
    body: str
    attachments: list[OutboundAttachment] = field(default_factory=list)
    claim_id: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class DispatchResult:
    """Ack (ok=True) or DispatchFailure (ok=False, error set)."""

    ok: bool
    message_id: str
    to: str
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def failed(self) -> bool:
        return not self.ok

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "message_id": self.message_id,
            "to": self.to,
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
        }


class Transport(Protocol):
    """Delivers one message or raises. ``timeout`` bounds a single attempt."""

    def deliver(self, message: OutboundMessage, timeout: float) -> None: ...


class OutboxTransport:
    """Default transport: keeps a local record of every message and logs it."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sent: list[OutboundMessage] = []

    def deliver(self, message: OutboundMessage, timeout: float) -> None:
        with self._lock:
            self._sent.append(message)
        logger.info(
            "Outbox: to=%s subject=%r attachments=%d",
            message.to,
            message.subject,
            len(message.attachments),
        )

    @property
    def sent(self) -> list[OutboundMessage]:
        with self._lock:
            return list(self._sent)


class NotificationDispatcher:
    """Sends notifications through a transport without ever failing the caller."""

    def __init__(
        self,
        transport: Optional[Transport] = None,
        config: Optional[dict[str, Any]] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        cfg = {**get_dispatch_config(), **(config or {})}
        self._transport = transport or OutboxTransport()
        self._timeout = float(cfg["timeout_seconds"])
        self._deliver = with_dispatch_retry(
            max_attempts=int(cfg["retry_attempts"]),
            min_wait=float(cfg["retry_min_wait"]),
            max_wait=float(cfg["retry_max_wait"]),
        )(self._transport.deliver)
        self._executor = executor or ThreadPoolExecutor(
            max_workers=int(cfg["max_workers"]), thread_name_prefix="notify"
        )
        self._pending: set[Future] = set()
        self._pending_lock = threading.Lock()

    @property
    def transport(self) -> Transport:
        return self._transport

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        attachments: Optional[list[OutboundAttachment]] = None,
        claim_id: Optional[str] = None,
    ) -> DispatchResult:
        """Deliver synchronously. Returns a failed result instead of raising."""
        message = OutboundMessage(
            to=to,
            subject=subject,
            body=body,
            attachments=list(attachments or []),
            claim_id=claim_id,
        )
        return self.deliver(message)

    def deliver(self, message: OutboundMessage) -> DispatchResult:
        if not message.to or not message.to.strip():
            return self._failure(message, "No recipient address")
        try:
            self._deliver(message, self._timeout)
        except Exception as e:
            return self._failure(message, f"{type(e).__name__}: {e}")
        log_claim_event(
            logger,
            "notification_sent",
            claim_id=message.claim_id,
            level=logging.DEBUG,
            to=message.to,
            subject=message.subject,
        )
        return DispatchResult(ok=True, message_id=message.id, to=message.to)

    def submit(
        self,
        message: OutboundMessage,
        on_delivered: Optional[Callable[[DispatchResult], None]] = None,
    ) -> Future:
        """Deliver on the background pool. ``on_delivered`` runs only on success.

        Never raises: when the pool refuses work (for example after
        ``shutdown``) the returned future already holds a failed result.
        """
        try:
            future = self._executor.submit(self._run, message, on_delivered)
        except RuntimeError as e:
            future = Future()
            future.set_result(self._failure(message, f"{type(e).__name__}: {e}"))
            return future
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for outstanding submissions. Returns False if some are still running."""
        with self._pending_lock:
            pending = set(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait_for_pending: bool = True) -> None:
        self._executor.shutdown(wait=wait_for_pending)

    def _run(
        self,
        message: OutboundMessage,
        on_delivered: Optional[Callable[[DispatchResult], None]],
    ) -> DispatchResult:
        result = self.deliver(message)
        if result.ok and on_delivered is not None:
            try:
                on_delivered(result)
            except Exception:
                logger.exception(
                    "Post-delivery hook failed for message %s (claim %s)",
                    message.id,
                    message.claim_id,
                )
        return result

    def _forget(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def _failure(self, message: OutboundMessage, error: str) -> DispatchResult:
        log_claim_event(
            logger,
            "notification_failed",
            claim_id=message.claim_id,
            level=logging.WARNING,
            to=message.to,
            subject=message.subject,
            error=error,
        )
        return DispatchResult(ok=False, message_id=message.id, to=message.to, error=error)
