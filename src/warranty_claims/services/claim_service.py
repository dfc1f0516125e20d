"""Claim service: lifecycle intents from admins and homeowners.

Each public method is one transaction against one claim: validate, compute the
next record with the pure lifecycle functions, persist it, then (and only then)
hand side effects to the notification dispatcher.
"""

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from warranty_claims.config.settings import (
    get_internal_inbox,
    get_require_non_warranty_explanation,
)
from warranty_claims.db.repository import (
    ClaimRepository,
    ContractorRepository,
    TemplateRepository,
)
from warranty_claims.documents.generator import (
    DocumentGenerator,
    PlainTextServiceOrderRenderer,
)
from warranty_claims.lifecycle import engine, notes, scheduling
from warranty_claims.models.claim import (
    Claim,
    ClaimInput,
    ClaimMessage,
    ClaimStatus,
    Classification,
    Comment,
    DateStatus,
    TimeSlot,
    UserRole,
)
from warranty_claims.notifications.audience import (
    NotificationPlan,
    plan_comment_notifications,
)
from warranty_claims.notifications.dispatcher import (
    DispatchResult,
    NotificationDispatcher,
    OutboundMessage,
)
from warranty_claims.observability.logger import log_claim_event
from warranty_claims.services.service_orders import ServiceOrderWorkflow
from warranty_claims.services.transactions import ClaimTransactions
from warranty_claims.utils.sanitization import sanitize_author, sanitize_comment

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClaimService:
    """Entry point for every claim lifecycle operation."""

    def __init__(
        self,
        db_path: str | None = None,
        repository: ClaimRepository | None = None,
        contractors: ContractorRepository | None = None,
        templates: TemplateRepository | None = None,
        dispatcher: NotificationDispatcher | None = None,
        renderer: DocumentGenerator | None = None,
        clock: Callable[[], datetime] | None = None,
        internal_inbox: str | None = None,
        require_non_warranty_explanation: bool | None = None,
    ):
        self.repository = repository or ClaimRepository(db_path)
        self.contractors = contractors or ContractorRepository(db_path)
        self.templates = templates or TemplateRepository(db_path)
        self.dispatcher = dispatcher or NotificationDispatcher()
        self._clock = clock or _utcnow
        self._internal_inbox = internal_inbox or get_internal_inbox()
        self._require_explanation = (
            get_require_non_warranty_explanation()
            if require_non_warranty_explanation is None
            else require_non_warranty_explanation
        )
        self._tx = ClaimTransactions(self.repository)
        self.service_orders = ServiceOrderWorkflow(
            transactions=self._tx,
            contractors=self.contractors,
            templates=self.templates,
            dispatcher=self.dispatcher,
            renderer=renderer or PlainTextServiceOrderRenderer(),
            clock=self._clock,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_claim(self, claim_id: str) -> Claim:
        """Fetch a claim. Raises ClaimNotFoundError."""
        return self._tx.load(claim_id)

    def list_claims(self, status: ClaimStatus | None = None) -> list[Claim]:
        return self.repository.list_claims(status)

    def get_history(self, claim_id: str) -> list[dict[str, Any]]:
        self._tx.load(claim_id)
        return self.repository.get_claim_history(claim_id)

    def get_internal_notes(self, claim_id: str) -> list[notes.NoteEntry]:
        return notes.parse_notes(self._tx.load(claim_id).internal_notes)

    # ------------------------------------------------------------------
    # Creation and classification
    # ------------------------------------------------------------------

    def create_claim(self, claim_input: ClaimInput, claim_number: str | None = None) -> Claim:
        claim = engine.build_claim(claim_input, self._clock(), claim_number=claim_number)
        stored = self.repository.create_claim(claim)
        log_claim_event(
            logger,
            "claim_created",
            claim_id=stored.id,
            claim_number=stored.claim_number,
            status=stored.status.value,
        )
        return stored

    def set_classification(
        self,
        claim_id: str,
        classification: Classification | str,
        explanation: str | None = None,
    ) -> Claim:
        """Classify a claim. A closing classification completes it immediately."""
        now = self._clock()
        return self._tx.mutate(
            claim_id,
            lambda c: engine.set_classification(
                c,
                classification,
                now,
                explanation=explanation,
                require_explanation=self._require_explanation,
            ),
            action="classified",
            details=f"Classification set to {Classification(classification).value}",
        )

    def mark_reviewing(self, claim_id: str) -> Claim:
        return self._tx.mutate(claim_id, engine.mark_reviewing, action="reviewing")

    def mark_reviewed(self, claim_id: str, reviewed: bool = True) -> Claim:
        return self._tx.mutate(
            claim_id, lambda c: engine.mark_reviewed(c, reviewed), action="reviewed"
        )

    # ------------------------------------------------------------------
    # Scheduling negotiation
    # ------------------------------------------------------------------

    def propose_date(self, claim_id: str, proposed: date | str, slot: TimeSlot | str) -> Claim:
        return self._tx.mutate(
            claim_id,
            lambda c: scheduling.propose_date(c, proposed, slot),
            action="date_proposed",
            details=f"Proposed {proposed} {TimeSlot(slot).value}",
        )

    def respond_to_date(self, claim_id: str, index: int, decision: DateStatus | str) -> Claim:
        now = self._clock()
        return self._tx.mutate(
            claim_id,
            lambda c: scheduling.respond_to_date(c, index, decision, now),
            action="date_answered",
            details=f"Proposed date {index} {DateStatus(decision).value}",
        )

    def confirm_schedule(self, claim_id: str, confirmed: date | str, slot: TimeSlot | str) -> Claim:
        now = self._clock()
        return self._tx.mutate(
            claim_id,
            lambda c: scheduling.confirm_schedule(c, confirmed, slot, now),
            action="schedule_confirmed",
            details=f"Confirmed {confirmed} {TimeSlot(slot).value}",
        )

    def reschedule(self, claim_id: str) -> Claim:
        return self._tx.mutate(claim_id, scheduling.reschedule, action="rescheduled")

    # ------------------------------------------------------------------
    # Collaboration
    # ------------------------------------------------------------------

    def add_comment(
        self,
        claim_id: str,
        author: str,
        role: UserRole | str,
        text: str,
    ) -> Comment:
        """Persist a comment, then notify the other party in the background.

        The comment is stored before any delivery is attempted, and delivery
        failures are only logged: this method does not fail because a
        notification could not be sent.
        """
        cleaned = sanitize_comment(text)
        if not cleaned:
            raise ValueError("Comment text is required")
        comment = Comment(
            id=uuid.uuid4().hex,
            author=sanitize_author(author) or "Unknown",
            role=UserRole(role),
            text=cleaned,
            timestamp=self._clock(),
        )
        stored = self._tx.mutate(
            claim_id,
            lambda c: engine.add_comment(c, comment),
            action="commented",
            details=f"Comment by {comment.author} ({comment.role.value})",
        )
        for plan in plan_comment_notifications(stored, comment, self._internal_inbox):
            self._notify(stored, plan, sender_name=comment.author)
        return comment

    def add_internal_note(self, claim_id: str, text: str, author: str) -> Claim:
        now = self._clock()
        return self._tx.mutate(
            claim_id,
            lambda c: notes.add_internal_note(c, text, author, now),
            action="note_added",
            details=f"Internal note by {author}",
        )

    def drain_notifications(self, timeout: Optional[float] = None) -> bool:
        """Wait for background notifications (tests, shutdown)."""
        return self.dispatcher.drain(timeout)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _notify(self, claim: Claim, plan: NotificationPlan, sender_name: str) -> None:
        message = OutboundMessage(
            to=plan.to,
            subject=plan.subject,
            body=plan.body,
            claim_id=claim.id,
        )
        on_delivered = None
        if plan.message_type is not None:
            on_delivered = self._audit_hook(claim.id, plan, sender_name)
        self.dispatcher.submit(message, on_delivered=on_delivered)

    def _audit_hook(
        self,
        claim_id: str,
        plan: NotificationPlan,
        sender_name: str,
    ) -> Callable[[DispatchResult], None]:
        def record(result: DispatchResult) -> None:
            entry = ClaimMessage(
                id=result.message_id,
                type=plan.message_type,
                subject=plan.subject,
                recipient=plan.recipient_name,
                recipient_email=plan.to,
                content=plan.body,
                sender_name=sender_name,
                timestamp=self._clock(),
            )
            self._tx.mutate(
                claim_id,
                lambda c: engine.record_message(c, entry),
                action="message_recorded",
                details=f"{entry.type.value} message to {entry.recipient_email}",
            )

        return record
