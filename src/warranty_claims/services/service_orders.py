"""Contractor assignment and service-order preparation and sending."""

import logging
from datetime import datetime
from typing import Callable, Optional

from warranty_claims.config.settings import get_company_name
from warranty_claims.db.repository import ContractorRepository, TemplateRepository
from warranty_claims.documents.generator import DocumentGenerator, service_order_summary
from warranty_claims.exceptions import (
    ContractorNotFoundError,
    ContractorRequiredError,
    TemplateNotFoundError,
)
from warranty_claims.lifecycle import engine
from warranty_claims.models.claim import Claim, ClaimMessage, MessageType
from warranty_claims.models.directory import ServiceOrderDraft, Template
from warranty_claims.notifications.dispatcher import (
    DispatchResult,
    NotificationDispatcher,
    OutboundAttachment,
)
from warranty_claims.observability.logger import log_claim_event
from warranty_claims.services.transactions import ClaimTransactions

logger = logging.getLogger(__name__)

DEFAULT_BODY = """Hello,

This is {senderName} with {companyName}. We have a warranty repair at {address} that needs to be scheduled. The attached service order describes the issue and includes the homeowner, builder and project details. Photos of the claim are attached.

Please reply with your next availability and we will coordinate a date with the homeowner. Once the work is complete, have the homeowner sign and date the service order and send the signed copy back to us.

If this repair is billable, please let us know before scheduling."""


def substitute_placeholders(text: str, sender_name: str, claim: Claim) -> str:
    """Fill ``{senderName}``, ``{claimTitle}`` and ``{address}``."""
    return (
        text.replace("{senderName}", sender_name)
        .replace("{claimTitle}", claim.title)
        .replace("{address}", claim.address)
    )


def find_service_order_date(claim: Claim) -> Optional[datetime]:
    """Timestamp of the most recent service order sent to a contractor."""
    sent = [
        m.timestamp
        for m in claim.messages
        if m.type == MessageType.SUBCONTRACTOR and "service order" in m.subject.lower()
    ]
    return max(sent) if sent else None


def _require_contractor(claim: Claim) -> None:
    if not claim.has_contractor:
        raise ContractorRequiredError(claim.claim_number)


class ServiceOrderWorkflow:
    """Assigns contractors and produces/sends service orders for a claim."""

    def __init__(
        self,
        transactions: ClaimTransactions,
        contractors: ContractorRepository,
        templates: TemplateRepository,
        dispatcher: NotificationDispatcher,
        renderer: DocumentGenerator,
        clock: Callable[[], datetime],
    ):
        self._tx = transactions
        self._contractors = contractors
        self._templates = templates
        self._dispatcher = dispatcher
        self._renderer = renderer
        self._clock = clock

    def assign_contractor(self, claim_id: str, contractor_id: str) -> Claim:
        """Assign a directory contractor. Status is unchanged.

        Raises:
            ContractorNotFoundError: unknown contractor id (claim untouched).
            ClaimNotFoundError: unknown claim id.
        """
        contractor = self._contractors.get_contractor(contractor_id)
        if contractor is None:
            raise ContractorNotFoundError(contractor_id)
        return self._tx.mutate(
            claim_id,
            lambda c: engine.assign_contractor(c, contractor),
            action="contractor_assigned",
            details=f"Assigned {contractor.company_name}",
        )

    def unassign_contractor(self, claim_id: str) -> Claim:
        return self._tx.mutate(
            claim_id, engine.clear_contractor, action="contractor_unassigned"
        )

    def prepare_service_order(
        self,
        claim_id: str,
        sender_name: str = "Admin",
        template_id: Optional[str] = None,
    ) -> ServiceOrderDraft:
        """Build an editable draft plus the rendered document for the contractor.

        Wording comes from ``template_id`` if given, else the default template if
        one is set, else the built-in text.

        Raises:
            ContractorRequiredError: no contractor is assigned.
            TemplateNotFoundError: ``template_id`` does not exist.
        """
        claim = self._tx.load(claim_id)
        _require_contractor(claim)

        template = self._resolve_template(template_id)
        summary = service_order_summary(claim)
        if template is not None:
            subject = substitute_placeholders(template.subject, sender_name, claim) or summary
            body = substitute_placeholders(template.body, sender_name, claim)
        else:
            subject = summary
            body = substitute_placeholders(
                DEFAULT_BODY.replace("{companyName}", get_company_name()), sender_name, claim
            )

        document = self._renderer.render_service_order(claim, summary)
        log_claim_event(
            logger,
            "service_order_prepared",
            claim_id=claim.id,
            contractor=claim.contractor_name,
            template_id=template.id if template else None,
        )
        return ServiceOrderDraft(
            claim_id=claim.id,
            subject=subject,
            body=body,
            template_id=template.id if template else None,
            recipient_name=claim.contractor_name or "",
            recipient_email=claim.contractor_email,
            document=document,
            image_attachments=claim.image_attachments,
        )

    def send_service_order(
        self,
        claim_id: str,
        subject: str,
        body: str,
        sender_name: Optional[str] = None,
    ) -> DispatchResult:
        """Send the service order to the assigned contractor.

        The result is returned to the caller as-is so a failed send can be
        retried by hand. Nothing on the claim is rolled back on failure; a
        successful send is recorded in the claim's message list.

        Raises:
            ContractorRequiredError: no contractor or no contractor email.
            ValueError: subject or body is empty.
        """
        claim = self._tx.load(claim_id)
        _require_contractor(claim)
        if not claim.contractor_email or not claim.contractor_email.strip():
            raise ContractorRequiredError(claim.claim_number, reason="no contractor email")
        subject = (subject or "").strip()
        body = (body or "").strip()
        if not subject or not body:
            raise ValueError("Service order subject and body are required")

        document = self._renderer.render_service_order(claim, service_order_summary(claim))
        attachments = [
            OutboundAttachment(
                filename=document.filename,
                media_type=document.media_type,
                content=document.content,
            )
        ]
        attachments += [
            OutboundAttachment(filename=a.name, media_type="image", url=a.url)
            for a in claim.image_attachments
        ]

        result = self._dispatcher.send(
            claim.contractor_email,
            subject,
            body,
            attachments=attachments,
            claim_id=claim.id,
        )
        if result.failed:
            return result

        entry = ClaimMessage(
            id=result.message_id,
            type=MessageType.SUBCONTRACTOR,
            subject=subject,
            recipient=claim.contractor_name or claim.contractor_email,
            recipient_email=claim.contractor_email,
            content=body,
            sender_name=sender_name,
            timestamp=self._clock(),
        )
        self._tx.mutate(
            claim_id,
            lambda c: engine.record_message(c, entry),
            action="service_order_sent",
            details=f"Service order sent to {claim.contractor_email}",
        )
        return result

    def _resolve_template(self, template_id: Optional[str]) -> Optional[Template]:
        if template_id:
            template = self._templates.get_template(template_id)
            if template is None:
                raise TemplateNotFoundError(template_id)
            return template
        return self._templates.get_default_template()
