"""Claim lifecycle engine: status derivation and classification transitions.

Every function here is pure. It takes the current Claim plus explicit inputs
(including ``now``) and returns a new Claim; the argument is never mutated and
no I/O is performed. Persistence and side effects live in ``warranty_claims.services``.
"""

import uuid
from datetime import datetime
from typing import Iterable, Optional

from warranty_claims.exceptions import InvalidTransitionError
from warranty_claims.models.claim import (
    CLOSING_CLASSIFICATIONS,
    NON_WARRANTY_CLASSIFICATIONS,
    Claim,
    ClaimInput,
    ClaimMessage,
    ClaimStatus,
    Classification,
    Comment,
    DateStatus,
    ProposedDate,
)
from warranty_claims.models.directory import Contractor


def generate_claim_number(prefix: str = "CLM") -> str:
    """Generate a unique human-readable claim number."""
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


def is_closing_classification(classification: Classification | str) -> bool:
    return Classification(classification) in CLOSING_CLASSIFICATIONS


def next_status(
    status: ClaimStatus,
    classification: Classification,
    proposed_dates: Iterable[ProposedDate],
) -> ClaimStatus:
    """Derive the status implied by classification and the scheduling sequence.

    A closing classification always wins. COMPLETED never moves. An accepted
    date means SCHEDULED, any other entry means SCHEDULING, and an empty
    sequence leaves the status as it was.
    """
    if is_closing_classification(classification) or status == ClaimStatus.COMPLETED:
        return ClaimStatus.COMPLETED
    dates = list(proposed_dates)
    if any(d.status == DateStatus.ACCEPTED for d in dates):
        return ClaimStatus.SCHEDULED
    if dates:
        return ClaimStatus.SCHEDULING
    return status


def build_claim(
    claim_input: ClaimInput,
    now: datetime,
    claim_id: Optional[str] = None,
    claim_number: Optional[str] = None,
) -> Claim:
    """Create a new Claim from explicit input. Starts SUBMITTED, or COMPLETED
    when the initial classification is a closing one."""
    status = next_status(ClaimStatus.SUBMITTED, claim_input.classification, [])
    return Claim(
        id=claim_id or uuid.uuid4().hex,
        claim_number=claim_number or generate_claim_number(),
        title=claim_input.title,
        description=claim_input.description,
        category=claim_input.category,
        address=claim_input.address,
        homeowner_name=claim_input.homeowner_name,
        homeowner_email=claim_input.homeowner_email,
        builder_name=claim_input.builder_name,
        job_name=claim_input.job_name,
        closing_date=claim_input.closing_date,
        summary=claim_input.summary,
        status=status,
        classification=claim_input.classification,
        non_warranty_explanation=claim_input.non_warranty_explanation,
        date_submitted=now,
        completed_at=now if status == ClaimStatus.COMPLETED else None,
        attachments=list(claim_input.attachments),
    )


def set_classification(
    claim: Claim,
    classification: Classification | str,
    now: datetime,
    explanation: Optional[str] = None,
    require_explanation: bool = False,
) -> Claim:
    """Apply a classification decision.

    A closing classification forces COMPLETED from any state; proposed dates are
    kept as they are. Other classifications leave the status untouched.

    Raises:
        InvalidTransitionError: require_explanation is set and a non-warranty
            classification arrives without an explanation.
    """
    classification = Classification(classification)
    explanation = (explanation or "").strip() or claim.non_warranty_explanation
    if (
        require_explanation
        and classification in NON_WARRANTY_CLASSIFICATIONS
        and not explanation
    ):
        raise InvalidTransitionError(
            f"Classification '{classification.value}' requires a non-warranty explanation",
            current_status=claim.status.value,
            claim_number=claim.claim_number,
            classification=classification.value,
        )

    status = ClaimStatus.COMPLETED if is_closing_classification(classification) else claim.status

    update: dict = {
        "classification": classification,
        "status": status,
        "non_warranty_explanation": explanation,
    }
    if claim.date_evaluated is None and classification != Classification.UNCLASSIFIED:
        update["date_evaluated"] = now.date()
    if status == ClaimStatus.COMPLETED and claim.status != ClaimStatus.COMPLETED:
        update["completed_at"] = now
    return claim.model_copy(update=update, deep=True)


def mark_reviewing(claim: Claim) -> Claim:
    """Admin-only move from SUBMITTED to REVIEWING."""
    if claim.status == ClaimStatus.REVIEWING:
        return claim.model_copy(deep=True)
    if claim.status != ClaimStatus.SUBMITTED:
        raise InvalidTransitionError(
            f"Claim {claim.claim_number} cannot move to REVIEWING from {claim.status.value}",
            current_status=claim.status.value,
            claim_number=claim.claim_number,
        )
    return claim.model_copy(update={"status": ClaimStatus.REVIEWING}, deep=True)


def mark_reviewed(claim: Claim, reviewed: bool = True) -> Claim:
    return claim.model_copy(update={"reviewed": reviewed}, deep=True)


def assign_contractor(claim: Claim, contractor: Contractor) -> Claim:
    """Set the three contractor fields together. Status is unchanged."""
    return claim.model_copy(
        update={
            "contractor_id": contractor.id,
            "contractor_name": contractor.company_name,
            "contractor_email": contractor.email or None,
        },
        deep=True,
    )


def clear_contractor(claim: Claim) -> Claim:
    return claim.model_copy(
        update={"contractor_id": None, "contractor_name": None, "contractor_email": None},
        deep=True,
    )


def add_comment(claim: Claim, comment: Comment) -> Claim:
    return claim.model_copy(update={"comments": [*claim.comments, comment]}, deep=True)


def record_message(claim: Claim, message: ClaimMessage) -> Claim:
    """Append a dispatched-message audit record."""
    return claim.model_copy(update={"messages": [*claim.messages, message]}, deep=True)


def find_accepted_date(claim: Claim) -> Optional[ProposedDate]:
    """First accepted entry; insertion order makes it authoritative."""
    return next((d for d in claim.proposed_dates if d.status == DateStatus.ACCEPTED), None)


def is_open(claim: Claim) -> bool:
    return claim.status != ClaimStatus.COMPLETED


def format_claim_number(claim: Claim) -> str:
    return claim.claim_number or claim.id[:8].upper()
