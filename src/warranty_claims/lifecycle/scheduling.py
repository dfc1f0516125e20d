"""Scheduling negotiation between admin and homeowner.

Two-party propose/respond cycle on top of the lifecycle engine. Same rules as
the engine: pure functions over a Claim, no I/O, new Claim returned.

Policy for competing proposals: accepting one entry rejects every other entry
still PROPOSED, so at most one entry is ever ACCEPTED. Once a date is accepted
(SCHEDULED) the only ways to change it are ``reschedule`` and ``confirm_schedule``.
"""

from datetime import date, datetime

from warranty_claims.exceptions import InvalidTransitionError
from warranty_claims.lifecycle.engine import next_status
from warranty_claims.models.claim import (
    Claim,
    ClaimStatus,
    DateStatus,
    ProposedDate,
    TimeSlot,
)


def _ensure_open(claim: Claim, operation: str) -> None:
    if claim.status == ClaimStatus.COMPLETED:
        raise InvalidTransitionError(
            f"Cannot {operation}: claim {claim.claim_number} is COMPLETED",
            current_status=claim.status.value,
            claim_number=claim.claim_number,
        )


def propose_date(claim: Claim, proposed: date | str, slot: TimeSlot | str) -> Claim:
    """Append a PROPOSED entry and move the claim to SCHEDULING."""
    _ensure_open(claim, "propose a date")
    if claim.status == ClaimStatus.SCHEDULED:
        raise InvalidTransitionError(
            f"Claim {claim.claim_number} is already scheduled; reschedule before proposing",
            current_status=claim.status.value,
            claim_number=claim.claim_number,
        )
    entry = ProposedDate(date=proposed, time_slot=TimeSlot(slot), status=DateStatus.PROPOSED)
    return claim.model_copy(
        update={
            "proposed_dates": [*claim.proposed_dates, entry],
            "status": ClaimStatus.SCHEDULING,
        },
        deep=True,
    )


def respond_to_date(
    claim: Claim,
    index: int,
    decision: DateStatus | str,
    now: datetime,
) -> Claim:
    """Accept or reject the proposed entry at ``index``.

    ACCEPTED moves the claim to SCHEDULED and rejects the remaining proposals.
    REJECTED leaves the claim status as it is.

    Raises:
        InvalidTransitionError: decision is not ACCEPTED/REJECTED, index is out
            of range, or the entry was already decided.
    """
    _ensure_open(claim, "respond to a date")
    decision = DateStatus(decision)
    if decision == DateStatus.PROPOSED:
        raise InvalidTransitionError(
            "Response must be ACCEPTED or REJECTED",
            current_status=claim.status.value,
            decision=decision.value,
        )
    if not 0 <= index < len(claim.proposed_dates):
        raise InvalidTransitionError(
            f"No proposed date at index {index} on claim {claim.claim_number}",
            current_status=claim.status.value,
            index=index,
            proposed_count=len(claim.proposed_dates),
        )
    target = claim.proposed_dates[index]
    if target.status != DateStatus.PROPOSED:
        raise InvalidTransitionError(
            f"Proposed date at index {index} is already {target.status.value}",
            current_status=claim.status.value,
            index=index,
        )

    dates: list[ProposedDate] = []
    for i, entry in enumerate(claim.proposed_dates):
        if i == index:
            dates.append(entry.model_copy(update={"status": decision}))
        elif decision == DateStatus.ACCEPTED and entry.status == DateStatus.PROPOSED:
            dates.append(entry.model_copy(update={"status": DateStatus.REJECTED}))
        else:
            dates.append(entry.model_copy())

    update: dict = {"proposed_dates": dates}
    if decision == DateStatus.ACCEPTED:
        update["status"] = next_status(claim.status, claim.classification, dates)
        update["scheduled_at"] = now
    return claim.model_copy(update=update, deep=True)


def confirm_schedule(
    claim: Claim,
    confirmed: date | str,
    slot: TimeSlot | str,
    now: datetime,
) -> Claim:
    """Record a date agreed out-of-band: the sequence becomes one ACCEPTED entry."""
    _ensure_open(claim, "confirm a schedule")
    entry = ProposedDate(date=confirmed, time_slot=TimeSlot(slot), status=DateStatus.ACCEPTED)
    return claim.model_copy(
        update={
            "proposed_dates": [entry],
            "status": ClaimStatus.SCHEDULED,
            "scheduled_at": now,
        },
        deep=True,
    )


def reschedule(claim: Claim) -> Claim:
    """Clear every proposed date and return to SCHEDULING. Idempotent."""
    _ensure_open(claim, "reschedule")
    return claim.model_copy(
        update={
            "proposed_dates": [],
            "status": ClaimStatus.SCHEDULING,
            "scheduled_at": None,
        },
        deep=True,
    )
