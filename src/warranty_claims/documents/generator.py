"""Service order rendering.

The renderer produces a point-in-time snapshot of a claim for the assigned
contractor. PDF rendering lives outside this package; anything implementing
``DocumentGenerator`` can be plugged in. ``PlainTextServiceOrderRenderer`` is
the built-in default.
"""

from typing import Optional, Protocol

from warranty_claims.lifecycle.engine import find_accepted_date, format_claim_number
from warranty_claims.models.claim import Claim
from warranty_claims.models.directory import GeneratedDocument


def service_order_summary(claim: Claim) -> str:
    return f"Service Order: {claim.title} - {claim.address}"


class DocumentGenerator(Protocol):
    def render_service_order(self, claim: Claim, summary: str) -> GeneratedDocument: ...


class PlainTextServiceOrderRenderer:
    """Renders the service order as a UTF-8 text document."""

    media_type = "text/plain"
    extension = "txt"

    def render_service_order(self, claim: Claim, summary: str) -> GeneratedDocument:
        accepted = find_accepted_date(claim)
        lines = [
            summary,
            "=" * len(summary),
            "",
            f"Claim #: {format_claim_number(claim)}",
            f"Title: {claim.title}",
            f"Category: {claim.category}",
            f"Classification: {claim.classification.value}",
            "",
            "Homeowner",
            f"  Name: {claim.homeowner_name}",
            f"  Email: {claim.homeowner_email}",
            f"  Address: {claim.address}",
            f"  Builder: {_or_dash(claim.builder_name)}",
            f"  Project: {_or_dash(claim.job_name)}",
            f"  Closing date: {claim.closing_date.isoformat() if claim.closing_date else '-'}",
            "",
            "Contractor",
            f"  Company: {_or_dash(claim.contractor_name)}",
            f"  Email: {_or_dash(claim.contractor_email)}",
            "",
            "Scheduled",
            (
                f"  {accepted.date.isoformat()} ({accepted.time_slot.value})"
                if accepted
                else "  Not yet scheduled"
            ),
            "",
            "Description",
            f"  {claim.summary or claim.description}",
        ]
        images = claim.image_attachments
        if images:
            lines += ["", "Photos"]
            lines += [f"  - {a.name}: {a.url}" for a in images]
        lines += [
            "",
            "Homeowner signature: ______________________   Date: __________",
        ]
        content = "\n".join(lines) + "\n"
        return GeneratedDocument(
            filename=f"ServiceOrder_{format_claim_number(claim)}.{self.extension}",
            media_type=self.media_type,
            content=content.encode("utf-8"),
        )


def _or_dash(value: Optional[str]) -> str:
    return value if value else "-"
