"""Pydantic models for claims."""

from warranty_claims.models.claim import (
    CLOSING_CLASSIFICATIONS,
    NON_WARRANTY_CLASSIFICATIONS,
    Attachment,
    AttachmentType,
    Claim,
    ClaimInput,
    ClaimMessage,
    ClaimStatus,
    Classification,
    Comment,
    DateStatus,
    MessageType,
    ProposedDate,
    TimeSlot,
    UserRole,
)
from warranty_claims.models.directory import (
    Contractor,
    GeneratedDocument,
    ServiceOrderDraft,
    Template,
)

__all__ = [
    "CLOSING_CLASSIFICATIONS",
    "NON_WARRANTY_CLASSIFICATIONS",
    "Attachment",
    "AttachmentType",
    "Claim",
    "ClaimInput",
    "ClaimMessage",
    "ClaimStatus",
    "Classification",
    "Comment",
    "Contractor",
    "DateStatus",
    "GeneratedDocument",
    "MessageType",
    "ProposedDate",
    "ServiceOrderDraft",
    "Template",
    "TimeSlot",
    "UserRole",
]
