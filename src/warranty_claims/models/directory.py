"""Pydantic models for contractors, templates and service-order drafts."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from warranty_claims.models.claim import Attachment


class Contractor(BaseModel):
    """Assignable repair contractor. Read-only from the claim's perspective."""

    id: str = Field(..., description="Contractor ID")
    company_name: str = Field(..., description="Company name shown on the claim")
    contact_name: str = Field(default="", description="Primary contact")
    email: str = Field(default="", description="Address service orders are sent to")
    phone: Optional[str] = Field(default=None, description="Contact phone")
    specialty: str = Field(default="", description="Trade or specialty")


class Template(BaseModel):
    """Saved service-order wording with placeholder support."""

    id: str
    name: str
    subject: str
    body: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class GeneratedDocument(BaseModel):
    """Rendered service-order snapshot."""

    filename: str
    media_type: str
    content: bytes


class ServiceOrderDraft(BaseModel):
    """Editable subject/body plus the documents that will go to the contractor."""

    claim_id: str
    subject: str
    body: str
    template_id: Optional[str] = Field(default=None, description="Template used, if any")
    recipient_name: str
    recipient_email: Optional[str] = None
    document: GeneratedDocument
    image_attachments: list[Attachment] = Field(default_factory=list)
