"""Pydantic models for warranty claims and their owned sub-records."""

import datetime as dt
from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ClaimStatus(str, Enum):
    """Lifecycle status of a claim. COMPLETED is terminal."""

    SUBMITTED = "SUBMITTED"
    REVIEWING = "REVIEWING"
    SCHEDULING = "SCHEDULING"
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"


class Classification(str, Enum):
    """Administrative categorization that determines warranty coverage."""

    SIXTY_DAY = "60 Day"
    ELEVEN_MONTH = "11 Month"
    NON_WARRANTY = "Non-Warranty"
    COURTESY_REPAIR = "Courtesy Repair (Non-Warranty)"
    HOLD_FOR_ELEVEN_MONTH = "Hold for 11 Month"
    NEEDS_ATTENTION = "Needs Attention"
    OTHER = "Other"
    SERVICE_COMPLETE = "Service Complete"
    DUPLICATE = "Duplicate"
    UNCLASSIFIED = "Unclassified"


# Classifications that force the claim to COMPLETED
CLOSING_CLASSIFICATIONS = frozenset(
    {
        Classification.NON_WARRANTY,
        Classification.SERVICE_COMPLETE,
        Classification.COURTESY_REPAIR,
        Classification.DUPLICATE,
    }
)

# Classifications that deny coverage and call for an explanation
NON_WARRANTY_CLASSIFICATIONS = frozenset(
    {
        Classification.NON_WARRANTY,
        Classification.COURTESY_REPAIR,
    }
)


class TimeSlot(str, Enum):
    AM = "AM"
    PM = "PM"
    ALL_DAY = "All Day"

    @classmethod
    def _missing_(cls, value):
        # Accept "AllDay" / "ALL_DAY" spellings
        if isinstance(value, str) and value.replace(" ", "").replace("_", "").upper() == "ALLDAY":
            return cls.ALL_DAY
        return None


class DateStatus(str, Enum):
    PROPOSED = "PROPOSED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class UserRole(str, Enum):
    HOMEOWNER = "HOMEOWNER"
    ADMIN = "ADMIN"
    BUILDER = "BUILDER"


class AttachmentType(str, Enum):
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"
    DOCUMENT = "DOCUMENT"


class MessageType(str, Enum):
    """Recipient type of a tracked outbound message."""

    HOMEOWNER = "HOMEOWNER"
    SUBCONTRACTOR = "SUBCONTRACTOR"


class ProposedDate(BaseModel):
    """Candidate appointment slot awaiting a decision."""

    date: dt.date = Field(..., description="Appointment date")
    time_slot: TimeSlot = Field(..., description="AM, PM, or All Day")
    status: DateStatus = Field(default=DateStatus.PROPOSED, description="Negotiation status")


class Comment(BaseModel):
    """Collaboration comment visible to homeowner and admins."""

    id: str
    author: str
    role: UserRole
    text: str
    timestamp: datetime


class ClaimMessage(BaseModel):
    """Record of a notification actually dispatched for a claim (audit only)."""

    id: str
    type: MessageType
    subject: str
    recipient: str = Field(..., description="Recipient display name")
    recipient_email: str
    content: str
    sender_name: Optional[str] = None
    timestamp: datetime


class Attachment(BaseModel):
    id: str
    name: str
    type: AttachmentType
    url: str = Field(..., description="Location reference of the stored file")


class ClaimInput(BaseModel):
    """Everything needed to open a claim. Required fields have no defaults."""

    title: str = Field(..., description="Short claim title")
    description: str = Field(..., description="Homeowner description of the issue")
    category: str = Field(..., description="Issue category (e.g. Plumbing)")
    address: str = Field(..., description="Property address")
    homeowner_name: str = Field(..., description="Homeowner display name")
    homeowner_email: str = Field(..., description="Homeowner registered email")
    builder_name: Optional[str] = Field(default=None, description="Builder name")
    job_name: Optional[str] = Field(default=None, description="Job / project name")
    closing_date: Optional[date] = Field(default=None, description="Home closing date")
    classification: Classification = Field(
        default=Classification.UNCLASSIFIED, description="Initial classification"
    )
    non_warranty_explanation: Optional[str] = Field(
        default=None, description="Why the claim is not covered"
    )
    summary: Optional[str] = Field(default=None, description="Admin summary for service orders")
    attachments: list[Attachment] = Field(default_factory=list)


class Claim(BaseModel):
    """Aggregate record for one warranty issue."""

    # Identity
    id: str = Field(..., description="Opaque claim ID")
    claim_number: str = Field(..., description="Human-readable claim number")

    # Descriptive
    title: str
    description: str
    category: str
    address: str
    homeowner_name: str
    homeowner_email: str
    builder_name: Optional[str] = None
    job_name: Optional[str] = None
    closing_date: Optional[date] = None
    summary: Optional[str] = None

    # Workflow
    status: ClaimStatus = ClaimStatus.SUBMITTED
    classification: Classification = Classification.UNCLASSIFIED
    date_evaluated: Optional[date] = None
    non_warranty_explanation: Optional[str] = None
    reviewed: bool = False
    date_submitted: datetime
    scheduled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    # Assignment (set together)
    contractor_id: Optional[str] = None
    contractor_name: Optional[str] = None
    contractor_email: Optional[str] = None

    # Scheduling, collaboration, annotation
    proposed_dates: list[ProposedDate] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)
    messages: list[ClaimMessage] = Field(default_factory=list)
    internal_notes: str = Field(default="", description="Admin-only append-only notes blob")
    attachments: list[Attachment] = Field(default_factory=list)

    version: int = Field(default=1, description="Optimistic concurrency stamp")

    @property
    def has_contractor(self) -> bool:
        return bool(self.contractor_id and self.contractor_name)

    @property
    def image_attachments(self) -> list[Attachment]:
        return [a for a in self.attachments if a.type == AttachmentType.IMAGE and a.url]
