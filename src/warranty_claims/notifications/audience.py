"""Who gets told about a new comment, and with which wording."""

from dataclasses import dataclass
from typing import Optional

from warranty_claims.models.claim import Claim, Comment, MessageType, UserRole


@dataclass(frozen=True)
class NotificationPlan:
    to: str
    recipient_name: str
    subject: str
    body: str
    # None means the message is not tracked in the claim's message audit list
    message_type: Optional[MessageType] = None


def plan_comment_notifications(
    claim: Claim,
    comment: Comment,
    internal_inbox: str,
) -> list[NotificationPlan]:
    """Homeowner comments go to the internal inbox. Admin comments go to the
    homeowner, plus a separate note to the assigned contractor if there is one."""
    if comment.role != UserRole.ADMIN:
        return [
            NotificationPlan(
                to=internal_inbox,
                recipient_name="Warranty Team",
                subject=f"New comment on claim {claim.claim_number}: {claim.title}",
                body=(
                    f"{comment.author} commented on claim {claim.claim_number} "
                    f"({claim.address}):\n\n{comment.text}"
                ),
            )
        ]

    plans = [
        NotificationPlan(
            to=claim.homeowner_email,
            recipient_name=claim.homeowner_name,
            subject=f"Update on your warranty claim: {claim.title}",
            body=(
                f"Hello {claim.homeowner_name},\n\n"
                f"{comment.author} added a comment to your warranty claim "
                f"{claim.claim_number}:\n\n{comment.text}"
            ),
            message_type=MessageType.HOMEOWNER,
        )
    ]
    if claim.has_contractor and claim.contractor_email:
        plans.append(
            NotificationPlan(
                to=claim.contractor_email,
                recipient_name=claim.contractor_name or claim.contractor_email,
                subject=f"Claim {claim.claim_number} update: {claim.title}",
                body=(
                    f"A comment was added to warranty claim {claim.claim_number} "
                    f"at {claim.address}, which is assigned to {claim.contractor_name}.\n\n"
                    f"From {comment.author}:\n{comment.text}"
                ),
                message_type=MessageType.SUBCONTRACTOR,
            )
        )
    return plans
