"""Outbound notifications: dispatcher, transports and audience selection."""

from warranty_claims.notifications.audience import (
    NotificationPlan,
    plan_comment_notifications,
)
from warranty_claims.notifications.dispatcher import (
    DispatchResult,
    NotificationDispatcher,
    OutboundAttachment,
    OutboundMessage,
    OutboxTransport,
    Transport,
)

__all__ = [
    "DispatchResult",
    "NotificationDispatcher",
    "NotificationPlan",
    "OutboundAttachment",
    "OutboundMessage",
    "OutboxTransport",
    "Transport",
    "plan_comment_notifications",
]
