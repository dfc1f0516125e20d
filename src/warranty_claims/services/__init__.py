"""Claim orchestration: transactions, lifecycle service, service orders."""

from warranty_claims.services.claim_service import ClaimService
from warranty_claims.services.service_orders import (
    ServiceOrderWorkflow,
    find_service_order_date,
    substitute_placeholders,
)
from warranty_claims.services.transactions import ClaimTransactions

__all__ = [
    "ClaimService",
    "ClaimTransactions",
    "ServiceOrderWorkflow",
    "find_service_order_date",
    "substitute_placeholders",
]
