"""Observability module.

This module provides structured logging with claim ID context.
"""

from warranty_claims.observability.logger import (
    ClaimLogger,
    claim_context,
    configure_logging,
    get_logger,
    log_claim_event,
)

__all__ = [
    "ClaimLogger",
    "claim_context",
    "configure_logging",
    "get_logger",
    "log_claim_event",
]
