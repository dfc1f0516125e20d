"""Custom exceptions for the warranty claims core."""

from typing import Any, Optional


class WarrantyClaimsError(Exception):
    """Base exception for all warranty claim errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# ===================
# Lookup Exceptions
# ===================

class NotFoundError(WarrantyClaimsError):
    """Base exception for lookup misses."""
    pass


class ClaimNotFoundError(NotFoundError):
    """Claim not found in storage."""

    def __init__(self, claim_id: str):
        super().__init__(
            message=f"Claim not found: {claim_id}",
            error_code="CLAIM_NOT_FOUND",
            details={"claim_id": claim_id},
        )


class ContractorNotFoundError(NotFoundError):
    """Contractor not found in the directory."""

    def __init__(self, contractor_id: str):
        super().__init__(
            message=f"Contractor not found: {contractor_id}",
            error_code="CONTRACTOR_NOT_FOUND",
            details={"contractor_id": contractor_id},
        )


class TemplateNotFoundError(NotFoundError):
    """Service order template not found."""

    def __init__(self, template_id: str):
        super().__init__(
            message=f"Template not found: {template_id}",
            error_code="TEMPLATE_NOT_FOUND",
            details={"template_id": template_id},
        )


# ===================
# Workflow Exceptions
# ===================

class ContractorRequiredError(WarrantyClaimsError):
    """Service order requested for a claim without a usable contractor."""

    def __init__(self, claim_number: str, reason: str = "no contractor assigned"):
        super().__init__(
            message=f"Claim {claim_number} has {reason}",
            error_code="CONTRACTOR_REQUIRED",
            details={"claim_number": claim_number, "reason": reason},
        )


class InvalidTransitionError(WarrantyClaimsError):
    """Requested lifecycle operation is not allowed from the current state."""

    def __init__(self, message: str, current_status: Optional[str] = None, **details: Any):
        if current_status is not None:
            details["current_status"] = current_status
        super().__init__(
            message=message,
            error_code="INVALID_TRANSITION",
            details=details,
        )


class ConflictError(WarrantyClaimsError):
    """Stored claim version no longer matches the version the write was based on."""

    def __init__(self, claim_id: str, expected_version: int, actual_version: int):
        super().__init__(
            message=(
                f"Claim {claim_id} was modified concurrently "
                f"(expected version {expected_version}, found {actual_version})"
            ),
            error_code="CONFLICT",
            details={
                "claim_id": claim_id,
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )
