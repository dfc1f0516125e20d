"""Service order document generation."""

from warranty_claims.documents.generator import (
    DocumentGenerator,
    PlainTextServiceOrderRenderer,
    service_order_summary,
)

__all__ = [
    "DocumentGenerator",
    "PlainTextServiceOrderRenderer",
    "service_order_summary",
]
