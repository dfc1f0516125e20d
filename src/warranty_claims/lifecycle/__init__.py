"""Pure claim lifecycle logic: status machine, scheduling negotiation, notes."""

from warranty_claims.lifecycle.engine import (
    build_claim,
    find_accepted_date,
    is_closing_classification,
    is_open,
    mark_reviewed,
    mark_reviewing,
    next_status,
    set_classification,
)
from warranty_claims.lifecycle.notes import (
    LegacyNote,
    RawNote,
    StructuredNote,
    add_internal_note,
    parse_notes,
)
from warranty_claims.lifecycle.scheduling import (
    confirm_schedule,
    propose_date,
    reschedule,
    respond_to_date,
)

__all__ = [
    "LegacyNote",
    "RawNote",
    "StructuredNote",
    "add_internal_note",
    "build_claim",
    "confirm_schedule",
    "find_accepted_date",
    "is_closing_classification",
    "is_open",
    "mark_reviewed",
    "mark_reviewing",
    "next_status",
    "parse_notes",
    "propose_date",
    "reschedule",
    "respond_to_date",
    "set_classification",
]
