"""SQLite database module for claim persistence and audit logging."""

from warranty_claims.db.database import get_connection, get_db_path, init_db
from warranty_claims.db.repository import (
    ClaimRepository,
    ContractorRepository,
    TemplateRepository,
)

__all__ = [
    "ClaimRepository",
    "ContractorRepository",
    "TemplateRepository",
    "get_connection",
    "get_db_path",
    "init_db",
]
