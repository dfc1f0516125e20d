"""Repositories: claim store with versioned replace, contractor directory, templates."""

import uuid
from typing import Any

from warranty_claims.db.database import get_connection
from warranty_claims.exceptions import (
    ClaimNotFoundError,
    ConflictError,
    TemplateNotFoundError,
)
from warranty_claims.models.claim import Claim, ClaimStatus
from warranty_claims.models.directory import Contractor, Template
from warranty_claims.utils.sanitization import sanitize_template_fields

DEFAULT_TEMPLATE_KEY = "default_template_id"


def _row_to_claim(row: Any) -> Claim:
    claim = Claim.model_validate_json(row["data"])
    # The version column is authoritative
    if claim.version != row["version"]:
        claim = claim.model_copy(update={"version": row["version"]})
    return claim


class ClaimRepository:
    """Repository for claim persistence and audit logging.

    Every write replaces the whole record. ``replace_claim`` only succeeds when
    the caller's ``expected_version`` matches the stored version.
    """

    def __init__(self, db_path: str | None = None):
        self._db_path = db_path

    def create_claim(self, claim: Claim) -> Claim:
        """Insert a new claim record and log a 'created' audit entry."""
        stored = claim.model_copy(update={"version": 1})
        with get_connection(self._db_path) as conn:
            conn.execute(
                """
                INSERT INTO claims (
                    id, claim_number, status, classification, homeowner_email,
                    contractor_id, version, data
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    stored.id,
                    stored.claim_number,
                    stored.status.value,
                    stored.classification.value,
                    stored.homeowner_email,
                    stored.contractor_id,
                    stored.version,
                    stored.model_dump_json(),
                ),
            )
            conn.execute(
                """
                INSERT INTO claim_audit_log (claim_id, action, new_status, details)
                VALUES (?, 'created', ?, ?)
                """,
                (stored.id, stored.status.value, "Claim record created"),
            )
        return stored

    def get_claim(self, claim_id: str) -> Claim | None:
        """Fetch claim by ID."""
        with get_connection(self._db_path) as conn:
            row = conn.execute(
                "SELECT version, data FROM claims WHERE id = ?", (claim_id,)
            ).fetchone()
        if row is None:
            return None
        return _row_to_claim(row)

    def get_claim_by_number(self, claim_number: str) -> Claim | None:
        """Fetch claim by its human-readable number."""
        with get_connection(self._db_path) as conn:
            row = conn.execute(
                "SELECT version, data FROM claims WHERE claim_number = ?",
                (claim_number,),
            ).fetchone()
        if row is None:
            return None
        return _row_to_claim(row)

    def replace_claim(
        self,
        claim: Claim,
        expected_version: int,
        action: str = "updated",
        details: str | None = None,
    ) -> Claim:
        """Replace the stored record if its version still equals expected_version.

        Returns the stored claim with its version incremented. Raises
        ClaimNotFoundError for an unknown id and ConflictError on a stale version.
        A status change is logged as 'status_changed', anything else under ``action``.
        """
        new_version = expected_version + 1
        stored = claim.model_copy(update={"version": new_version})
        with get_connection(self._db_path) as conn:
            row = conn.execute(
                "SELECT status, version FROM claims WHERE id = ?", (claim.id,)
            ).fetchone()
            if row is None:
                raise ClaimNotFoundError(claim.id)
            if row["version"] != expected_version:
                raise ConflictError(claim.id, expected_version, row["version"])
            old_status = row["status"]
            cur = conn.execute(
                """
                UPDATE claims
                SET claim_number = ?, status = ?, classification = ?, homeowner_email = ?,
                    contractor_id = ?, version = ?, data = ?, updated_at = datetime('now')
                WHERE id = ? AND version = ?
                """,
                (
                    stored.claim_number,
                    stored.status.value,
                    stored.classification.value,
                    stored.homeowner_email,
                    stored.contractor_id,
                    new_version,
                    stored.model_dump_json(),
                    claim.id,
                    expected_version,
                ),
            )
            if cur.rowcount == 0:
                raise ConflictError(claim.id, expected_version, expected_version + 1)
            audit_action = "status_changed" if old_status != stored.status.value else action
            conn.execute(
                """
                INSERT INTO claim_audit_log (claim_id, action, old_status, new_status, details)
                VALUES (?, ?, ?, ?, ?)
                """,
                (claim.id, audit_action, old_status, stored.status.value, details or ""),
            )
        return stored

    def list_claims(self, status: ClaimStatus | None = None) -> list[Claim]:
        """List claims, optionally filtered by status, oldest first."""
        with get_connection(self._db_path) as conn:
            if status is None:
                rows = conn.execute(
                    "SELECT version, data FROM claims ORDER BY created_at ASC, rowid ASC"
                ).fetchall()
            else:
                rows = conn.execute(
                    """
                    SELECT version, data FROM claims WHERE status = ?
                    ORDER BY created_at ASC, rowid ASC
                    """,
                    (ClaimStatus(status).value,),
                ).fetchall()
        return [_row_to_claim(r) for r in rows]

    def get_claim_history(self, claim_id: str) -> list[dict[str, Any]]:
        """Get audit log entries for a claim."""
        with get_connection(self._db_path) as conn:
            rows = conn.execute(
                """
                SELECT id, claim_id, action, old_status, new_status, details, created_at
                FROM claim_audit_log
                WHERE claim_id = ?
                ORDER BY id ASC
                """,
                (claim_id,),
            ).fetchall()
        return [dict(r) for r in rows]


class ContractorRepository:
    """Read-mostly directory of assignable contractors."""

    def __init__(self, db_path: str | None = None):
        self._db_path = db_path

    def add_contractor(self, contractor: Contractor) -> Contractor:
        """Insert or update a contractor record."""
        with get_connection(self._db_path) as conn:
            conn.execute(
                """
                INSERT INTO contractors (id, company_name, contact_name, email, phone, specialty)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    company_name = excluded.company_name,
                    contact_name = excluded.contact_name,
                    email = excluded.email,
                    phone = excluded.phone,
                    specialty = excluded.specialty
                """,
                (
                    contractor.id,
                    contractor.company_name,
                    contractor.contact_name,
                    contractor.email,
                    contractor.phone,
                    contractor.specialty,
                ),
            )
        return contractor

    def get_contractor(self, contractor_id: str) -> Contractor | None:
        """Fetch contractor by ID."""
        with get_connection(self._db_path) as conn:
            row = conn.execute(
                "SELECT * FROM contractors WHERE id = ?", (contractor_id,)
            ).fetchone()
        if row is None:
            return None
        return Contractor(**dict(row))

    def list_contractors(self) -> list[Contractor]:
        with get_connection(self._db_path) as conn:
            rows = conn.execute(
                "SELECT * FROM contractors ORDER BY company_name ASC"
            ).fetchall()
        return [Contractor(**dict(r)) for r in rows]

    def search_contractors(self, query: str) -> list[Contractor]:
        """Case-insensitive match on company name or specialty. Blank query returns []."""
        query = (query or "").strip().lower()
        if not query:
            return []
        pattern = f"%{query}%"
        with get_connection(self._db_path) as conn:
            rows = conn.execute(
                """
                SELECT * FROM contractors
                WHERE lower(company_name) LIKE ? OR lower(specialty) LIKE ?
                ORDER BY company_name ASC
                """,
                (pattern, pattern),
            ).fetchall()
        return [Contractor(**dict(r)) for r in rows]


class TemplateRepository:
    """Service order templates plus the explicit default-template reference."""

    def __init__(self, db_path: str | None = None):
        self._db_path = db_path

    def create_template(self, name: str, subject: str, body: str) -> Template:
        """Create a template with a generated ID."""
        template = Template(id=uuid.uuid4().hex, name=name, subject=subject, body=body)
        return self.save_template(template)

    def save_template(self, template: Template) -> Template:
        """Insert or update a template. Name, subject and body are sanitized."""
        name, subject, body = sanitize_template_fields(
            template.name, template.subject, template.body
        )
        if not name:
            raise ValueError("Template name is required")
        with get_connection(self._db_path) as conn:
            conn.execute(
                """
                INSERT INTO templates (id, name, subject, body)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    subject = excluded.subject,
                    body = excluded.body,
                    updated_at = datetime('now')
                """,
                (template.id, name, subject, body),
            )
        return self.get_template(template.id) or template

    def get_template(self, template_id: str) -> Template | None:
        """Fetch template by ID."""
        with get_connection(self._db_path) as conn:
            row = conn.execute(
                "SELECT * FROM templates WHERE id = ?", (template_id,)
            ).fetchone()
        if row is None:
            return None
        return Template(**dict(row))

    def list_templates(self) -> list[Template]:
        with get_connection(self._db_path) as conn:
            rows = conn.execute(
                "SELECT * FROM templates ORDER BY created_at DESC, rowid DESC"
            ).fetchall()
        return [Template(**dict(r)) for r in rows]

    def delete_template(self, template_id: str) -> bool:
        """Delete a template. Clears the default reference if it pointed here."""
        with get_connection(self._db_path) as conn:
            cur = conn.execute("DELETE FROM templates WHERE id = ?", (template_id,))
            conn.execute(
                "DELETE FROM app_settings WHERE key = ? AND value = ?",
                (DEFAULT_TEMPLATE_KEY, template_id),
            )
        return cur.rowcount > 0

    def get_default_template_id(self) -> str | None:
        with get_connection(self._db_path) as conn:
            row = conn.execute(
                "SELECT value FROM app_settings WHERE key = ?", (DEFAULT_TEMPLATE_KEY,)
            ).fetchone()
        return row["value"] if row is not None else None

    def set_default_template(self, template_id: str | None) -> None:
        """Point the default reference at an existing template, or clear it with None."""
        if template_id is None:
            with get_connection(self._db_path) as conn:
                conn.execute(
                    "DELETE FROM app_settings WHERE key = ?", (DEFAULT_TEMPLATE_KEY,)
                )
            return
        if self.get_template(template_id) is None:
            raise TemplateNotFoundError(template_id)
        with get_connection(self._db_path) as conn:
            conn.execute(
                """
                INSERT INTO app_settings (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (DEFAULT_TEMPLATE_KEY, template_id),
            )

    def get_default_template(self) -> Template | None:
        template_id = self.get_default_template_id()
        if template_id is None:
            return None
        return self.get_template(template_id)
