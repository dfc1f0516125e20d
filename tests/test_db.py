"""Tests for database and repositories."""

import os
import sqlite3
from datetime import datetime, timezone

import pytest

from warranty_claims.db.database import get_connection, get_db_path, init_db
from warranty_claims.db.repository import (
    ClaimRepository,
    ContractorRepository,
    TemplateRepository,
)
from warranty_claims.exceptions import ClaimNotFoundError, ConflictError, TemplateNotFoundError
from warranty_claims.lifecycle import engine, scheduling
from warranty_claims.models.claim import ClaimInput, ClaimStatus
from warranty_claims.models.directory import Contractor, Template

NOW = datetime(2025, 2, 1, 8, 0, tzinfo=timezone.utc)


def _new_claim(number="CLM-1001", **overrides):
    data = dict(
        title="Cracked drywall",
        description="Crack above the bedroom door.",
        category="Drywall",
        address="9 Elm Ct",
        homeowner_name="Jordan",
        homeowner_email="jordan@example.com",
    )
    data.update(overrides)
    return engine.build_claim(ClaimInput(**data), NOW, claim_number=number)


def test_get_db_path_default(monkeypatch):
    """Default path is data/warranty_claims.db when env unset."""
    monkeypatch.delenv("WARRANTY_CLAIMS_DB_PATH", raising=False)
    assert get_db_path() == "data/warranty_claims.db"


def test_get_db_path_env(monkeypatch):
    """WARRANTY_CLAIMS_DB_PATH env overrides default."""
    monkeypatch.setenv("WARRANTY_CLAIMS_DB_PATH", "/tmp/custom.db")
    assert get_db_path() == "/tmp/custom.db"


def test_init_db_creates_tables(temp_db):
    """init_db creates claims, audit, contractor, template and settings tables."""
    with get_connection(temp_db) as conn:
        cur = conn.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
        tables = [row[0] for row in cur.fetchall()]
    for name in ("claims", "claim_audit_log", "contractors", "templates", "app_settings"):
        assert name in tables


def test_init_db_creates_parent_directory(tmp_path):
    path = tmp_path / "nested" / "dir" / "claims.db"
    init_db(str(path))
    assert path.exists()


def test_repository_create_and_get_claim(temp_db):
    repo = ClaimRepository(db_path=temp_db)
    created = repo.create_claim(_new_claim())
    assert created.version == 1
    fetched = repo.get_claim(created.id)
    assert fetched == created
    assert repo.get_claim_by_number("CLM-1001") == created
    assert repo.get_claim("missing") is None
    assert repo.get_claim_by_number("CLM-0000") is None


def test_repository_uses_env_path_when_unset(temp_db):
    """Repositories without db_path fall back to WARRANTY_CLAIMS_DB_PATH."""
    repo = ClaimRepository()
    created = repo.create_claim(_new_claim())
    assert ClaimRepository(db_path=temp_db).get_claim(created.id) is not None
    assert os.environ["WARRANTY_CLAIMS_DB_PATH"] == temp_db


def test_repository_replace_claim_increments_version(temp_db):
    repo = ClaimRepository(db_path=temp_db)
    created = repo.create_claim(_new_claim())
    updated = scheduling.propose_date(created, "2025-02-10", "AM")
    stored = repo.replace_claim(updated, expected_version=1, action="date_proposed")
    assert stored.version == 2
    assert stored.status == ClaimStatus.SCHEDULING
    fetched = repo.get_claim(created.id)
    assert fetched.version == 2
    assert len(fetched.proposed_dates) == 1


def test_repository_replace_claim_stale_version_conflicts(temp_db):
    repo = ClaimRepository(db_path=temp_db)
    created = repo.create_claim(_new_claim())
    repo.replace_claim(engine.mark_reviewed(created), expected_version=1)
    with pytest.raises(ConflictError) as exc_info:
        repo.replace_claim(engine.mark_reviewing(created), expected_version=1)
    assert exc_info.value.details == {
        "claim_id": created.id,
        "expected_version": 1,
        "actual_version": 2,
    }
    # first write survives untouched
    fetched = repo.get_claim(created.id)
    assert fetched.reviewed is True
    assert fetched.status == ClaimStatus.SUBMITTED


def test_repository_replace_unknown_claim(temp_db):
    repo = ClaimRepository(db_path=temp_db)
    with pytest.raises(ClaimNotFoundError):
        repo.replace_claim(_new_claim(), expected_version=1)


def test_repository_duplicate_claim_number_rejected(temp_db):
    repo = ClaimRepository(db_path=temp_db)
    repo.create_claim(_new_claim("CLM-7777"))
    with pytest.raises(sqlite3.IntegrityError):
        repo.create_claim(_new_claim("CLM-7777"))


def test_repository_claim_history(temp_db):
    repo = ClaimRepository(db_path=temp_db)
    created = repo.create_claim(_new_claim())
    c = repo.replace_claim(engine.mark_reviewed(created), expected_version=1, action="reviewed")
    repo.replace_claim(
        scheduling.propose_date(c, "2025-02-10", "PM"),
        expected_version=c.version,
        action="date_proposed",
        details="Proposed 2025-02-10 PM",
    )
    history = repo.get_claim_history(created.id)
    assert [h["action"] for h in history] == ["created", "reviewed", "status_changed"]
    assert history[0]["new_status"] == "SUBMITTED"
    assert history[2]["old_status"] == "SUBMITTED"
    assert history[2]["new_status"] == "SCHEDULING"
    assert history[2]["details"] == "Proposed 2025-02-10 PM"


def test_repository_list_claims_with_status_filter(temp_db):
    repo = ClaimRepository(db_path=temp_db)
    first = repo.create_claim(_new_claim("CLM-1"))
    second = repo.create_claim(_new_claim("CLM-2"))
    repo.replace_claim(scheduling.propose_date(second, "2025-02-10", "AM"), expected_version=1)
    assert [c.claim_number for c in repo.list_claims()] == ["CLM-1", "CLM-2"]
    assert [c.id for c in repo.list_claims(ClaimStatus.SUBMITTED)] == [first.id]
    assert [c.id for c in repo.list_claims("SCHEDULING")] == [second.id]
    assert repo.list_claims(ClaimStatus.COMPLETED) == []


def test_contractor_directory(temp_db):
    repo = ContractorRepository(db_path=temp_db)
    repo.add_contractor(Contractor(id="c1", company_name="Rapid Plumbing", specialty="Plumbing"))
    repo.add_contractor(
        Contractor(id="c2", company_name="Bright Electric", email="jobs@bright.test", specialty="Electrical")
    )
    assert repo.get_contractor("c2").email == "jobs@bright.test"
    assert repo.get_contractor("nope") is None
    assert [c.id for c in repo.list_contractors()] == ["c2", "c1"]
    assert [c.id for c in repo.search_contractors("PLUMB")] == ["c1"]
    assert [c.id for c in repo.search_contractors("electric")] == ["c2"]
    assert repo.search_contractors("   ") == []

    repo.add_contractor(Contractor(id="c1", company_name="Rapid Plumbing Co", specialty="Plumbing"))
    assert repo.get_contractor("c1").company_name == "Rapid Plumbing Co"
    assert len(repo.list_contractors()) == 2


def test_templates_crud(temp_db):
    repo = TemplateRepository(db_path=temp_db)
    template = repo.create_template("Plumbing", "Service order for {address}", "Hi, this is {senderName}")
    assert template.id
    assert template.created_at is not None
    assert repo.get_template(template.id).subject == "Service order for {address}"

    repo.save_template(template.model_copy(update={"body": "Updated body"}))
    assert repo.get_template(template.id).body == "Updated body"
    assert [t.id for t in repo.list_templates()] == [template.id]

    assert repo.delete_template(template.id) is True
    assert repo.get_template(template.id) is None
    assert repo.delete_template(template.id) is False


def test_template_name_required(temp_db):
    repo = TemplateRepository(db_path=temp_db)
    with pytest.raises(ValueError):
        repo.save_template(Template(id="t1", name="  ", subject="s", body="b"))


def test_template_fields_sanitized(temp_db):
    repo = TemplateRepository(db_path=temp_db)
    saved = repo.save_template(
        Template(id="t1", name="  Roofing\x00 ", subject="Roof\r\nwork", body="x" * 6000)
    )
    assert saved.name == "Roofing"
    assert saved.subject == "Roof\nwork"
    assert len(saved.body) == 5000


def test_default_template_set_get_clear(temp_db):
    repo = TemplateRepository(db_path=temp_db)
    a = repo.create_template("A", "Subject A", "Body A")
    b = repo.create_template("B", "Subject B", "Body B")
    assert repo.get_default_template() is None

    repo.set_default_template(b.id)
    assert repo.get_default_template_id() == b.id
    assert repo.get_default_template().name == "B"

    repo.set_default_template(a.id)
    assert repo.get_default_template().name == "A"

    repo.set_default_template(None)
    assert repo.get_default_template_id() is None


def test_default_template_unknown_id(temp_db):
    repo = TemplateRepository(db_path=temp_db)
    with pytest.raises(TemplateNotFoundError):
        repo.set_default_template("does-not-exist")
    assert repo.get_default_template_id() is None


def test_deleting_default_template_clears_reference(temp_db):
    repo = TemplateRepository(db_path=temp_db)
    a = repo.create_template("A", "Subject A", "Body A")
    b = repo.create_template("B", "Subject B", "Body B")
    repo.set_default_template(a.id)

    repo.delete_template(b.id)
    assert repo.get_default_template_id() == a.id

    repo.delete_template(a.id)
    assert repo.get_default_template_id() is None
    assert repo.get_default_template() is None
