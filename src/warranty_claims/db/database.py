"""SQLite connection and schema initialization."""

import os
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

# Paths whose schema has been applied in this process
_schema_initialized: set[str] = set()
_schema_lock = threading.Lock()

SCHEMA_SQL = """
-- Claims table: indexed columns plus the whole record as a JSON document
CREATE TABLE IF NOT EXISTS claims (
    id TEXT PRIMARY KEY,
    claim_number TEXT NOT NULL,
    status TEXT NOT NULL,
    classification TEXT NOT NULL,
    homeowner_email TEXT,
    contractor_id TEXT,
    version INTEGER NOT NULL DEFAULT 1,
    data TEXT NOT NULL,
    created_at TEXT DEFAULT (datetime('now')),
    updated_at TEXT DEFAULT (datetime('now'))
);

-- Audit log (state changes)
CREATE TABLE IF NOT EXISTS claim_audit_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    claim_id TEXT NOT NULL,
    action TEXT NOT NULL,
    old_status TEXT,
    new_status TEXT,
    details TEXT,
    created_at TEXT DEFAULT (datetime('now')),
    FOREIGN KEY (claim_id) REFERENCES claims(id)
);

-- Contractor directory
CREATE TABLE IF NOT EXISTS contractors (
    id TEXT PRIMARY KEY,
    company_name TEXT NOT NULL,
    contact_name TEXT,
    email TEXT,
    phone TEXT,
    specialty TEXT
);

-- Service order templates
CREATE TABLE IF NOT EXISTS templates (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    subject TEXT NOT NULL,
    body TEXT NOT NULL,
    created_at TEXT DEFAULT (datetime('now')),
    updated_at TEXT DEFAULT (datetime('now'))
);

-- Key/value settings (default_template_id)
CREATE TABLE IF NOT EXISTS app_settings (
    key TEXT PRIMARY KEY,
    value TEXT
);
CREATE UNIQUE INDEX IF NOT EXISTS idx_claims_claim_number ON claims(claim_number);
CREATE INDEX IF NOT EXISTS idx_claims_status ON claims(status);
CREATE INDEX IF NOT EXISTS idx_audit_claim_id ON claim_audit_log(claim_id);
"""


# Seconds a writer waits on a locked database before failing
BUSY_TIMEOUT_SECONDS = 30.0


def get_db_path() -> str:
    """WARRANTY_CLAIMS_DB_PATH, or data/warranty_claims.db."""
    return os.environ.get("WARRANTY_CLAIMS_DB_PATH", "data/warranty_claims.db")


def _connect(db_path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path, timeout=BUSY_TIMEOUT_SECONDS)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(path: str | None = None) -> None:
    """Create the parent directory and apply the schema.

    WAL journaling lets the background notification threads record messages
    while callers keep reading the same claim.
    """
    db_path = path or get_db_path()
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = _connect(db_path)
    try:
        conn.execute("PRAGMA journal_mode = WAL")
        conn.executescript(SCHEMA_SQL)
        conn.commit()
    finally:
        conn.close()
    with _schema_lock:
        _schema_initialized.add(db_path)


def _ensure_schema(db_path: str) -> None:
    with _schema_lock:
        done = db_path in _schema_initialized
    if not done:
        init_db(db_path)


@contextmanager
def get_connection(path: str | None = None) -> Iterator[sqlite3.Connection]:
    """Yield a connection that commits on success and rolls back on any error."""
    db_path = path or get_db_path()
    _ensure_schema(db_path)
    conn = _connect(db_path)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
