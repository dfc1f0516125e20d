"""Shared pytest fixtures for all test files."""

import os
import tempfile
import threading
from datetime import datetime, timezone

import pytest

from warranty_claims.db.database import init_db
from warranty_claims.models.claim import ClaimInput
from warranty_claims.models.directory import Contractor
from warranty_claims.notifications.dispatcher import NotificationDispatcher, OutboundMessage
from warranty_claims.services.claim_service import ClaimService

INTERNAL_INBOX = "inbox@warranty.test"

FAST_DISPATCH = {
    "max_workers": 2,
    "timeout_seconds": 1.0,
    "retry_attempts": 2,
    "retry_min_wait": 0.0,
    "retry_max_wait": 0.0,
}


@pytest.fixture(autouse=True)
def temp_db():
    """Use a temporary SQLite DB for tests."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    init_db(path)
    prev = os.environ.get("WARRANTY_CLAIMS_DB_PATH")
    os.environ["WARRANTY_CLAIMS_DB_PATH"] = path
    try:
        yield path
    finally:
        if prev is None:
            os.environ.pop("WARRANTY_CLAIMS_DB_PATH", None)
        else:
            os.environ["WARRANTY_CLAIMS_DB_PATH"] = prev
        for leftover in (path, f"{path}-wal", f"{path}-shm"):
            try:
                os.unlink(leftover)
            except OSError:
                # Already removed, or never created outside WAL mode
                pass


class RecordingTransport:
    """Transport that records deliveries and fails for chosen addresses."""

    def __init__(self, fail_for: set[str] | None = None, error: Exception | None = None):
        self.fail_for = set(fail_for or ())
        self.error = error or ConnectionError("smtp unavailable")
        self.delivered: list[OutboundMessage] = []
        self.attempts: list[str] = []
        self._lock = threading.Lock()

    def deliver(self, message: OutboundMessage, timeout: float) -> None:
        with self._lock:
            self.attempts.append(message.to)
        if message.to in self.fail_for:
            raise self.error
        with self._lock:
            self.delivered.append(message)

    def to(self, address: str) -> list[OutboundMessage]:
        return [m for m in self.delivered if m.to == address]


class FixedClock:
    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2025, 2, 20, 14, 30, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def dispatcher(transport):
    d = NotificationDispatcher(transport=transport, config=FAST_DISPATCH)
    yield d
    d.shutdown()


@pytest.fixture
def service(temp_db, dispatcher, clock):
    return ClaimService(
        db_path=temp_db,
        dispatcher=dispatcher,
        clock=clock,
        internal_inbox=INTERNAL_INBOX,
        require_non_warranty_explanation=False,
    )


@pytest.fixture
def claim_input():
    return ClaimInput(
        title="Leaking kitchen faucet",
        description="Water drips from the faucet base when running.",
        category="Plumbing",
        address="12 Cedar Lane, Springfield",
        homeowner_name="Dana Homeowner",
        homeowner_email="dana@example.com",
        builder_name="Acme Builders",
        job_name="Cedar Ridge Lot 4",
    )


@pytest.fixture
def contractor(service):
    return service.contractors.add_contractor(
        Contractor(
            id="sub-1",
            company_name="Rapid Plumbing",
            contact_name="Pat Plumber",
            email="dispatch@rapidplumbing.test",
            specialty="Plumbing",
        )
    )
