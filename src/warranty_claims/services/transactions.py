"""Serialized read-modify-replace of a single claim."""

import logging
import threading
from typing import Callable, Optional

from warranty_claims.db.repository import ClaimRepository
from warranty_claims.exceptions import ClaimNotFoundError
from warranty_claims.models.claim import Claim
from warranty_claims.observability.logger import claim_context, log_claim_event

logger = logging.getLogger(__name__)


class ClaimTransactions:
    """Runs lifecycle changes one at a time per claim id.

    Writers in this process queue on a per-claim lock; writers in other
    processes are caught by the version check in ``replace_claim`` and get a
    ConflictError to retry. The lock covers only load/compute/replace, never
    notification or document work.
    """

    def __init__(self, repository: ClaimRepository):
        self._repo = repository
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def repository(self) -> ClaimRepository:
        return self._repo

    def _lock_for(self, claim_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(claim_id)
            if lock is None:
                lock = self._locks[claim_id] = threading.Lock()
            return lock

    def _discard_lock(self, claim_id: str) -> None:
        # Unknown ids must not keep a lock; the version check still guards late writers
        with self._locks_guard:
            self._locks.pop(claim_id, None)

    def load(self, claim_id: str) -> Claim:
        claim = self._repo.get_claim(claim_id)
        if claim is None:
            raise ClaimNotFoundError(claim_id)
        return claim

    def mutate(
        self,
        claim_id: str,
        change: Callable[[Claim], Claim],
        action: str,
        details: Optional[str] = None,
    ) -> Claim:
        """Load the claim, apply ``change`` and replace the stored record.

        Anything ``change`` raises propagates before the store is touched, so a
        rejected operation leaves the claim exactly as it was.
        """
        with self._lock_for(claim_id):
            try:
                current = self.load(claim_id)
            except ClaimNotFoundError:
                self._discard_lock(claim_id)
                raise
            with claim_context(claim_id=current.id, claim_number=current.claim_number):
                updated = change(current)
                stored = self._repo.replace_claim(
                    updated,
                    expected_version=current.version,
                    action=action,
                    details=details,
                )
                log_claim_event(
                    logger,
                    f"claim_{action}",
                    claim_id=stored.id,
                    claim_number=stored.claim_number,
                    old_status=current.status.value,
                    new_status=stored.status.value,
                    version=stored.version,
                )
        return stored
