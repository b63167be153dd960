"""
Suspend / resume orchestration.

Keeps the in-memory list of outstanding suspensions in step with the
persistence store. Every change to the list happens under one lock, and the
list is only changed after the store call succeeded, so the register thread
and the cleanup scheduler always see the same membership as the database.
"""
import logging
import threading
from datetime import date, datetime
from typing import List, Optional

from pos_register.core.clock import Clock
from pos_register.core.errors import (
    ConflictError,
    InvalidStateError,
    LimitExceededError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from pos_register.schemas.suspension import SuspensionSnapshot
from pos_register.services.serializer import create_suspension, restore_transaction
from pos_register.services.transaction import Transaction
from pos_register.stores.interfaces import PersistenceStore

logger = logging.getLogger(__name__)

MAX_SUSPENDED = 10
MAX_DAILY_SEQUENCE = 999


class SuspensionManager:
    """
    Parks and restores transactions.

    Rules:
    - An empty transaction cannot be suspended.
    - At most ``max_suspended`` suspensions may be outstanding.
    - A suspension can only be resumed onto an empty live transaction.
    - Suspensions from before today expire at the daily cleanup; the
      retention cleanup removes them by absolute age.
    """

    def __init__(self, store: PersistenceStore, clock: Clock, max_suspended: int = MAX_SUSPENDED):
        self.store = store
        self.clock = clock
        self.max_suspended = max_suspended
        self._lock = threading.RLock()
        self._suspensions: List[SuspensionSnapshot] = []
        self.reload()

    def reload(self) -> int:
        """Replace the in-memory list with what the store holds."""
        with self._lock:
            self._suspensions = list(self.store.load_all_suspensions())
            if self._suspensions:
                logger.info("Loaded %d suspended transactions from database", len(self._suspensions))
            return len(self._suspensions)

    # --- reads ------------------------------------------------------------

    def get_suspensions(self) -> List[SuspensionSnapshot]:
        """All outstanding suspensions, newest first."""
        with self._lock:
            return list(self._suspensions)

    def get(self, suspension_id: str) -> Optional[SuspensionSnapshot]:
        with self._lock:
            return self._find(suspension_id)

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._suspensions)

    def is_limit_reached(self) -> bool:
        with self._lock:
            return len(self._suspensions) >= self.max_suspended

    # --- operations -------------------------------------------------------

    def suspend(self, transaction: Transaction, note: Optional[str] = None) -> str:
        """
        Park ``transaction`` and reset it to a fresh SHOPPING transaction.

        Returns:
            The new suspension id (S-YYYYMMDD-NNN)

        Raises:
            ValidationError: the transaction has no items
            LimitExceededError: ``max_suspended`` suspensions are outstanding
            PersistenceError: the snapshot could not be stored
        """
        with self._lock:
            if transaction.item_count == 0:
                raise ValidationError("Cannot suspend an empty transaction")
            if len(self._suspensions) >= self.max_suspended:
                raise LimitExceededError(self.max_suspended)

            now = self.clock.now()
            sequence = self.store.next_sequence_for_today(now.date())
            if sequence > MAX_DAILY_SEQUENCE:
                raise InvalidStateError(f"No suspension ids left for {now.date():%Y-%m-%d}")
            suspension_id = SuspensionSnapshot.generate_id(now.date(), sequence)

            note = note.strip() if note else None
            snapshot = create_suspension(transaction, suspension_id, note or None, suspended_at=now)

            if not self.store.save_suspension(snapshot):
                raise PersistenceError(f"Failed to save suspended transaction {suspension_id}")

            self._suspensions.insert(0, snapshot)
            transaction.clear_transaction()

        logger.info(
            "Transaction suspended: id=%s items=%d total=$%.2f note=%s",
            suspension_id, snapshot.item_count, snapshot.total, snapshot.note or "-",
        )
        return suspension_id

    def resume(self, suspension_id: str, current: Transaction) -> Transaction:
        """
        Restore a suspension as a new live transaction and discard it.

        Raises:
            ConflictError: ``current`` still has items
            NotFoundError: no such suspension
            SerializationError: the stored item payload is malformed
            PersistenceError: the suspension could not be removed from the store
        """
        with self._lock:
            if not current.is_empty:
                raise ConflictError(
                    "Cannot resume while the current transaction has items. "
                    "Suspend or void the current transaction first."
                )

            snapshot = self._find(suspension_id)
            if snapshot is None:
                raise NotFoundError(suspension_id)

            restored = restore_transaction(snapshot)

            self._remove_stored(suspension_id)
            self._suspensions.remove(snapshot)

        logger.info(
            "Transaction resumed: id=%s items=%d total=$%.2f",
            suspension_id, restored.item_count, restored.total,
        )
        return restored

    def delete(self, suspension_id: str) -> bool:
        """
        Discard a suspension without restoring it.

        Returns False when the id is unknown.
        """
        with self._lock:
            snapshot = self._find(suspension_id)
            if snapshot is None:
                return False
            self._remove_stored(suspension_id)
            self._suspensions.remove(snapshot)

        logger.info("Deleted suspended transaction: %s", suspension_id)
        return True

    def cleanup_expired(self, today: Optional[date] = None) -> int:
        """Remove every suspension from a calendar day before ``today``."""
        today = today or self.clock.today()
        with self._lock:
            removed = self.store.delete_expired_before(today)
            self._suspensions = [s for s in self._suspensions if not s.is_from_previous_day(today)]
        logger.info("Suspension cleanup (before %s): %d removed", today, removed)
        return removed

    def cleanup_older_than(self, cutoff: datetime) -> int:
        """Remove every suspension suspended before ``cutoff``."""
        with self._lock:
            removed = self.store.delete_suspended_before(cutoff)
            self._suspensions = [s for s in self._suspensions if s.suspended_at >= cutoff]
        logger.info("Suspension cleanup (older than %s): %d removed", cutoff, removed)
        return removed

    def _remove_stored(self, suspension_id: str) -> None:
        """
        Delete the stored row. A row that is already gone counts as removed.

        Raises:
            PersistenceError: the row is still stored after the delete
        """
        if self.store.delete_suspension(suspension_id):
            return
        if any(s.suspension_id == suspension_id for s in self.store.load_all_suspensions()):
            raise PersistenceError(f"Failed to remove suspended transaction {suspension_id}")
        logger.warning("Suspended transaction %s was already gone from the store", suspension_id)

    def _find(self, suspension_id: str) -> Optional[SuspensionSnapshot]:
        return next((s for s in self._suspensions if s.suspension_id == suspension_id), None)
