"""
Collaborator interfaces (repository pattern).

Stores must be swappable and return schema/domain objects, never ORM rows.
"""
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from pos_register.schemas.catalog import CatalogItem
from pos_register.schemas.suspension import SuspensionSnapshot
from pos_register.services.transaction import Transaction

if TYPE_CHECKING:
    from pos_register.services.receipt import Receipt


class CatalogLookup(ABC):
    """Read access to the price book."""

    @abstractmethod
    def get_by_upc(self, upc: str) -> Optional[CatalogItem]:
        """Return the item for a UPC, or None if it is not in the price book."""
        ...

    @abstractmethod
    def all_items(self) -> List[CatalogItem]:
        """Return every catalog item ordered by description."""
        ...

    @abstractmethod
    def popular_items(self) -> List[CatalogItem]:
        """Return items flagged popular ordered by description."""
        ...


class CatalogStore(CatalogLookup):
    """Price book maintenance."""

    @abstractmethod
    def add_catalog_item(self, item: CatalogItem) -> bool:
        """Insert one item. Returns False if the UPC exists or the write fails."""
        ...

    @abstractmethod
    def item_count(self) -> int:
        ...

    @abstractmethod
    def mark_popular(self, upcs: Iterable[str]) -> bool:
        """Flag exactly these UPCs popular and clear the flag on all others."""
        ...


class PersistenceStore(ABC):
    """
    Durable storage for suspensions and completed sales.

    Each call either fully applies or leaves the store unchanged.
    """

    @abstractmethod
    def save_suspension(self, snapshot: SuspensionSnapshot) -> bool:
        ...

    @abstractmethod
    def load_all_suspensions(self) -> List[SuspensionSnapshot]:
        """Return all outstanding suspensions, most recently suspended first."""
        ...

    @abstractmethod
    def delete_suspension(self, suspension_id: str) -> bool:
        """Returns True if a row was removed."""
        ...

    @abstractmethod
    def next_sequence_for_today(self, today: date) -> int:
        """Issue the next 1-based suspension sequence number for ``today``."""
        ...

    @abstractmethod
    def delete_expired_before(self, day: date) -> int:
        """Delete suspensions whose suspension date is before ``day``. Returns count."""
        ...

    @abstractmethod
    def delete_suspended_before(self, cutoff: datetime) -> int:
        """Delete suspensions suspended before ``cutoff``. Returns count."""
        ...

    @abstractmethod
    def save_completed_transaction(self, transaction: Transaction, receipt_id: str) -> bool:
        ...

    @abstractmethod
    def sales_aggregate_for_days(self, days: int, today: date) -> Dict[str, int]:
        """Units sold per UPC over the last ``days`` days up to ``today``."""
        ...


class DisplaySink(ABC):
    """Where the register reports the live transaction and operator errors."""

    @abstractmethod
    def update(self, transaction: Transaction) -> None:
        ...

    @abstractmethod
    def show_error(self, message: str) -> None:
        ...


class ReceiptSink(ABC):
    """Builds and keeps receipts for completed transactions."""

    @abstractmethod
    def create(self, transaction: Transaction) -> "Receipt":
        ...

    @abstractmethod
    def persist(self, receipt: "Receipt") -> bool:
        ...
