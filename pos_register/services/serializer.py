"""
Freeze a transaction into a SuspensionSnapshot and rebuild it on resume.
"""
from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from pos_register.core.errors import SerializationError
from pos_register.schemas.catalog import CatalogItem
from pos_register.schemas.suspension import SuspendedItem, SuspendedItemsPayload, SuspensionSnapshot
from pos_register.services.transaction import LineItem, Transaction, TransactionState


def encode_items(lines: Sequence[LineItem]) -> str:
    """Serialize line items to the versioned JSON payload."""
    payload = SuspendedItemsPayload(items=[
        SuspendedItem(
            upc=line.upc,
            description=line.description,
            category=line.category,
            popular=line.item.popular,
            quantity=line.quantity,
            unit_price=line.unit_price,
        )
        for line in lines
    ])
    return payload.model_dump_json()


def decode_items(items_payload: str) -> List[SuspendedItem]:
    """
    Parse a payload produced by encode_items.

    Raises:
        SerializationError: invalid JSON, unknown version or invalid item fields
    """
    try:
        return SuspendedItemsPayload.model_validate_json(items_payload).items
    except PydanticValidationError as e:
        raise SerializationError(f"Malformed suspended item payload: {e.error_count()} error(s)") from e


def create_suspension(
    transaction: Transaction,
    suspension_id: str,
    note: Optional[str] = None,
    suspended_at: Optional[datetime] = None,
) -> SuspensionSnapshot:
    """Snapshot the transaction's totals, state and items."""
    return SuspensionSnapshot(
        suspension_id=suspension_id,
        suspended_at=suspended_at or datetime.now(),
        transaction_state=transaction.state.value,
        subtotal=transaction.subtotal,
        tax=transaction.tax_amount,
        total=transaction.total,
        item_count=transaction.item_count,
        items_payload=encode_items(transaction.items),
        note=note,
    )


def restore_transaction(snapshot: SuspensionSnapshot) -> Transaction:
    """
    Rebuild a live transaction from a snapshot.

    Each unit is re-added individually so the duplicate-UPC rule rebuilds the
    quantities; totals come from the rebuilt lines, not from the snapshot.
    """
    try:
        state = TransactionState(snapshot.transaction_state)
    except ValueError as e:
        raise SerializationError(f"Unknown transaction state: {snapshot.transaction_state}") from e

    records = decode_items(snapshot.items_payload)

    transaction = Transaction()
    for record in records:
        try:
            item = CatalogItem(
                upc=record.upc,
                description=record.description,
                price=record.unit_price,
                category=record.category,
                popular=record.popular,
            )
        except PydanticValidationError as e:
            raise SerializationError(f"Invalid suspended item {record.upc!r}") from e
        for _ in range(record.quantity):
            transaction.add_item(item)

    if state == TransactionState.TENDERING:
        if transaction.is_empty:
            raise SerializationError("Tendering snapshot has no items")
        transaction.start_tendering()

    return transaction
