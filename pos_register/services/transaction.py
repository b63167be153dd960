"""
The register's live transaction: line items, checkout state and payment.

Totals are never stored. Subtotal, tax and total are derived from the current
line items on every read so that voids and quantity changes can't drift.
"""
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple

from pos_register.core.errors import InvalidStateError, ValidationError
from pos_register.schemas.catalog import CatalogItem
from pos_register.services.payment import Payment, PaymentMethod
from pos_register.services.tax import TaxBreakdown, calculate_tax_breakdown


class TransactionState(str, Enum):
    """Checkout phase of a transaction."""
    SHOPPING = "SHOPPING"
    TENDERING = "TENDERING"

    @property
    def display_name(self) -> str:
        return _STATE_DISPLAY_NAMES[self]


_STATE_DISPLAY_NAMES = {
    TransactionState.SHOPPING: "Shopping - Add Items",
    TransactionState.TENDERING: "Tendering - Process Payment",
}


class LineItem:
    """A catalog item and how many of it the customer is buying."""

    def __init__(self, item: CatalogItem, quantity: int = 1):
        if item is None:
            raise ValidationError("Item cannot be empty")
        self.item = item
        self.quantity = 1
        self.set_quantity(quantity)

    @property
    def upc(self) -> str:
        return self.item.upc

    @property
    def description(self) -> str:
        return self.item.description

    @property
    def unit_price(self) -> Decimal:
        return self.item.price

    @property
    def category(self) -> str:
        return self.item.category

    @property
    def line_total(self) -> Decimal:
        return self.item.price * self.quantity

    def increment_quantity(self) -> None:
        self.quantity += 1

    def set_quantity(self, quantity: int) -> None:
        # Voiding the line is the only way to drop it
        if quantity < 1:
            raise ValidationError(f"Quantity must be at least 1 (got {quantity})")
        self.quantity = quantity

    def __repr__(self) -> str:
        return f"{self.quantity}x {self.description} @ ${self.unit_price:.2f} = ${self.line_total:.2f}"


class Transaction:
    """
    Aggregate for one customer checkout.

    Holds at most one LineItem per UPC, in scan order. Starts in SHOPPING;
    start_tendering() moves it to TENDERING and only clear_transaction()
    returns it to SHOPPING.
    """

    def __init__(self):
        self._items: List[LineItem] = []
        self.state = TransactionState.SHOPPING
        self.payment: Optional[Payment] = None

    # --- mutation -------------------------------------------------------

    def add_item(self, item: Optional[CatalogItem]) -> Optional[LineItem]:
        """
        Add one unit of ``item``.

        A UPC already on the transaction has its quantity incremented instead
        of getting a second line. Returns the affected line, or None when no
        item was given.
        """
        if item is None:
            return None

        for line in self._items:
            if line.upc == item.upc:
                line.increment_quantity()
                return line

        line = LineItem(item)
        self._items.append(line)
        return line

    def remove_item(self, index: int) -> LineItem:
        self._check_index(index)
        return self._items.pop(index)

    def change_quantity(self, index: int, quantity: int) -> LineItem:
        self._check_index(index)
        line = self._items[index]
        line.set_quantity(quantity)
        return line

    def start_tendering(self) -> None:
        if not self._items:
            raise InvalidStateError("Cannot tender an empty transaction")
        self.state = TransactionState.TENDERING

    def set_payment(self, payment: Payment) -> None:
        self.payment = payment

    def clear_transaction(self) -> None:
        self._items.clear()
        self.state = TransactionState.SHOPPING
        self.payment = None

    # --- reads ----------------------------------------------------------

    @property
    def items(self) -> Tuple[LineItem, ...]:
        return tuple(self._items)

    def get_item(self, index: int) -> LineItem:
        self._check_index(index)
        return self._items[index]

    def find_line(self, upc: str) -> Optional[LineItem]:
        return next((line for line in self._items if line.upc == upc), None)

    def calculate_tax_breakdown(self) -> TaxBreakdown:
        return calculate_tax_breakdown((line.category, line.line_total) for line in self._items)

    def has_multiple_tax_rates(self) -> bool:
        return self.calculate_tax_breakdown().has_multiple_tax_rates()

    @property
    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self._items), Decimal("0.00"))

    @property
    def tax_amount(self) -> Decimal:
        return self.calculate_tax_breakdown().total_tax

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.tax_amount

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._items)

    @property
    def line_count(self) -> int:
        return len(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def is_tendering(self) -> bool:
        return self.state == TransactionState.TENDERING

    @property
    def is_paid(self) -> bool:
        return self.payment is not None and self.payment.completed

    @property
    def payment_method(self) -> PaymentMethod:
        return self.payment.method if self.payment is not None else PaymentMethod.NONE

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self._items):
            raise ValidationError(f"Invalid item index: {index}")

    def __repr__(self) -> str:
        return f"Transaction(state={self.state.value}, items={self.item_count}, total=${self.total:.2f})"
