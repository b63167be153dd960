"""
Receipts for completed transactions and a sink that writes them as text files.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional, Set, Tuple

from pos_register.core.errors import InvalidStateError
from pos_register.services.payment import CardPayment, CashPayment, Payment
from pos_register.services.transaction import LineItem, Transaction
from pos_register.stores.interfaces import ReceiptSink

logger = logging.getLogger(__name__)

RECEIPT_WIDTH = 50


def generate_receipt_number(at: datetime, sequence: int = 0) -> str:
    """Format: RYYYYMMDDHHMMSS, with -NN for later sales in the same second."""
    number = f"R{at:%Y%m%d%H%M%S}"
    if sequence:
        number += f"-{sequence:02d}"
    return number


@dataclass(frozen=True)
class Receipt:
    receipt_number: str
    timestamp: datetime
    lines: Tuple[LineItem, ...]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    payment: Payment

    @property
    def formatted_timestamp(self) -> str:
        return self.timestamp.strftime("%Y-%m-%d %H:%M:%S")


def format_receipt(receipt: Receipt) -> str:
    """Render a fixed-width text receipt."""
    rule = "-" * RECEIPT_WIDTH
    out = [
        "POS REGISTER".center(RECEIPT_WIDTH),
        "Thank you for your purchase!".center(RECEIPT_WIDTH),
        rule,
        f"Receipt #: {receipt.receipt_number}",
        f"Date: {receipt.formatted_timestamp}",
        rule,
        "QTY  ITEM" + "TOTAL".rjust(RECEIPT_WIDTH - 9),
        rule,
    ]
    for line in receipt.lines:
        name = line.description[:RECEIPT_WIDTH - 16]
        out.append(f"{line.quantity:>3}  {name:<{RECEIPT_WIDTH - 16}}{line.line_total:>11.2f}")
        if line.quantity > 1:
            out.append(f"       @ ${line.unit_price:.2f} each")

    def money_row(label: str, amount: Decimal) -> str:
        return f"{label}{f'${amount:.2f}':>{RECEIPT_WIDTH - len(label)}}"

    out.append(rule)
    out.append(money_row("Subtotal:", receipt.subtotal))
    out.append(money_row("Tax:", receipt.tax))
    out.append(money_row("TOTAL:", receipt.total))
    out.append(rule)

    payment = receipt.payment
    if isinstance(payment, CashPayment):
        out.append(money_row("Cash tendered:", payment.tendered))
        out.append(money_row("Change:", payment.change))
    elif isinstance(payment, CardPayment):
        out.append(money_row(f"{payment.card_type.display_name}:", payment.amount))
    out.append(rule)
    return "\n".join(out) + "\n"


class FileReceiptSink(ReceiptSink):
    """Writes each receipt to ``<directory>/<receipt_number>.txt``."""

    def __init__(self, directory: str):
        self.directory = Path(directory)
        self._issued_second: Optional[datetime] = None
        self._issued: Set[str] = set()

    def create(self, transaction: Transaction) -> Receipt:
        if not transaction.is_paid:
            raise InvalidStateError("Cannot create receipt for unpaid transaction")
        paid_at = transaction.payment.paid_at
        return Receipt(
            receipt_number=self._next_number(paid_at),
            timestamp=paid_at,
            lines=transaction.items,
            subtotal=transaction.subtotal,
            tax=transaction.tax_amount,
            total=transaction.total,
            payment=transaction.payment,
        )

    def persist(self, receipt: Receipt) -> bool:
        path = self.directory / f"{receipt.receipt_number}.txt"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(format_receipt(receipt), encoding="utf-8")
        except OSError:
            logger.error("Failed to write receipt %s", path, exc_info=True)
            return False
        return True

    def _next_number(self, paid_at: datetime) -> str:
        """First number for this second not yet issued or already on disk."""
        second = paid_at.replace(microsecond=0)
        if second != self._issued_second:
            self._issued_second = second
            self._issued = set()

        sequence = 0
        number = generate_receipt_number(second)
        while number in self._issued or (self.directory / f"{number}.txt").exists():
            sequence += 1
            number = generate_receipt_number(second, sequence)
        self._issued.add(number)
        return number
