"""
Payment records attached to a transaction once tendering completes.

A payment is either CashPayment or CardPayment; an unpaid transaction simply
has no payment. Neither factory checks the amounts against the transaction
total: the register computes exact, next-dollar and custom cash amounts (and
rejects insufficient custom cash) before a payment is built.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


class PaymentMethod(str, Enum):
    """Payment methods accepted by the register."""
    CASH = "CASH"
    CARD = "CARD"
    NONE = "NONE"

    @property
    def display_name(self) -> str:
        return self.value.title()


class CardType(str, Enum):
    """Payment card brands."""
    VISA = "VISA"
    MASTERCARD = "MASTERCARD"
    AMERICAN_EXPRESS = "AMERICAN_EXPRESS"
    DISCOVER = "DISCOVER"
    OTHER = "OTHER"

    @property
    def display_name(self) -> str:
        return _CARD_DISPLAY_NAMES[self]


_CARD_DISPLAY_NAMES = {
    CardType.VISA: "Visa",
    CardType.MASTERCARD: "Mastercard",
    CardType.AMERICAN_EXPRESS: "American Express",
    CardType.DISCOVER: "Discover",
    CardType.OTHER: "Other",
}


@dataclass(frozen=True)
class CashPayment:
    tendered: Decimal
    change: Decimal
    paid_at: datetime

    method = PaymentMethod.CASH
    completed = True

    @classmethod
    def create(cls, tendered: Decimal, change: Decimal, paid_at: Optional[datetime] = None) -> "CashPayment":
        return cls(tendered=tendered, change=change, paid_at=paid_at or datetime.now())

    @property
    def amount(self) -> Decimal:
        """Amount kept by the register."""
        return self.tendered - self.change


@dataclass(frozen=True)
class CardPayment:
    card_type: CardType
    amount: Decimal
    paid_at: datetime

    method = PaymentMethod.CARD
    completed = True

    @classmethod
    def create(cls, card_type: CardType, amount: Decimal, paid_at: Optional[datetime] = None) -> "CardPayment":
        return cls(card_type=card_type, amount=amount, paid_at=paid_at or datetime.now())

    @property
    def tendered(self) -> Decimal:
        return self.amount

    @property
    def change(self) -> Decimal:
        return Decimal("0.00")


Payment = Union[CashPayment, CardPayment]
