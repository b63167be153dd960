"""
Suspension snapshot schemas.

The item payload is an explicit, versioned wire format; it is decoded back
into catalog items on resume and never mirrors the in-memory line item layout.
"""
import re
from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pos_register.schemas.catalog import DEFAULT_CATEGORY

PAYLOAD_VERSION = 1

SUSPENSION_ID_PATTERN = re.compile(r"^S-\d{8}-\d{3}$")


class SuspendedItem(BaseModel):
    """One line of a suspended transaction."""
    upc: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category: str = DEFAULT_CATEGORY
    popular: bool = False
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(ge=0)


class SuspendedItemsPayload(BaseModel):
    """Versioned envelope for the serialized line items."""
    version: Literal[1] = PAYLOAD_VERSION
    items: List[SuspendedItem]


class SuspensionSnapshot(BaseModel):
    """
    Frozen, persistable projection of a transaction parked mid-checkout.

    Totals are recorded for display only; a resumed transaction always
    recomputes them from the restored items.
    """
    suspension_id: str
    suspended_at: datetime
    transaction_state: str
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    item_count: int
    items_payload: str
    note: Optional[str] = None

    @field_validator('suspension_id')
    @classmethod
    def id_format(cls, v: str) -> str:
        if not SUSPENSION_ID_PATTERN.match(v):
            raise ValueError('suspension id must look like S-YYYYMMDD-NNN')
        return v

    @staticmethod
    def generate_id(day: date, sequence: int) -> str:
        """Format: S-YYYYMMDD-NNN"""
        return f"S-{day:%Y%m%d}-{sequence:03d}"

    @property
    def suspension_date(self) -> date:
        return self.suspended_at.date()

    def is_from_previous_day(self, today: date) -> bool:
        """Eligible for the daily cleanup."""
        return self.suspension_date < today

    @property
    def formatted_suspended_at(self) -> str:
        return self.suspended_at.strftime("%b %d, %H:%M")

    def time_ago(self, now: datetime) -> str:
        """Human readable age of the suspension relative to ``now``."""
        minutes = int((now - self.suspended_at).total_seconds() // 60)

        if minutes < 1:
            return "Just now"
        if minutes == 1:
            return "1 minute ago"
        if minutes < 60:
            return f"{minutes} minutes ago"

        hours = minutes // 60
        if hours == 1:
            return "1 hour ago"
        if hours < 24:
            return f"{hours} hours ago"

        days = hours // 24
        if days == 1:
            return "Yesterday"
        return f"{days} days ago"

    def display_summary(self, now: datetime) -> str:
        return f"{self.suspension_id} - {self.item_count} items - ${self.total:.2f} - {self.time_ago(now)}"

    model_config = ConfigDict(frozen=True)
