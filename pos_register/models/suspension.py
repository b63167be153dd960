"""
Suspended (parked) transactions and their per-day id sequence.
"""
from sqlalchemy import Column, String, DateTime, Date, Numeric, Integer, Text, Index

from pos_register.db.base import Base


class SuspendedTransactionRecord(Base):
    """At-rest snapshot of a transaction parked mid-checkout."""
    __tablename__ = "suspended_transactions"

    suspension_id = Column(String(20), primary_key=True)  # S-YYYYMMDD-NNN
    suspended_at = Column(DateTime, nullable=False)
    suspension_date = Column(Date, nullable=False)
    transaction_state = Column(String(20), nullable=False)  # SHOPPING, TENDERING
    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    item_count = Column(Integer, nullable=False)
    items_payload = Column(Text, nullable=False)
    note = Column(Text, nullable=True)

    __table_args__ = (
        Index('idx_suspended_transactions_date', 'suspension_date'),
    )


class SuspensionSequence(Base):
    """Last issued suspension sequence number per calendar day."""
    __tablename__ = "suspension_sequences"

    sequence_date = Column(Date, primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)
