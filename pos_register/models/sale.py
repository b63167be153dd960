"""
Completed sale and SaleItem models used for sales analytics.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Integer, Date, Index
from sqlalchemy.orm import relationship

from pos_register.db.base import Base


class Sale(Base):
    """A completed, paid transaction (one receipt)."""
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, autoincrement=True)
    receipt_number = Column(String(32), nullable=False, unique=True)
    completed_at = Column(DateTime, nullable=False)
    sale_date = Column(Date, nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String(10), nullable=False)  # CASH, CARD
    amount_tendered = Column(Numeric(10, 2), nullable=False)
    change_amount = Column(Numeric(10, 2), nullable=False, default=0)
    card_type = Column(String(20), nullable=True)

    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_sales_date', 'sale_date'),
    )


class SaleItem(Base):
    """A line item within a completed sale."""
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False)
    upc = Column(String(32), nullable=False)
    description = Column(String, nullable=False)
    category = Column(String(50), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    line_total = Column(Numeric(10, 2), nullable=False)

    sale = relationship("Sale", back_populates="items")
