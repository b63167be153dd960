"""
Catalog item table loaded from the price book.
"""
from sqlalchemy import Column, String, Numeric, Boolean, DateTime, func, Index

from pos_register.db.base import Base


class CatalogItemRecord(Base):
    """A sellable item keyed by UPC."""
    __tablename__ = "catalog_items"

    upc = Column(String(32), primary_key=True)
    description = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(50), nullable=False, server_default="OTHER")
    is_popular = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (
        Index('idx_catalog_items_popular', 'is_popular'),
    )
