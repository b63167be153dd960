"""
SQLAlchemy models for the register.
"""
# Catalog
from pos_register.models.catalog import CatalogItemRecord

# Suspensions
from pos_register.models.suspension import SuspendedTransactionRecord, SuspensionSequence

# Sales
from pos_register.models.sale import Sale, SaleItem


__all__ = [
    # Catalog
    "CatalogItemRecord",
    # Suspensions
    "SuspendedTransactionRecord",
    "SuspensionSequence",
    # Sales
    "Sale",
    "SaleItem",
]
