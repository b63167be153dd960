"""
Catalog item schema.
"""
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_CATEGORY = "OTHER"


class CatalogItem(BaseModel):
    """A price book entry looked up by UPC. Immutable once loaded."""
    upc: str
    description: str
    price: Decimal
    category: str = DEFAULT_CATEGORY
    popular: bool = False

    @field_validator('upc', 'description')
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('must not be empty')
        return v

    @field_validator('price')
    @classmethod
    def price_not_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError('price cannot be negative')
        return v

    @field_validator('category')
    @classmethod
    def normalize_category(cls, v: str) -> str:
        return v.strip().upper() or DEFAULT_CATEGORY

    def __str__(self) -> str:
        return f"{self.description} (${self.price:.2f})"

    model_config = ConfigDict(frozen=True)
