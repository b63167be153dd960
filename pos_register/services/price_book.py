"""
Price book loader.

Reads a tab-separated file with columns:

    UPC <TAB> Description <TAB> Price [<TAB> Category [<TAB> Popular]]

Blank lines are skipped. Bad lines are logged and counted; good lines are
inserted into the catalog.
"""
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Iterable, List

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from pos_register.core.errors import ValidationError
from pos_register.schemas.catalog import CatalogItem, DEFAULT_CATEGORY
from pos_register.stores.interfaces import CatalogStore

logger = logging.getLogger(__name__)

TRUE_VALUES = {"1", "true", "yes", "y", "popular"}


class PriceBookError(BaseModel):
    """A rejected price book line."""
    line_number: int
    message: str
    content: str = ""


class PriceBookResult(BaseModel):
    """Result of loading a price book."""
    total_lines: int = 0
    inserted: int = 0
    failed: int = 0
    errors: List[PriceBookError] = Field(default_factory=list)


def parse_line(line: str) -> CatalogItem:
    """
    Parse one non-blank price book line.

    Raises:
        ValidationError: wrong column count, empty UPC/description, bad price
    """
    parts = [p.strip() for p in line.rstrip("\r\n").split("\t")]
    if not 3 <= len(parts) <= 5:
        raise ValidationError(f"Invalid format (expected 3 to 5 columns, got {len(parts)})")

    upc, description, price_str = parts[:3]
    if not upc:
        raise ValidationError("UPC is empty")
    if not description:
        raise ValidationError("Description is empty")

    try:
        price = Decimal(price_str)
    except InvalidOperation:
        raise ValidationError(f"Invalid price '{price_str}' (not a number)")
    if not price.is_finite() or price < 0:
        raise ValidationError(f"Invalid price {price_str} (must not be negative)")

    category = parts[3] if len(parts) > 3 and parts[3] else DEFAULT_CATEGORY
    popular = len(parts) > 4 and parts[4].lower() in TRUE_VALUES

    try:
        return CatalogItem(upc=upc, description=description, price=price, category=category, popular=popular)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid item: {e.errors()[0]['msg']}") from e


class PriceBookLoader:
    """Loads price book lines into a catalog store."""

    def __init__(self, catalog: CatalogStore):
        self.catalog = catalog

    def load_lines(self, lines: Iterable[str]) -> PriceBookResult:
        result = PriceBookResult()
        for line_number, line in enumerate(lines, start=1):
            result.total_lines += 1
            if not line.strip():
                continue
            try:
                item = parse_line(line)
            except ValidationError as e:
                logger.warning("Price book line %d: %s", line_number, e.message)
                result.failed += 1
                result.errors.append(PriceBookError(line_number=line_number, message=e.message, content=line.strip()))
                continue

            if self.catalog.add_catalog_item(item):
                result.inserted += 1
            else:
                result.failed += 1
                result.errors.append(PriceBookError(line_number=line_number, message=f"Could not insert UPC {item.upc}"))

        logger.info(
            "Price book loaded: %d lines, %d inserted, %d failed",
            result.total_lines, result.inserted, result.failed,
        )
        return result

    def load_file(self, path: str) -> PriceBookResult:
        """
        Raises:
            FileNotFoundError: the price book does not exist
        """
        with Path(path).open("r", encoding="utf-8") as f:
            return self.load_lines(f)
