"""
Recalculates which catalog items are flagged popular from recent sales.
"""
import logging
from datetime import date
from typing import List, Optional

from pos_register.stores.interfaces import CatalogStore, PersistenceStore

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 65
SALES_PERIOD_DAYS = 30


class PopularityService:
    """Marks the best-selling items popular for the quick-pick grid."""

    def __init__(
        self,
        catalog: CatalogStore,
        store: PersistenceStore,
        top_n: int = DEFAULT_TOP_N,
        period_days: int = SALES_PERIOD_DAYS,
    ):
        self.catalog = catalog
        self.store = store
        self.top_n = top_n
        self.period_days = period_days

    def top_sellers(self, today: date) -> List[str]:
        """UPCs ordered by units sold (ties broken by UPC), at most ``top_n``."""
        sales = self.store.sales_aggregate_for_days(self.period_days, today)
        ranked = sorted(sales.items(), key=lambda kv: (-kv[1], kv[0]))
        return [upc for upc, _ in ranked[:self.top_n]]

    def recalculate(self, today: date) -> Optional[List[str]]:
        """
        Flag the current top sellers popular.

        Returns the flagged UPCs, or None when there are no sales in the
        period (the static flags from the price book are kept).
        """
        upcs = self.top_sellers(today)
        if not upcs:
            logger.info("No sales in the last %d days; keeping static popular items", self.period_days)
            return None

        if not self.catalog.mark_popular(upcs):
            logger.error("Failed to update popular items")
            return None

        logger.info("Popular items updated: %d items marked popular", len(upcs))
        return upcs
