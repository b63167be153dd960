"""
Tests for popular item recalculation.
"""
from datetime import datetime
from decimal import Decimal

from pos_register.services.payment import CashPayment
from pos_register.services.popularity import PopularityService
from pos_register.services.transaction import Transaction


def _record_sale(store, receipt_number, *items):
    tx = Transaction()
    for item in items:
        tx.add_item(item)
    tx.set_payment(CashPayment.create(tx.total, Decimal("0.00"), paid_at=datetime(2024, 1, 14, 12, 0)))
    store.save_completed_transaction(tx, receipt_number)


class TestPopularity:

    def test_no_sales_keeps_static_flags(self, catalog, clock):
        catalog.mark_popular(["3001"])
        service = PopularityService(catalog, catalog, top_n=2)

        assert service.recalculate(clock.today()) is None
        assert [i.upc for i in catalog.popular_items()] == ["3001"]

    def test_top_sellers_marked(self, catalog, clock, soda, cigarettes, beer):
        _record_sale(catalog, "R1", soda, soda, soda, beer)
        _record_sale(catalog, "R2", cigarettes, cigarettes)
        service = PopularityService(catalog, catalog, top_n=2)

        flagged = service.recalculate(clock.today())

        assert flagged == ["1001", "2001"]
        assert {i.upc for i in catalog.popular_items()} == {"1001", "2001"}
