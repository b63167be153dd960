"""
Tests for the transaction aggregate and its checkout state machine.
"""
from decimal import Decimal

import pytest

from pos_register.core.errors import InvalidStateError, ValidationError
from pos_register.services.payment import CashPayment, PaymentMethod
from pos_register.services.transaction import LineItem, Transaction, TransactionState


class TestAddItem:
    """Test scanning items onto a transaction."""

    def test_same_upc_increments_quantity(self, soda):
        tx = Transaction()
        tx.add_item(soda)
        tx.add_item(soda)

        assert tx.line_count == 1
        assert tx.items[0].quantity == 2
        assert tx.items[0].line_total == Decimal("2.00")

    def test_new_upc_appends_line_in_scan_order(self, soda, cigarettes):
        tx = Transaction()
        tx.add_item(cigarettes)
        tx.add_item(soda)

        assert [line.upc for line in tx.items] == ["2001", "1001"]
        assert tx.item_count == 2

    def test_none_is_ignored(self):
        tx = Transaction()
        assert tx.add_item(None) is None
        assert tx.is_empty


class TestTotals:
    """Test derived subtotal, tax and total."""

    def test_mixed_category_scenario(self, transaction):
        """$2.00 OTHER at 7% plus $5.00 TOBACCO at 20%."""
        assert transaction.subtotal == Decimal("7.00")
        assert transaction.tax_amount == Decimal("1.14")
        assert transaction.total == Decimal("8.14")
        assert transaction.item_count == 3
        assert transaction.line_count == 2
        assert transaction.has_multiple_tax_rates() is True

    def test_total_is_subtotal_plus_tax_after_every_edit(self, transaction, beer):
        def check():
            assert transaction.total == transaction.subtotal + transaction.tax_amount

        check()
        transaction.add_item(beer)
        check()
        transaction.change_quantity(0, 5)
        check()
        transaction.remove_item(1)
        check()
        transaction.clear_transaction()
        check()
        assert transaction.total == Decimal("0.00")

    def test_tax_is_recomputed_after_void(self, transaction):
        transaction.remove_item(1)  # cigarettes
        assert transaction.tax_amount == Decimal("0.14")
        assert transaction.has_multiple_tax_rates() is False


class TestQuantityChanges:
    """Test quantity edits and voids."""

    @pytest.mark.parametrize("bad_quantity", [0, -1])
    def test_quantity_below_one_rejected(self, transaction, bad_quantity):
        with pytest.raises(ValidationError):
            transaction.change_quantity(0, bad_quantity)
        assert transaction.items[0].quantity == 2

    def test_change_quantity(self, transaction):
        transaction.change_quantity(1, 3)
        assert transaction.items[1].quantity == 3
        assert transaction.subtotal == Decimal("17.00")

    def test_out_of_range_index_rejected(self, transaction):
        with pytest.raises(ValidationError):
            transaction.remove_item(5)
        with pytest.raises(ValidationError):
            transaction.change_quantity(-1, 2)
        assert transaction.line_count == 2

    def test_line_item_requires_positive_quantity(self, soda):
        with pytest.raises(ValidationError):
            LineItem(soda, quantity=0)


class TestStateMachine:
    """Test SHOPPING -> TENDERING -> cleared."""

    def test_starts_shopping(self):
        tx = Transaction()
        assert tx.state == TransactionState.SHOPPING
        assert tx.payment_method == PaymentMethod.NONE
        assert not tx.is_paid

    def test_empty_transaction_cannot_tender(self):
        tx = Transaction()
        with pytest.raises(InvalidStateError):
            tx.start_tendering()
        assert tx.state == TransactionState.SHOPPING

    def test_start_tendering(self, transaction):
        transaction.start_tendering()
        assert transaction.is_tendering

    def test_set_payment_does_not_change_state(self, transaction):
        transaction.start_tendering()
        transaction.set_payment(CashPayment.create(Decimal("10.00"), Decimal("1.86")))

        assert transaction.is_paid
        assert transaction.state == TransactionState.TENDERING
        assert transaction.payment_method == PaymentMethod.CASH

    def test_clear_resets_everything(self, transaction):
        transaction.start_tendering()
        transaction.set_payment(CashPayment.create(Decimal("8.14"), Decimal("0.00")))

        transaction.clear_transaction()

        assert transaction.is_empty
        assert transaction.state == TransactionState.SHOPPING
        assert transaction.payment is None
