"""
Tests for payment records.
"""
from datetime import datetime
from decimal import Decimal

import pytest

from pos_register.services.payment import CardPayment, CardType, CashPayment, PaymentMethod


class TestCashPayment:

    def test_create(self):
        paid_at = datetime(2024, 1, 15, 12, 0)
        payment = CashPayment.create(Decimal("20.00"), Decimal("11.86"), paid_at=paid_at)

        assert payment.method == PaymentMethod.CASH
        assert payment.completed is True
        assert payment.paid_at == paid_at
        assert payment.amount == Decimal("8.14")

    def test_create_stamps_current_time(self):
        before = datetime.now()
        payment = CashPayment.create(Decimal("1.00"), Decimal("0.00"))
        assert payment.paid_at >= before

    def test_does_not_check_sufficiency(self):
        """Sufficiency is the register's job on the custom cash path, not the record's."""
        payment = CashPayment.create(Decimal("1.00"), Decimal("0.00"))
        assert payment.tendered == Decimal("1.00")

    def test_immutable(self):
        payment = CashPayment.create(Decimal("5.00"), Decimal("0.00"))
        with pytest.raises(AttributeError):
            payment.tendered = Decimal("50.00")


class TestCardPayment:

    def test_create(self):
        payment = CardPayment.create(CardType.AMERICAN_EXPRESS, Decimal("8.14"))

        assert payment.method == PaymentMethod.CARD
        assert payment.completed is True
        assert payment.tendered == Decimal("8.14")
        assert payment.change == Decimal("0.00")
        assert payment.card_type.display_name == "American Express"
