"""
Register controller.

Drives the live transaction from operator input (scans, voids, quantity
changes, tender and payment buttons, suspend/resume). Operator mistakes and
store failures never escape as exceptions: they are journaled and shown on
the display, and the transaction is left as it was.
"""
import logging
from decimal import Decimal, InvalidOperation, ROUND_CEILING
from enum import Enum
from typing import List, Optional

from pos_register.core.clock import Clock
from pos_register.core.errors import InvalidStateError, RegisterError, ValidationError
from pos_register.schemas.catalog import CatalogItem
from pos_register.schemas.suspension import SuspensionSnapshot
from pos_register.services.payment import CardPayment, CardType, CashPayment, Payment
from pos_register.services.receipt import Receipt
from pos_register.services.suspension import SuspensionManager
from pos_register.services.tax import round_money
from pos_register.services.transaction import LineItem, Transaction
from pos_register.stores.interfaces import CatalogLookup, DisplaySink, PersistenceStore, ReceiptSink

logger = logging.getLogger(__name__)


class InputSource(str, Enum):
    """Where a UPC came from."""
    SCANNER = "SCANNER"
    MANUAL = "MANUAL"
    GRID = "GRID"


class LoggingDisplay(DisplaySink):
    """Display for headless registers: journals what a screen would show."""

    def update(self, transaction: Transaction) -> None:
        logger.debug(
            "Display: %s lines=%d subtotal=$%.2f tax=$%.2f total=$%.2f",
            transaction.state.display_name, transaction.line_count,
            transaction.subtotal, transaction.tax_amount, transaction.total,
        )

    def show_error(self, message: str) -> None:
        logger.warning("Display error: %s", message)


class RegisterService:
    """Orchestrates catalog, transaction, payments, receipts and suspensions."""

    def __init__(
        self,
        catalog: CatalogLookup,
        store: PersistenceStore,
        suspensions: SuspensionManager,
        receipts: ReceiptSink,
        clock: Clock,
        display: Optional[DisplaySink] = None,
    ):
        self.catalog = catalog
        self.store = store
        self.suspensions = suspensions
        self.receipts = receipts
        self.clock = clock
        self.display = display
        self.current_transaction = Transaction()
        logger.info("Register initialized")

    def set_display(self, display: DisplaySink) -> None:
        self.display = display
        self._refresh()

    # --- shopping ---------------------------------------------------------

    def process_scan(self, upc: Optional[str], source: InputSource = InputSource.SCANNER) -> Optional[LineItem]:
        """
        Add one unit of the item with this UPC.

        Returns the affected line, or None if the scan was rejected.
        """
        try:
            if self.current_transaction.is_tendering:
                raise InvalidStateError("Cannot add items during payment. Void transaction to start over.")
            upc = (upc or "").strip()
            if not upc:
                raise ValidationError("Invalid UPC: empty")

            item = self.catalog.get_by_upc(upc)
            if item is None:
                logger.info("Item not found: upc=%s source=%s", upc, source.value)
                self._show_error(f"Item not found: {upc}")
                return None
        except RegisterError as e:
            self._reject(e)
            return None

        line = self.current_transaction.add_item(item)
        tx = self.current_transaction
        logger.info(
            "Item scanned: upc=%s desc=%s qty=%d source=%s subtotal=$%.2f tax=$%.2f total=$%.2f",
            item.upc, item.description, line.quantity, source.value, tx.subtotal, tx.tax_amount, tx.total,
        )
        self._refresh()
        return line

    def void_item(self, index: int) -> bool:
        try:
            self._require_shopping()
            line = self.current_transaction.remove_item(index)
        except RegisterError as e:
            self._reject(e)
            return False
        logger.info("Item voided: upc=%s qty=%d amount=$%.2f", line.upc, line.quantity, line.line_total)
        self._refresh()
        return True

    def change_item_quantity(self, index: int, quantity: int) -> bool:
        try:
            self._require_shopping()
            old_quantity = self.current_transaction.get_item(index).quantity
            line = self.current_transaction.change_quantity(index, quantity)
        except RegisterError as e:
            self._reject(e)
            return False
        logger.info(
            "Quantity changed: upc=%s %d -> %d subtotal=$%.2f",
            line.upc, old_quantity, quantity, self.current_transaction.subtotal,
        )
        self._refresh()
        return True

    def start_new_transaction(self) -> None:
        """Discard the live transaction (void all) and return to SHOPPING."""
        tx = self.current_transaction
        item_count, total = tx.item_count, tx.total
        tx.clear_transaction()
        logger.info("Transaction cleared: items=%d total=$%.2f", item_count, total)
        self._refresh()

    # --- tendering --------------------------------------------------------

    def start_tendering(self) -> bool:
        tx = self.current_transaction
        try:
            tx.start_tendering()
        except RegisterError as e:
            self._reject(e)
            return False

        breakdown = tx.calculate_tax_breakdown()
        for category_tax in breakdown.categories.values():
            logger.info(
                "Tax %s: $%.2f @ %s = $%.2f",
                category_tax.category, category_tax.subtotal, category_tax.formatted_rate, category_tax.tax_amount,
            )
        logger.info("Tendering started: subtotal=$%.2f tax=$%.2f total=$%.2f", tx.subtotal, tx.tax_amount, tx.total)
        self._refresh()
        return True

    def pay_exact_cash(self) -> Optional[Receipt]:
        def build(total: Decimal) -> Payment:
            return CashPayment.create(total, Decimal("0.00"), paid_at=self.clock.now())
        return self._pay(build)

    def pay_next_dollar(self) -> Optional[Receipt]:
        """Cash rounded up to the next whole dollar."""
        def build(total: Decimal) -> Payment:
            tendered = total.to_integral_value(rounding=ROUND_CEILING)
            return CashPayment.create(tendered, tendered - total, paid_at=self.clock.now())
        return self._pay(build)

    def pay_custom_cash(self, amount_tendered: Decimal) -> Optional[Receipt]:
        """Cash of an arbitrary amount; must cover the tax-inclusive total."""
        def build(total: Decimal) -> Payment:
            if not amount_tendered.is_finite():
                raise ValidationError(f"Invalid amount: {amount_tendered}")
            try:
                tendered = round_money(amount_tendered)
            except InvalidOperation:
                raise ValidationError(f"Invalid amount: {amount_tendered}")
            if tendered < total:
                raise ValidationError(
                    f"Insufficient payment: ${tendered:.2f} tendered for ${total:.2f} total"
                )
            return CashPayment.create(tendered, tendered - total, paid_at=self.clock.now())
        return self._pay(build)

    def pay_card(self, card_type: CardType) -> Optional[Receipt]:
        def build(total: Decimal) -> Payment:
            return CardPayment.create(card_type, total, paid_at=self.clock.now())
        return self._pay(build)

    def _pay(self, build) -> Optional[Receipt]:
        tx = self.current_transaction
        try:
            if tx.is_empty:
                raise InvalidStateError("Cannot process payment: transaction is empty")
            payment = build(tx.total)
        except RegisterError as e:
            self._reject(e)
            return None

        tx.set_payment(payment)
        logger.info(
            "%s payment processed: amount=$%.2f change=$%.2f",
            payment.method.display_name, payment.tendered, payment.change,
        )
        return self._complete_transaction()

    def _complete_transaction(self) -> Receipt:
        tx = self.current_transaction
        receipt = self.receipts.create(tx)

        if self.receipts.persist(receipt):
            logger.info("Receipt saved: %s", receipt.receipt_number)
        else:
            logger.error("Failed to save receipt %s", receipt.receipt_number)

        if self.store.save_completed_transaction(tx, receipt.receipt_number):
            logger.info("Transaction saved to database: %s", receipt.receipt_number)
        else:
            logger.error("Failed to save transaction %s to database", receipt.receipt_number)

        logger.info("Transaction completed: %s", receipt.receipt_number)
        self.start_new_transaction()
        return receipt

    # --- suspend / resume -------------------------------------------------

    def suspend_current(self, note: Optional[str] = None) -> Optional[str]:
        """Park the live transaction. Returns the suspension id, or None if rejected."""
        try:
            suspension_id = self.suspensions.suspend(self.current_transaction, note)
        except RegisterError as e:
            self._reject(e)
            return None
        self._refresh()
        return suspension_id

    def resume(self, suspension_id: str) -> bool:
        try:
            self.current_transaction = self.suspensions.resume(suspension_id, self.current_transaction)
        except RegisterError as e:
            self._reject(e)
            return False
        self._refresh()
        return True

    def delete_suspension(self, suspension_id: str) -> bool:
        try:
            return self.suspensions.delete(suspension_id)
        except RegisterError as e:
            self._reject(e)
            return False

    def perform_daily_cleanup(self) -> int:
        """Drop suspensions from previous days. Failures are journaled, not raised."""
        try:
            return self.suspensions.cleanup_expired(self.clock.today())
        except RegisterError as e:
            logger.error("Daily suspension cleanup failed: %s", e.message)
            return 0

    def get_suspensions(self) -> List[SuspensionSnapshot]:
        return self.suspensions.get_suspensions()

    def get_suspension_count(self) -> int:
        return self.suspensions.count

    def is_suspension_limit_reached(self) -> bool:
        return self.suspensions.is_limit_reached()

    # --- catalog ----------------------------------------------------------

    def get_all_items(self) -> List[CatalogItem]:
        return self.catalog.all_items()

    def get_popular_items(self) -> List[CatalogItem]:
        return self.catalog.popular_items()

    def shutdown(self) -> None:
        count = self.suspensions.count
        if count:
            logger.info("Note: %d suspended transactions will persist until cleanup", count)
        logger.info("Register shutdown complete")

    # --- helpers ----------------------------------------------------------

    def _require_shopping(self) -> None:
        if self.current_transaction.is_tendering:
            raise InvalidStateError("Items are locked during payment. Void transaction to start over.")

    def _reject(self, error: RegisterError) -> None:
        logger.warning("Rejected: %s", error)
        self._show_error(error.message)

    def _show_error(self, message: str) -> None:
        if self.display is not None:
            self.display.show_error(message)

    def _refresh(self) -> None:
        if self.display is not None:
            self.display.update(self.current_transaction)
