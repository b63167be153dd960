"""
SQLAlchemy-backed catalog and persistence store.

Every operation runs in its own session so the cleanup scheduler thread and
the register thread never share one. Writes roll back on failure; bool
contracts report the failure as False, value-returning ones raise
PersistenceError.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, delete, update, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from pos_register.core.errors import PersistenceError
from pos_register.models.catalog import CatalogItemRecord
from pos_register.models.sale import Sale, SaleItem
from pos_register.models.suspension import SuspendedTransactionRecord, SuspensionSequence
from pos_register.schemas.catalog import CatalogItem
from pos_register.schemas.suspension import SuspensionSnapshot
from pos_register.services.payment import CardPayment
from pos_register.services.transaction import Transaction
from pos_register.stores.interfaces import CatalogStore, PersistenceStore

logger = logging.getLogger(__name__)


def _to_catalog_item(record: CatalogItemRecord) -> CatalogItem:
    return CatalogItem(
        upc=record.upc,
        description=record.description,
        price=record.price,
        category=record.category,
        popular=record.is_popular,
    )


def _to_snapshot(record: SuspendedTransactionRecord) -> SuspensionSnapshot:
    return SuspensionSnapshot(
        suspension_id=record.suspension_id,
        suspended_at=record.suspended_at,
        transaction_state=record.transaction_state,
        subtotal=record.subtotal,
        tax=record.tax,
        total=record.total,
        item_count=record.item_count,
        items_payload=record.items_payload,
        note=record.note,
    )


class SqlRegisterStore(CatalogStore, PersistenceStore):
    """Catalog lookup plus suspension and sales persistence over one database."""

    def __init__(self, session_factory: sessionmaker):
        """
        Args:
            session_factory: SQLAlchemy sessionmaker bound to the register database
        """
        self.session_factory = session_factory

    # --- catalog ----------------------------------------------------------

    def get_by_upc(self, upc: str) -> Optional[CatalogItem]:
        with self.session_factory() as db:
            record = db.get(CatalogItemRecord, upc)
            return _to_catalog_item(record) if record is not None else None

    def all_items(self) -> List[CatalogItem]:
        with self.session_factory() as db:
            stmt = select(CatalogItemRecord).order_by(CatalogItemRecord.description)
            return [_to_catalog_item(r) for r in db.execute(stmt).scalars().all()]

    def popular_items(self) -> List[CatalogItem]:
        with self.session_factory() as db:
            stmt = (
                select(CatalogItemRecord)
                .where(CatalogItemRecord.is_popular.is_(True))
                .order_by(CatalogItemRecord.description)
            )
            return [_to_catalog_item(r) for r in db.execute(stmt).scalars().all()]

    def add_catalog_item(self, item: CatalogItem) -> bool:
        with self.session_factory() as db:
            try:
                db.add(CatalogItemRecord(
                    upc=item.upc,
                    description=item.description,
                    price=item.price,
                    category=item.category,
                    is_popular=item.popular,
                ))
                db.commit()
                return True
            except IntegrityError:
                db.rollback()
                logger.warning("Duplicate UPC skipped: %s", item.upc)
                return False
            except SQLAlchemyError:
                db.rollback()
                logger.error("Failed to insert catalog item %s", item.upc, exc_info=True)
                return False

    def item_count(self) -> int:
        with self.session_factory() as db:
            return db.execute(select(func.count()).select_from(CatalogItemRecord)).scalar_one()

    def mark_popular(self, upcs: Iterable[str]) -> bool:
        upcs = list(upcs)
        with self.session_factory() as db:
            try:
                db.execute(update(CatalogItemRecord).values(is_popular=False))
                if upcs:
                    db.execute(
                        update(CatalogItemRecord)
                        .where(CatalogItemRecord.upc.in_(upcs))
                        .values(is_popular=True)
                    )
                db.commit()
                return True
            except SQLAlchemyError:
                db.rollback()
                logger.error("Failed to update popular items", exc_info=True)
                return False

    # --- suspensions ------------------------------------------------------

    def save_suspension(self, snapshot: SuspensionSnapshot) -> bool:
        with self.session_factory() as db:
            try:
                db.add(SuspendedTransactionRecord(
                    suspension_id=snapshot.suspension_id,
                    suspended_at=snapshot.suspended_at,
                    suspension_date=snapshot.suspension_date,
                    transaction_state=snapshot.transaction_state,
                    subtotal=snapshot.subtotal,
                    tax=snapshot.tax,
                    total=snapshot.total,
                    item_count=snapshot.item_count,
                    items_payload=snapshot.items_payload,
                    note=snapshot.note,
                ))
                db.commit()
                return True
            except SQLAlchemyError:
                db.rollback()
                logger.error("Failed to save suspension %s", snapshot.suspension_id, exc_info=True)
                return False

    def load_all_suspensions(self) -> List[SuspensionSnapshot]:
        try:
            with self.session_factory() as db:
                stmt = select(SuspendedTransactionRecord).order_by(
                    SuspendedTransactionRecord.suspended_at.desc()
                )
                return [_to_snapshot(r) for r in db.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to load suspended transactions") from e

    def delete_suspension(self, suspension_id: str) -> bool:
        with self.session_factory() as db:
            try:
                result = db.execute(
                    delete(SuspendedTransactionRecord)
                    .where(SuspendedTransactionRecord.suspension_id == suspension_id)
                )
                db.commit()
                return result.rowcount > 0
            except SQLAlchemyError:
                db.rollback()
                logger.error("Failed to delete suspension %s", suspension_id, exc_info=True)
                return False

    def next_sequence_for_today(self, today: date) -> int:
        """
        Sequences only move forward within a day, so an id freed by resume or
        delete is never issued twice.
        """
        with self.session_factory() as db:
            try:
                sequence = db.get(SuspensionSequence, today)
                if sequence is None:
                    sequence = SuspensionSequence(sequence_date=today, last_value=1)
                    db.add(sequence)
                else:
                    sequence.last_value += 1
                db.commit()
                return sequence.last_value
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceError("Failed to allocate suspension sequence") from e

    def delete_expired_before(self, day: date) -> int:
        return self._delete_suspensions(SuspendedTransactionRecord.suspension_date < day)

    def delete_suspended_before(self, cutoff: datetime) -> int:
        return self._delete_suspensions(SuspendedTransactionRecord.suspended_at < cutoff)

    def _delete_suspensions(self, condition) -> int:
        with self.session_factory() as db:
            try:
                result = db.execute(delete(SuspendedTransactionRecord).where(condition))
                db.commit()
                return result.rowcount
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceError("Failed to delete expired suspensions") from e

    # --- sales ------------------------------------------------------------

    def save_completed_transaction(self, transaction: Transaction, receipt_id: str) -> bool:
        payment = transaction.payment
        if payment is None:
            logger.error("Refusing to record unpaid transaction %s", receipt_id)
            return False

        with self.session_factory() as db:
            try:
                sale = Sale(
                    receipt_number=receipt_id,
                    completed_at=payment.paid_at,
                    sale_date=payment.paid_at.date(),
                    subtotal=transaction.subtotal,
                    tax=transaction.tax_amount,
                    total=transaction.total,
                    payment_method=payment.method.value,
                    amount_tendered=payment.tendered,
                    change_amount=payment.change,
                    card_type=payment.card_type.value if isinstance(payment, CardPayment) else None,
                )
                for line in transaction.items:
                    sale.items.append(SaleItem(
                        upc=line.upc,
                        description=line.description,
                        category=line.category,
                        quantity=line.quantity,
                        unit_price=line.unit_price,
                        line_total=line.line_total,
                    ))
                db.add(sale)
                db.commit()
                return True
            except SQLAlchemyError:
                db.rollback()
                logger.error("Failed to save sale %s", receipt_id, exc_info=True)
                return False

    def sales_aggregate_for_days(self, days: int, today: date) -> Dict[str, int]:
        cutoff = today - timedelta(days=days)
        try:
            with self.session_factory() as db:
                stmt = (
                    select(SaleItem.upc, func.sum(SaleItem.quantity).label("units"))
                    .join(Sale, SaleItem.sale_id == Sale.id)
                    .where(Sale.sale_date > cutoff, Sale.sale_date <= today)
                    .group_by(SaleItem.upc)
                )
                return {row.upc: int(row.units) for row in db.execute(stmt).all()}
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to aggregate sales") from e
