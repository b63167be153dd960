"""
Test configuration and fixtures.
"""
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Generator, List

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from pos_register.core.clock import Clock
from pos_register.db.session import build_session_factory, init_db
from pos_register.schemas.catalog import CatalogItem
from pos_register.services.receipt import FileReceiptSink
from pos_register.services.register import RegisterService
from pos_register.services.suspension import SuspensionManager
from pos_register.services.transaction import Transaction
from pos_register.stores.interfaces import DisplaySink
from pos_register.stores.sql_store import SqlRegisterStore


class FakeClock(Clock):
    """Clock that only moves when a test moves it."""

    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class RecordingDisplay(DisplaySink):
    """Display that remembers what it was asked to show."""

    def __init__(self):
        self.updates: List[Transaction] = []
        self.errors: List[str] = []

    def update(self, transaction: Transaction) -> None:
        self.updates.append(transaction)

    def show_error(self, message: str) -> None:
        self.errors.append(message)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 15, 10, 30, 0))


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite shared across threads and sessions."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine: Engine) -> SqlRegisterStore:
    return SqlRegisterStore(build_session_factory(engine))


@pytest.fixture
def soda() -> CatalogItem:
    return CatalogItem(upc="1001", description="Cola 12oz", price=Decimal("1.00"))


@pytest.fixture
def cigarettes() -> CatalogItem:
    return CatalogItem(upc="2001", description="Cigarettes", price=Decimal("5.00"), category="TOBACCO")


@pytest.fixture
def beer() -> CatalogItem:
    return CatalogItem(upc="3001", description="Lager 6pk", price=Decimal("8.99"), category="ALCOHOL")


@pytest.fixture
def catalog(store: SqlRegisterStore, soda, cigarettes, beer) -> SqlRegisterStore:
    """Store preloaded with the three test items."""
    for item in (soda, cigarettes, beer):
        store.add_catalog_item(item)
    return store


@pytest.fixture
def manager(store: SqlRegisterStore, clock: FakeClock) -> SuspensionManager:
    return SuspensionManager(store, clock)


@pytest.fixture
def display() -> RecordingDisplay:
    return RecordingDisplay()


@pytest.fixture
def register(catalog, manager, clock, display, tmp_path) -> RegisterService:
    return RegisterService(
        catalog=catalog,
        store=catalog,
        suspensions=manager,
        receipts=FileReceiptSink(str(tmp_path / "receipts")),
        clock=clock,
        display=display,
    )


@pytest.fixture
def transaction(soda, cigarettes) -> Transaction:
    """Soda x2 (OTHER) and cigarettes x1 (TOBACCO)."""
    tx = Transaction()
    tx.add_item(soda)
    tx.add_item(soda)
    tx.add_item(cigarettes)
    return tx
