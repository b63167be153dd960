"""
Register bootstrap and console entry point.

Each input line is a UPC. A few words drive checkout instead:
TENDER, CASH, NEXT, CASH <amount>, CARD <type>, VOID, SUSPEND [note],
RESUME <id>, LIST, QUIT.
"""
import logging
import sys
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from pos_register.core.clock import Clock, SystemClock
from pos_register.core.config import Settings, get_settings
from pos_register.core.errors import PersistenceError
from pos_register.core.logging_config import configure_logging
from pos_register.db.session import build_engine, build_session_factory, init_db
from pos_register.services.cleanup import SuspensionCleanupScheduler
from pos_register.services.payment import CardType
from pos_register.services.popularity import PopularityService
from pos_register.services.price_book import PriceBookLoader
from pos_register.services.receipt import FileReceiptSink
from pos_register.services.register import InputSource, LoggingDisplay, RegisterService
from pos_register.services.suspension import SuspensionManager
from pos_register.stores.sql_store import SqlRegisterStore

logger = logging.getLogger(__name__)


@dataclass
class RegisterApp:
    """Everything a running register owns."""
    register: RegisterService
    store: SqlRegisterStore
    scheduler: SuspensionCleanupScheduler
    popularity: PopularityService
    clock: Clock

    def start(self) -> None:
        self.register.perform_daily_cleanup()
        try:
            self.popularity.recalculate(self.clock.today())
        except PersistenceError:
            logger.error("Popular item recalculation failed", exc_info=True)
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()
        self.register.shutdown()


def create_app(settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> RegisterApp:
    """Wire the store, suspension manager, scheduler and register together."""
    settings = settings or get_settings()
    clock = clock or SystemClock(settings.REGISTER_TIMEZONE)

    engine = build_engine(settings.DATABASE_URL)
    init_db(engine)
    store = SqlRegisterStore(build_session_factory(engine))

    if settings.PRICE_BOOK_PATH and store.item_count() == 0:
        PriceBookLoader(store).load_file(settings.PRICE_BOOK_PATH)
    logger.info("Catalog ready: %d items available", store.item_count())

    manager = SuspensionManager(store, clock, max_suspended=settings.MAX_SUSPENDED_TRANSACTIONS)
    scheduler = SuspensionCleanupScheduler(
        manager,
        clock,
        retention_days=settings.SUSPENSION_RETENTION_DAYS,
        interval_seconds=settings.CLEANUP_INTERVAL_SECONDS,
        shutdown_timeout=settings.CLEANUP_SHUTDOWN_TIMEOUT_SECONDS,
    )
    register = RegisterService(
        catalog=store,
        store=store,
        suspensions=manager,
        receipts=FileReceiptSink(settings.RECEIPTS_DIR),
        clock=clock,
        display=LoggingDisplay(),
    )
    popularity = PopularityService(
        store, store, top_n=settings.POPULAR_TOP_N, period_days=settings.SALES_PERIOD_DAYS,
    )
    return RegisterApp(register=register, store=store, scheduler=scheduler, popularity=popularity, clock=clock)


def handle_command(register: RegisterService, line: str) -> bool:
    """Apply one console line. Returns False when the operator quits."""
    words = line.strip().split(maxsplit=1)
    if not words:
        return True
    command, arg = words[0].upper(), (words[1].strip() if len(words) > 1 else "")

    if command == "QUIT":
        return False
    if command == "TENDER":
        register.start_tendering()
    elif command == "CASH" and arg:
        try:
            register.pay_custom_cash(Decimal(arg))
        except InvalidOperation:
            register.display.show_error(f"Invalid amount: {arg}")
    elif command == "CASH":
        register.pay_exact_cash()
    elif command == "NEXT":
        register.pay_next_dollar()
    elif command == "CARD":
        try:
            register.pay_card(CardType[arg.upper() or "OTHER"])
        except KeyError:
            register.display.show_error(f"Unknown card type: {arg}")
    elif command == "VOID":
        register.start_new_transaction()
    elif command == "SUSPEND":
        register.suspend_current(arg or None)
    elif command == "RESUME":
        register.resume(arg)
    elif command == "LIST":
        now = register.clock.now()
        for suspension in register.get_suspensions():
            print(suspension.display_summary(now))
    else:
        register.process_scan(line.strip(), InputSource.MANUAL)
    return True


def run(lines: Iterable[str], app: RegisterApp) -> None:
    app.start()
    try:
        for line in lines:
            if not handle_command(app.register, line):
                break
    finally:
        app.stop()


def main() -> None:
    settings = get_settings()
    configure_logging("DEBUG" if settings.DEBUG else settings.LOG_LEVEL)
    app = create_app(settings)
    run(sys.stdin, app)


if __name__ == "__main__":
    main()
