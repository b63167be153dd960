"""
Database session management.
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from pos_register.db.base import Base


def build_engine(database_url: str) -> Engine:
    """Create an engine; SQLite connections are shared with the cleanup thread."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create all register tables that do not exist yet."""
    # Register the models with Base.metadata
    import pos_register.models  # noqa: F401

    Base.metadata.create_all(bind=engine)

