"""SQLite engine and session factories."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from timeclonk.core.config import get_settings


def _install_sqlite_hooks(engine: Engine, *, foreign_keys: bool) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        # Let SQLAlchemy emit BEGIN itself so DDL runs inside the transaction too.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute(f"PRAGMA foreign_keys = {'ON' if foreign_keys else 'OFF'}")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")


def create_db_engine(db_path: Path | str, *, foreign_keys: bool = True) -> Engine:
    """Create an engine for one SQLite file.

    Store engines check foreign keys; the migration engine opens its
    connections with checking off so tables can be rebuilt in place.
    """

    settings = get_settings()
    engine = create_engine(
        f"sqlite+pysqlite:///{Path(db_path)}",
        connect_args={
            "check_same_thread": False,
            "timeout": settings.db_busy_timeout_seconds,
        },
        pool_size=settings.db_pool_size,
        max_overflow=0,
        pool_timeout=settings.db_pool_timeout_seconds,
        future=True,
    )
    _install_sqlite_hooks(engine, foreign_keys=foreign_keys)
    return engine


@lru_cache
def get_engine(db_path: str) -> Engine:
    """Shared store engine for a database file."""

    return create_db_engine(db_path)


@lru_cache
def get_session_factory(db_path: str) -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(db_path), autoflush=False, expire_on_commit=False)
