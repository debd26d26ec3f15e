"""Database session configuration."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from cinemesis.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Connection execution option that makes a SQLite transaction take the write lock at BEGIN.
SQLITE_IMMEDIATE = "sqlite_begin_immediate"


def _unicode_lower(value: str | None) -> str | None:
    return value.lower() if value is not None else None


def configure_sqlite(engine: Engine) -> Engine:
    """Make pysqlite honour foreign keys, BEGIN and SAVEPOINT.

    pysqlite defers BEGIN until the first DML statement, which turns a
    leading SAVEPOINT into the outer transaction. Disabling its own handling
    and emitting BEGIN from SQLAlchemy keeps rollbacks atomic.

    Transactions begin DEFERRED so reads share the database. SQLite has no
    row locks, so a transaction started through :func:`begin_write` takes
    the write lock up front; concurrent writers then queue instead of
    failing on lock upgrade.

    SQLite's built-in ``lower()`` only folds ASCII; it is replaced with
    Python's so case-insensitive title search matches accented capitals.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn: Any) -> None:
        if conn.get_execution_options().get(SQLITE_IMMEDIATE):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")

    return engine


def begin_write(session: Session) -> None:
    """Start ``session``'s transaction as a writer.

    On SQLite the write lock is taken immediately; other databases begin
    normally. Does nothing when a transaction is already in progress.
    """
    if not session.in_transaction():
        session.connection(execution_options={SQLITE_IMMEDIATE: True})


def build_engine(url: str) -> Engine:
    """Create an engine for ``url`` with per-dialect connection settings."""
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": 30},
            echo=settings.sql_debug,
        )
        return configure_sqlite(sqlite_engine)

    connect_args: dict[str, Any] = {}
    if url.startswith("postgresql"):
        connect_args["options"] = f"-c statement_timeout={settings.db_statement_timeout_ms}"
    return create_engine(
        url,
        pool_pre_ping=True,
        echo=settings.sql_debug,
        connect_args=connect_args,
    )


# Ensure model modules are imported so that metadata is populated when create_all runs.
import cinemesis.models  # noqa: E402,F401

engine = build_engine(settings.effective_database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)
