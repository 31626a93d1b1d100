"""Database connection and session management."""

from collections.abc import Generator
from typing import Annotated, Any

from fastapi import Depends
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from markshare.core.config import settings


class Base(DeclarativeBase):
    """SQLAlchemy declarative base class."""

    pass


def _engine_options() -> dict[str, Any]:
    # SQLite pools don't accept the sizing arguments
    if settings.is_sqlite:
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
    }


engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    **_engine_options(),
)

SessionLocal = sessionmaker(
    bind=engine,
    class_=Session,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


def get_db() -> Generator[Session, None, None]:
    """Get database session dependency."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# Type alias for dependency injection
DbSession = Annotated[Session, Depends(get_db)]


def configure_sqlite(target_engine: Engine) -> None:
    """
    Make pysqlite honour BEGIN/SAVEPOINT the way the ORM expects.

    The driver otherwise defers BEGIN until the first DML statement, which
    breaks SAVEPOINT-based nested transactions.
    """

    @event.listens_for(target_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(target_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


if settings.is_sqlite:
    configure_sqlite(engine)
