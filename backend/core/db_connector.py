"""
Database connector — the process-wide SQLAlchemy engine and its bounded pool.
Supports PostgreSQL (psycopg2) and SQLite. Built once in the app lifespan, disposed at shutdown.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.errors import StoreError

logger = logging.getLogger(__name__)


def create_engine_from_settings(settings) -> Engine:
    """Build the shared engine: bounded pool, pre-ping, connect and statement timeouts."""
    url = settings.database_url
    if settings.is_sqlite:
        connect_args = {"timeout": settings.DB_CONNECT_TIMEOUT_SECONDS, "check_same_thread": False}
    else:
        connect_args = {
            "connect_timeout": settings.DB_CONNECT_TIMEOUT_SECONDS,
            "sslmode": settings.DB_SSLMODE,
        }
        if settings.DB_STATEMENT_TIMEOUT_MS > 0:
            connect_args["options"] = f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"

    engine = create_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=0,
        pool_timeout=settings.DB_POOL_TIMEOUT_SECONDS,
        pool_recycle=settings.DB_POOL_RECYCLE_SECONDS,
        pool_pre_ping=True,
        connect_args=connect_args,
    )
    logger.info("Record store engine ready (%s, pool_size=%d)",
                engine.url.render_as_string(hide_password=True), settings.DB_POOL_SIZE)
    return engine


def ping(engine: Engine) -> None:
    """Round-trip a trivial query through the pool."""
    with store_errors("ping"):
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Re-raise driver/SQLAlchemy failures as StoreError, keeping the cause."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Record store failure during %s: %s", action, e)
        raise StoreError(f"Failed to {action}: {e}") from e
