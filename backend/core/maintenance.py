"""
Maintenance purge — drop expired one-time codes before the table is read.

Runs in its own transaction on its own pooled connection, so a failed DELETE cannot
abort the request's read. Failures are logged and swallowed.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import DateTime, column, delete, func, literal, table as table_clause
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.errors import ExplorerError, MaintenanceError
from core.schema_catalog import SchemaCatalog

logger = logging.getLogger(__name__)


def is_maintenance_table(table: str, settings) -> bool:
    return bool(settings.MAINTENANCE_TABLE) and table.lower() == settings.MAINTENANCE_TABLE.lower()


def expiry_cutoff(dialect_name: str, retention_days: int, now: Optional[datetime] = None):
    """The purge threshold for `dialect_name`.

    SQLite stores timestamps as naive text, so it gets a naive UTC value. Other stores
    compare against the server clock, or a timezone-aware bound when `now` is given, so
    TIMESTAMPTZ columns are compared in absolute time.
    """
    window = timedelta(days=retention_days)
    if dialect_name == "sqlite":
        now = now or datetime.now(timezone.utc)
        return (now.astimezone(timezone.utc) - window).replace(tzinfo=None)
    if now is None:
        return func.now() - window
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return literal(now - window, DateTime(timezone=True))


def purge_expired_rows(
    engine: Engine,
    catalog: SchemaCatalog,
    table: str,
    timestamp_column: str,
    retention_days: int,
    now: Optional[datetime] = None,
) -> int:
    """Delete rows of `table` whose `timestamp_column` is older than the retention window.

    Raises MaintenanceError on any failure. Returns the number of rows deleted.
    """
    try:
        catalog.require_column(table, timestamp_column)
    except ExplorerError as e:
        raise MaintenanceError(f"Cannot purge {table}: {e.detail}") from e

    cutoff = expiry_cutoff(engine.dialect.name, retention_days, now)
    tbl = table_clause(table, column(timestamp_column, DateTime()), schema=catalog.schema)
    stmt = delete(tbl).where(tbl.c[timestamp_column] < cutoff)
    try:
        with engine.begin() as conn:
            deleted = conn.execute(stmt).rowcount
    except SQLAlchemyError as e:
        raise MaintenanceError(f"Failed to purge {table}: {e}") from e
    return deleted


def run_maintenance(engine: Engine, catalog: SchemaCatalog, table: str, settings) -> Optional[int]:
    """Purge the designated maintenance table if `table` is it. Never raises."""
    if not is_maintenance_table(table, settings):
        return None
    # Validated name from the snapshot, not the caller's spelling
    actual = next((t for t in catalog.table_names() if t.lower() == table.lower()), None)
    if actual is None:
        return None
    try:
        deleted = purge_expired_rows(
            engine,
            catalog,
            actual,
            settings.MAINTENANCE_TIMESTAMP_COLUMN,
            settings.MAINTENANCE_RETENTION_DAYS,
        )
    except MaintenanceError as e:
        logger.warning("Maintenance purge skipped: %s", e.detail)
        return None
    if deleted:
        logger.info("Purged %d expired rows from %s", deleted, actual)
    return deleted
