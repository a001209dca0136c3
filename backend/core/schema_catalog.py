"""
Schema catalog — live table/column reflection and the identifier allow-list.

A SchemaCatalog wraps one request's connection. Its SQLAlchemy Inspector caches what it
reflects, so the catalog *is* the request's snapshot: build a new one per request and
every identifier that reaches a query string is checked against what the store reported
moments earlier.
"""
import logging
from typing import Optional

from sqlalchemy import column, func, inspect, select, table as table_clause
from sqlalchemy.engine import Connection
from sqlalchemy.exc import CompileError, SQLAlchemyError
from sqlalchemy.sql import sqltypes
from sqlalchemy.sql.expression import TableClause

from core.db_connector import store_errors
from core.errors import InvalidIdentifier, NotFound
from models.table import ColumnDescriptor, TableDescriptor

logger = logging.getLogger(__name__)

_TEMPORAL_TYPES = (sqltypes.Date, sqltypes.DateTime, sqltypes.Time, sqltypes.Interval)
_NUMERIC_TYPES = (sqltypes.Integer, sqltypes.Numeric, sqltypes.Float)


def classify_type(sa_type) -> str:
    """Map a reflected SQLAlchemy type to text | numeric | temporal | other.

    VARCHAR, TEXT and CHAR (all String subclasses) are text-like. Enums subclass
    String but are not free text, so they fall through to "other".
    """
    if isinstance(sa_type, sqltypes.Enum):
        return "other"
    if isinstance(sa_type, sqltypes.String):
        return "text"
    if isinstance(sa_type, _NUMERIC_TYPES):
        return "numeric"
    if isinstance(sa_type, _TEMPORAL_TYPES):
        return "temporal"
    return "other"


def _declared_type(sa_type) -> str:
    try:
        data_type = str(sa_type).upper()
    except CompileError:
        data_type = type(sa_type).__name__.upper()
    # Simplify long type strings
    if "(" in data_type:
        data_type = data_type.split("(")[0]
    return data_type


class SchemaCatalog:
    def __init__(self, conn: Connection, schema: Optional[str] = None):
        self.conn = conn
        self.schema = schema
        with store_errors("open the schema catalog"):
            self.inspector = inspect(conn)

    # ── Tables ────────────────────────────────────────────────────────────────

    def table_names(self) -> list[str]:
        """Base tables in the default schema, ordered by name."""
        with store_errors("list tables"):
            return sorted(self.inspector.get_table_names(schema=self.schema))

    def list_tables(self, with_row_counts: bool = True) -> list[TableDescriptor]:
        names = self.table_names()
        logger.debug("Catalog snapshot: %d tables in schema %s", len(names), self.schema or "main")
        tables = []
        for name in names:
            row_count = self.row_count(name) if with_row_counts else None
            tables.append(TableDescriptor(
                name=name,
                column_count=len(self.get_columns(name)),
                row_count=row_count,
            ))
        return tables

    def row_count(self, table: str) -> Optional[int]:
        """COUNT(*) for one table; None (and a warning) if the count fails."""
        self.require_table(table)
        stmt = select(func.count()).select_from(self.table_clause(table, []))
        try:
            return int(self.conn.execute(stmt).scalar() or 0)
        except SQLAlchemyError as e:
            logger.warning("Row count failed for %s: %s", table, e)
            # A failed statement poisons the open transaction on PostgreSQL
            self.conn.rollback()
            return None

    # ── Columns ───────────────────────────────────────────────────────────────

    def get_columns(self, table: str) -> list[ColumnDescriptor]:
        """Columns in declaration order. NotFound if the table is not in the snapshot."""
        self.require_table(table)
        with store_errors(f"reflect columns of {table}"):
            raw_cols = self.inspector.get_columns(table, schema=self.schema)
            pk_cols = set(self.inspector.get_pk_constraint(table, schema=self.schema).get("constrained_columns") or [])

        result = []
        for position, col in enumerate(raw_cols, start=1):
            default = col.get("default")
            result.append(ColumnDescriptor(
                name=col["name"],
                data_type=_declared_type(col["type"]),
                type_tag=classify_type(col["type"]),
                is_nullable=col.get("nullable", True),
                is_primary_key=col["name"] in pk_cols,
                default=None if default is None else str(default),
                position=position,
            ))
        return result

    def column_names(self, table: str) -> list[str]:
        return [c.name for c in self.get_columns(table)]

    def column_type(self, table: str, column_name: str):
        """The reflected SQLAlchemy type of one column."""
        self.require_column(table, column_name)
        with store_errors(f"reflect columns of {table}"):
            raw_cols = self.inspector.get_columns(table, schema=self.schema)
        return next(c["type"] for c in raw_cols if c["name"] == column_name)

    # ── Allow-list ────────────────────────────────────────────────────────────

    def validate_identifier(self, table: str, column_name: Optional[str] = None) -> bool:
        """Pure allow-list check against this snapshot. Never touches SQL with the raw name."""
        if table not in self.table_names():
            return False
        if column_name is None:
            return True
        return column_name in self.column_names(table)

    def require_table(self, table: str) -> None:
        if not self.validate_identifier(table):
            raise NotFound(f"Table '{table}' not found")

    def require_column(self, table: str, column_name: str) -> None:
        self.require_table(table)
        if not self.validate_identifier(table, column_name):
            raise InvalidIdentifier(f"Column '{column_name}' does not exist on table '{table}'")

    def table_clause(self, table: str, column_names: list[str]) -> TableClause:
        """A lightweight Core table bound to validated identifiers only."""
        self.require_table(table)
        allowed = set(self.column_names(table)) if column_names else set()
        for name in column_names:
            if name not in allowed:
                raise InvalidIdentifier(f"Column '{name}' does not exist on table '{table}'")
        return table_clause(table, *[column(name) for name in column_names], schema=self.schema)
