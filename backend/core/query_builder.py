"""
Query builder — search / sort / paginate over any catalogued table.

Only identifiers present in the request's SchemaCatalog ever reach a statement; the
search term and paging values are always bound parameters.
"""
import logging
import math
from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.sql.expression import ColumnElement, TableClause

from core.db_connector import store_errors
from core.errors import ValidationError
from core.schema_catalog import SchemaCatalog
from models.table import ColumnDescriptor, Pagination, TablePage

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "/"
MAX_BIGINT = 2 ** 63 - 1


def json_scalar(value: Any) -> Any:
    """Binary values (SQLite BLOB, PostgreSQL bytea) as hex strings; everything else unchanged."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    return value


def row_to_dict(row) -> dict[str, Any]:
    return {key: json_scalar(value) for key, value in row._mapping.items()}


def normalise_sort_order(sort_order: Optional[str]) -> str:
    """Exactly ASC or DESC; anything unrecognised is ASC."""
    return "DESC" if (sort_order or "").strip().upper() == "DESC" else "ASC"


def resolve_sort_column(columns: list[ColumnDescriptor], sort_by: Optional[str]) -> Optional[str]:
    """sort_by if the table has it, else the first declared column (None for a column-less table)."""
    names = [c.name for c in columns]
    if sort_by in names:
        return sort_by
    return names[0] if names else None


def escape_like(term: str) -> str:
    return (term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
                .replace("%", LIKE_ESCAPE + "%")
                .replace("_", LIKE_ESCAPE + "_"))


def build_search_clause(
    tbl: TableClause, columns: list[ColumnDescriptor], search: Optional[str]
) -> Optional[ColumnElement]:
    """OR of case-insensitive substring matches over text-like columns.

    Returns None when there is no term or no text-like column, so search is a no-op.
    """
    if not search:
        return None
    pattern = f"%{escape_like(search)}%"
    matches = [
        tbl.c[c.name].ilike(pattern, escape=LIKE_ESCAPE)
        for c in columns if c.type_tag == "text"
    ]
    if not matches:
        return None
    return or_(*matches)


def total_pages(total_count: int, limit: int) -> int:
    if limit <= 0:
        raise ValidationError("limit must be greater than 0")
    return math.ceil(total_count / limit) if total_count else 0


def list_rows(
    catalog: SchemaCatalog,
    table: str,
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = "ASC",
) -> TablePage:
    """One page of `table`, filtered by `search` and ordered by `sort_by`."""
    if limit <= 0:
        raise ValidationError("limit must be greater than 0")
    page = max(page, 1)
    if limit > MAX_BIGINT or (page - 1) * limit > MAX_BIGINT:
        raise ValidationError(f"page {page} is out of range")

    columns = catalog.get_columns(table)   # NotFound for unknown tables
    names = [c.name for c in columns]
    tbl = catalog.table_clause(table, names)

    where = build_search_clause(tbl, columns, search)
    sort_column = resolve_sort_column(columns, sort_by)
    direction = normalise_sort_order(sort_order)

    count_stmt = select(func.count()).select_from(tbl)
    data_stmt = select(tbl)
    if where is not None:
        count_stmt = count_stmt.where(where)
        data_stmt = data_stmt.where(where)
    if sort_column is not None:
        sort_expr = tbl.c[sort_column]
        data_stmt = data_stmt.order_by(sort_expr.desc() if direction == "DESC" else sort_expr.asc())
    data_stmt = data_stmt.limit(limit).offset((page - 1) * limit)

    with store_errors(f"fetch rows from {table}"):
        total_count = int(catalog.conn.execute(count_stmt).scalar() or 0)
        rows = [row_to_dict(r) for r in catalog.conn.execute(data_stmt)]

    logger.debug("Listed %d/%d rows of %s (page %d, search=%r, sort=%s %s)",
                 len(rows), total_count, table, page, search, sort_column, direction)
    return TablePage(
        table=table,
        rows=rows,
        columns=columns,
        pagination=Pagination(
            page=page,
            limit=limit,
            total_count=total_count,
            total_pages=total_pages(total_count, limit),
        ),
    )
