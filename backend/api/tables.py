"""GET /api/tables — catalogued tables, paginated rows and per-column detail."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.engine import Engine

from api.deps import get_catalog, get_engine, get_settings, require_principal
from config import Settings
from core.maintenance import run_maintenance
from core.query_builder import list_rows
from core.schema_catalog import SchemaCatalog
from models.table import ColumnListResponse, TableListResponse, TablePage

router = APIRouter(tags=["tables"], dependencies=[Depends(require_principal)])
logger = logging.getLogger(__name__)


@router.get("/tables", response_model=TableListResponse)
def get_tables(
    include_empty: Optional[bool] = None,
    catalog: SchemaCatalog = Depends(get_catalog),
    settings: Settings = Depends(get_settings),
):
    """All base tables with column and row counts. Empty tables are hidden by default."""
    tables = catalog.list_tables(with_row_counts=True)
    if include_empty is None:
        include_empty = not settings.HIDE_EMPTY_TABLES
    if not include_empty:
        tables = [t for t in tables if t.row_count != 0]
    return TableListResponse(tables=tables)


@router.get("/tables/{table}", response_model=TablePage)
def get_table_rows(
    table: str,
    page: int = 1,
    limit: Optional[int] = Query(None, ge=1),
    search: str = "",
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: str = Query("ASC", alias="sortOrder"),
    catalog: SchemaCatalog = Depends(get_catalog),
    engine: Engine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    catalog.require_table(table)
    run_maintenance(engine, catalog, table, settings)
    limit = min(limit or settings.DEFAULT_PAGE_LIMIT, settings.MAX_PAGE_LIMIT)
    return list_rows(
        catalog,
        table,
        page=page,
        limit=limit,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/tables/{table}/columns", response_model=ColumnListResponse)
def get_table_columns(
    table: str,
    catalog: SchemaCatalog = Depends(get_catalog),
    engine: Engine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    catalog.require_table(table)
    run_maintenance(engine, catalog, table, settings)
    return ColumnListResponse(table=table, columns=catalog.get_columns(table))
