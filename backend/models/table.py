"""Pydantic schemas for table and column descriptors and paginated listings."""
from typing import Any, Literal, Optional
from pydantic import BaseModel, Field

TypeTag = Literal["text", "numeric", "temporal", "other"]


class ColumnDescriptor(BaseModel):
    name: str
    data_type: str                      # declared type as reflected, e.g. "VARCHAR"
    type_tag: TypeTag = "other"
    is_nullable: bool = True
    is_primary_key: bool = False
    default: Optional[str] = None
    position: int = 0                   # 1-based declaration order


class TableDescriptor(BaseModel):
    name: str
    column_count: int
    row_count: Optional[int] = None     # None when not requested or the COUNT failed


class Pagination(BaseModel):
    page: int = Field(..., ge=1)
    limit: int = Field(..., gt=0)
    total_count: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)


class TablePage(BaseModel):
    table: str
    rows: list[dict[str, Any]]
    columns: list[ColumnDescriptor]
    pagination: Pagination


class TableListResponse(BaseModel):
    tables: list[TableDescriptor]


class ColumnListResponse(BaseModel):
    table: str
    columns: list[ColumnDescriptor]
