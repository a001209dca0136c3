"""Pydantic schemas for foreign-key edges and one-hop relationship graphs."""
from typing import Any, Optional
from pydantic import BaseModel, Field


class ForeignKeyEdge(BaseModel):
    """Directed: from_table.from_column references to_table.to_column."""
    from_table: str
    from_column: str
    to_table: str
    to_column: str
    constraint_name: Optional[str] = None   # SQLite leaves unnamed constraints as None

    def touches(self, table: str) -> bool:
        return self.from_table == table or self.to_table == table


class MainRecord(BaseModel):
    table: str
    data: dict[str, Any]


class RelationshipGraph(BaseModel):
    main_record: MainRecord
    # table → rows, in edge discovery order; rows reached by several edges repeat
    related_records: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)
    edges: list[ForeignKeyEdge] = Field(default_factory=list)

    @property
    def related_count(self) -> int:
        return sum(len(rows) for rows in self.related_records.values())


class RelationshipListResponse(BaseModel):
    relationships: list[ForeignKeyEdge]
