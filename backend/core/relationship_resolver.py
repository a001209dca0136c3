"""
Relationship resolver — the one-hop foreign-key neighbourhood of a single row.

Outbound edges (this table references another) follow the row's own FK value; inbound
edges (another table references this one) look for rows pointing back at it. Rows are
bucketed per neighbouring table in edge discovery order and never de-duplicated, so a
table reached through two edges lists every row each edge produced. Any store failure
aborts the whole resolution; partial graphs are never returned.
"""
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.sql import sqltypes

from core.db_connector import store_errors
from core.errors import InvalidIdentifier, NotFound
from core.query_builder import MAX_BIGINT, json_scalar, row_to_dict
from core.relationship_catalog import RelationshipCatalog
from core.schema_catalog import SchemaCatalog
from models.relationship import ForeignKeyEdge, MainRecord, RelationshipGraph

logger = logging.getLogger(__name__)


def coerce_key(record_id: Any, sa_type) -> Any:
    """Coerce a path-supplied id to an integer key column's type; NotFound if it can't be one."""
    if isinstance(sa_type, sqltypes.Integer) and not isinstance(record_id, int):
        try:
            record_id = int(str(record_id).strip())
        except ValueError:
            raise NotFound(f"Record '{record_id}' not found") from None
    if isinstance(sa_type, sqltypes.Integer) and not -MAX_BIGINT - 1 <= record_id <= MAX_BIGINT:
        raise NotFound(f"Record '{record_id}' not found")
    return record_id


class RelationshipResolver:
    def __init__(
        self,
        catalog: SchemaCatalog,
        relationships: RelationshipCatalog | None = None,
        primary_key: str = "id",
    ):
        self.catalog = catalog
        self.relationships = relationships or RelationshipCatalog(catalog)
        self.primary_key = primary_key

    def list_foreign_keys(self) -> list[ForeignKeyEdge]:
        return self.relationships.list_foreign_keys()

    def resolve(self, table: str, record_id: Any) -> RelationshipGraph:
        self.catalog.require_table(table)
        if not self.catalog.validate_identifier(table, self.primary_key):
            raise InvalidIdentifier(f"Table '{table}' has no '{self.primary_key}' column")

        key = coerce_key(record_id, self.catalog.column_type(table, self.primary_key))
        main = self._fetch_one(table, self.primary_key, key)
        if main is None:
            raise NotFound(f"Record '{record_id}' not found in '{table}'")

        related: dict[str, list[dict[str, Any]]] = {}
        traversed: list[ForeignKeyEdge] = []
        for edge in self.relationships.edges_for_table(table):
            walked = False
            if edge.from_table == table:
                value = main.get(edge.from_column)
                if value is not None:
                    rows = self._fetch_matching(edge.to_table, edge.to_column, value)
                    related.setdefault(edge.to_table, []).extend(rows)
                    walked = True
            if edge.to_table == table:
                # Referenced column value; the primary key for conventional FKs
                value = main.get(edge.to_column)
                if value is not None:
                    rows = self._fetch_matching(edge.from_table, edge.from_column, value)
                    related.setdefault(edge.from_table, []).extend(rows)
                    walked = True
            if walked:
                traversed.append(edge)
            else:
                logger.debug("No reference through %s.%s → %s.%s for %s/%s",
                             edge.from_table, edge.from_column, edge.to_table, edge.to_column,
                             table, record_id)

        logger.info("Resolved %s/%s: %d edges, %d related rows",
                    table, record_id, len(traversed), sum(len(r) for r in related.values()))
        return RelationshipGraph(
            main_record=MainRecord(table=table, data={k: json_scalar(v) for k, v in main.items()}),
            related_records=related,
            edges=traversed,
        )

    # ── Fetch helpers ─────────────────────────────────────────────────────────

    def _fetch_one(self, table: str, column_name: str, value: Any) -> dict[str, Any] | None:
        tbl = self.catalog.table_clause(table, self.catalog.column_names(table))
        stmt = select(tbl).where(tbl.c[column_name] == value).limit(1)
        with store_errors(f"fetch record from {table}"):
            row = self.catalog.conn.execute(stmt).first()
        return dict(row._mapping) if row is not None else None

    def _fetch_matching(self, table: str, column_name: str, value: Any) -> list[dict[str, Any]]:
        self.catalog.require_column(table, column_name)
        tbl = self.catalog.table_clause(table, self.catalog.column_names(table))
        stmt = select(tbl).where(tbl.c[column_name] == value)
        with store_errors(f"fetch related records from {table}"):
            return [row_to_dict(r) for r in self.catalog.conn.execute(stmt)]
