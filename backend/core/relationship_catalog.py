"""
Relationship catalog — foreign-key constraints as directed, single-column edges.

Composite constraints are split into one edge per (constrained, referred) column pair,
all sharing the constraint name.
"""
import logging

from core.db_connector import store_errors
from core.schema_catalog import SchemaCatalog
from models.relationship import ForeignKeyEdge

logger = logging.getLogger(__name__)


class RelationshipCatalog:
    def __init__(self, catalog: SchemaCatalog):
        self.catalog = catalog
        self._edges: list[ForeignKeyEdge] | None = None

    def list_foreign_keys(self) -> list[ForeignKeyEdge]:
        """All FK edges in the schema, ordered by (from_table, from_column)."""
        if self._edges is None:
            self._edges = self._reflect_edges()
        return list(self._edges)

    def edges_for_table(self, table: str) -> list[ForeignKeyEdge]:
        """Outbound (table references others) and inbound (others reference table) edges."""
        self.catalog.require_table(table)
        return [e for e in self.list_foreign_keys() if e.touches(table)]

    def _reflect_edges(self) -> list[ForeignKeyEdge]:
        insp = self.catalog.inspector
        schema = self.catalog.schema
        table_names = self.catalog.table_names()
        known = set(table_names)

        edges: list[ForeignKeyEdge] = []
        for table in table_names:
            with store_errors(f"reflect foreign keys of {table}"):
                fks = insp.get_foreign_keys(table, schema=schema)
            for fk in fks:
                referred_schema = fk.get("referred_schema")
                referred_table = fk["referred_table"]
                if referred_schema not in (None, schema) or referred_table not in known:
                    logger.info("Skipping FK %s on %s: target %s.%s is outside the catalog",
                                fk.get("name"), table, referred_schema or schema, referred_table)
                    continue
                for src_col, ref_col in zip(fk["constrained_columns"], fk["referred_columns"]):
                    edges.append(ForeignKeyEdge(
                        from_table=table,
                        from_column=src_col,
                        to_table=referred_table,
                        to_column=ref_col,
                        constraint_name=fk.get("name"),
                    ))

        edges.sort(key=lambda e: (e.from_table, e.from_column))
        logger.debug("Catalog snapshot: %d foreign-key edges", len(edges))
        return edges
