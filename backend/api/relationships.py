"""GET /api/relationships and /api/tables/{table}/{id}/relationships — FK edges and one-hop graphs."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from api.deps import get_catalog, get_engine, get_settings, require_principal
from config import Settings
from core.maintenance import run_maintenance
from core.relationship_catalog import RelationshipCatalog
from core.relationship_resolver import RelationshipResolver
from core.schema_catalog import SchemaCatalog
from models.relationship import RelationshipGraph, RelationshipListResponse

router = APIRouter(tags=["relationships"], dependencies=[Depends(require_principal)])
logger = logging.getLogger(__name__)


@router.get("/relationships", response_model=RelationshipListResponse)
def get_relationships(catalog: SchemaCatalog = Depends(get_catalog)):
    """Every foreign-key edge in the schema, independent of any row."""
    return RelationshipListResponse(relationships=RelationshipCatalog(catalog).list_foreign_keys())


@router.get("/tables/{table}/{record_id}/relationships", response_model=RelationshipGraph)
def get_record_relationships(
    table: str,
    record_id: str,
    catalog: SchemaCatalog = Depends(get_catalog),
    engine: Engine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    catalog.require_table(table)
    run_maintenance(engine, catalog, table, settings)
    resolver = RelationshipResolver(catalog, primary_key=settings.PRIMARY_KEY_COLUMN)
    return resolver.resolve(table, record_id)
