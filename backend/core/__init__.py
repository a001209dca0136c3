from core.db_connector import create_engine_from_settings, ping  # noqa: F401
from core.schema_catalog import SchemaCatalog  # noqa: F401
from core.relationship_catalog import RelationshipCatalog  # noqa: F401
from core.query_builder import list_rows  # noqa: F401
from core.relationship_resolver import RelationshipResolver  # noqa: F401
from core.maintenance import run_maintenance  # noqa: F401
from core.session import SessionValidator, StaticTokenValidator  # noqa: F401
