"""GET /api/health — liveness plus a round trip through the connection pool."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from api.deps import get_engine
from core.db_connector import ping
from core.errors import StoreError

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check(engine: Engine = Depends(get_engine)):
    database = _check_database(engine)
    overall = "ok" if database["status"] == "up" else "degraded"
    return {
        "status": overall,
        "services": {
            "database": database,
        },
    }


def _check_database(engine: Engine) -> dict:
    try:
        ping(engine)
        return {"status": "up", "error": None}
    except StoreError as e:
        return {"status": "down", "error": e.detail}
