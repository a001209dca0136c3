"""Shared FastAPI dependencies — settings, pooled connection, session, catalog snapshot."""
from typing import Iterator, Optional

from fastapi import Depends, Request
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from config import Settings
from core.errors import StoreError, Unauthenticated
from core.schema_catalog import SchemaCatalog


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_engine(request: Request) -> Engine:
    return request.app.state.engine


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token:
        return token.strip()
    return None


def require_principal(request: Request, settings: Settings = Depends(get_settings)) -> str:
    """Session cookie (or bearer token) → principal. Runs before any database work."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME) or _bearer_token(request)
    principal = request.app.state.session_validator.verify(token)
    if not principal:
        raise Unauthenticated("Unauthorized")
    return principal


def get_connection(engine: Engine = Depends(get_engine)) -> Iterator[Connection]:
    """One pooled connection per request, returned to the pool when the response is done."""
    try:
        conn = engine.connect()
    except SQLAlchemyError as e:
        raise StoreError(f"Could not connect to database: {e}") from e
    try:
        yield conn
    finally:
        conn.close()


def get_catalog(
    conn: Connection = Depends(get_connection),
    settings: Settings = Depends(get_settings),
) -> SchemaCatalog:
    """A fresh catalog snapshot for this request only."""
    return SchemaCatalog(conn, schema=settings.default_schema)
