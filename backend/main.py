"""
Relational schema explorer — FastAPI application entry point.
Discovers tables, columns and foreign keys at runtime and serves listings and one-hop
relationship graphs over them.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from api import health, relationships, tables
from config import Settings, settings as default_settings
from core.db_connector import create_engine_from_settings
from core.errors import ExplorerError, StoreError, ValidationError
from core.session import SessionValidator, StaticTokenValidator

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, default_settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger("schema_explorer")


def _error_response(error: ExplorerError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={"error": error.kind, "detail": error.detail},
    )


def create_app(
    app_settings: Optional[Settings] = None,
    session_validator: Optional[SessionValidator] = None,
) -> FastAPI:
    app_settings = app_settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Schema explorer starting up…")
        app.state.engine = create_engine_from_settings(app_settings)
        try:
            yield
        finally:
            app.state.engine.dispose()
            logger.info("Schema explorer shutting down.")

    # ── App ───────────────────────────────────────────────────────────────────
    app = FastAPI(
        title="Schema Explorer",
        description="Generic table browser and foreign-key relationship explorer.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.session_validator = session_validator or StaticTokenValidator.from_settings(app_settings)

    # ── CORS ──────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Errors ────────────────────────────────────────────────────────────────
    @app.exception_handler(ExplorerError)
    async def explorer_error_handler(request: Request, exc: ExplorerError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return _error_response(ValidationError(problems))

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Unhandled record store error on %s %s", request.method, request.url.path)
        return _error_response(StoreError(f"Database error: {exc}"))

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(health.router,        prefix="/api")
    app.include_router(tables.router,        prefix="/api")
    app.include_router(relationships.router, prefix="/api")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=default_settings.API_HOST, port=default_settings.API_PORT)
