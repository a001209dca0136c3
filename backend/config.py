"""Application settings loaded from .env file."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

from core.errors import ConfigError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Record store: DATABASE_URL wins over the PG_* parts
    DATABASE_URL: str = ""
    PG_HOST: str = ""
    PG_PORT: int = 5432
    PG_DBNAME: str = ""
    PG_USER: str = ""
    PG_PASSWORD: str = ""
    DB_SCHEMA: str = "public"
    DB_SSLMODE: str = "require"

    # Pool
    DB_POOL_SIZE: int = 20
    DB_POOL_TIMEOUT_SECONDS: int = 10
    DB_POOL_RECYCLE_SECONDS: int = 30
    DB_CONNECT_TIMEOUT_SECONDS: int = 2
    DB_STATEMENT_TIMEOUT_MS: int = 15_000

    # Explorer
    PRIMARY_KEY_COLUMN: str = "id"
    DEFAULT_PAGE_LIMIT: int = 10
    MAX_PAGE_LIMIT: int = 100
    HIDE_EMPTY_TABLES: bool = True

    # Maintenance purge (one-time codes)
    MAINTENANCE_TABLE: str = "otps"
    MAINTENANCE_TIMESTAMP_COLUMN: str = "created_at"
    MAINTENANCE_RETENTION_DAYS: int = 3

    # Sessions
    SESSION_COOKIE_NAME: str = "session"
    SESSION_TOKENS: str = ""   # "principal:token,principal2:token2"

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: str = "http://localhost:3000"

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if not self.PG_HOST:
            raise ConfigError("Database configuration missing: set DATABASE_URL or PG_* environment variables.")
        return URL.create(
            "postgresql+psycopg2",
            username=self.PG_USER or None,
            password=self.PG_PASSWORD or None,
            host=self.PG_HOST,
            port=self.PG_PORT,
            database=self.PG_DBNAME or None,
        ).render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def default_schema(self) -> Optional[str]:
        if self.is_sqlite:
            return None   # SQLite has no schema concept
        return self.DB_SCHEMA or None

    @property
    def session_token_map(self) -> dict[str, str]:
        """token → principal, parsed from SESSION_TOKENS."""
        tokens: dict[str, str] = {}
        for pair in self.SESSION_TOKENS.split(","):
            principal, sep, token = pair.strip().partition(":")
            if not sep or not principal or not token:
                continue
            tokens[token.strip()] = principal.strip()
        return tokens

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
