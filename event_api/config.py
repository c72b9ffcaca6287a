"""
Runtime configuration.

Values come from the environment (a local .env file is loaded first) and are
collected into a single immutable Settings object that the gateway hands to
each service at construction time.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv
from psycopg2.extensions import make_dsn

DEFAULT_AUTH_TOKEN = "12345"
DEFAULT_CORS_ORIGINS = ("http://localhost:5173", "http://localhost:3000")
PRODUCTION = "production"


@dataclass(frozen=True)
class Settings:
    """
    Application settings.

    Attributes:
        database_url (str): libpq connection string for PostgreSQL.
        auth_token (str): The static shared token issued on login and
            required by routes guarded with `require_token`.
        app_env (str): Runtime mode. Anything other than "production"
            exposes internal error details in responses.
        db_pool_min (int): Minimum pooled connections.
        db_pool_max (int): Maximum pooled connections.
        cors_origins (tuple): Origins allowed by CORS.
        log_level (str): Root logging level name.
        port (int): Port for the development server.
    """

    database_url: str
    auth_token: str = DEFAULT_AUTH_TOKEN
    app_env: str = PRODUCTION
    db_pool_min: int = 1
    db_pool_max: int = 10
    cors_origins: Tuple[str, ...] = DEFAULT_CORS_ORIGINS
    log_level: str = "INFO"
    port: int = 5050

    @property
    def expose_error_details(self) -> bool:
        return self.app_env != PRODUCTION


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    # Fall back to discrete DB_* variables
    return make_dsn(
        user=os.getenv("DB_USER", "postgres"),
        password=os.getenv("DB_PASSWORD", "postgres"),
        host=os.getenv("DB_HOST", "localhost"),
        port=os.getenv("DB_PORT", "5432"),
        dbname=os.getenv("DB_NAME", "projeto_eventos"),
    )


def _split_origins(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return DEFAULT_CORS_ORIGINS
    return tuple(o.strip() for o in raw.split(",") if o.strip())


def load_settings() -> Settings:
    """
    Build Settings from the environment.

    Returns:
        Settings: The loaded configuration.

    Raises:
        RuntimeError: If AUTH_TOKEN is set but empty, or a numeric
            variable cannot be parsed.
    """
    load_dotenv()

    auth_token = os.getenv("AUTH_TOKEN", DEFAULT_AUTH_TOKEN)
    if not auth_token:
        raise RuntimeError("AUTH_TOKEN is empty. Unset it or give it a value.")

    try:
        db_pool_min = int(os.getenv("DB_POOL_MIN", 1))
        db_pool_max = int(os.getenv("DB_POOL_MAX", 10))
        port = int(os.getenv("GATEWAY_PORT", 5050))
    except ValueError as e:
        raise RuntimeError(f"Invalid numeric setting: {e}") from e

    return Settings(
        database_url=_database_url(),
        auth_token=auth_token,
        app_env=os.getenv("APP_ENV", PRODUCTION).strip().lower(),
        db_pool_min=db_pool_min,
        db_pool_max=db_pool_max,
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        port=port,
    )
