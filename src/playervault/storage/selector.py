"""
Backend selection and engine construction.

Selection is a pure function of configuration: the configured backend name
is matched case-insensitively against known aliases, and anything else falls
back to the embedded SQLite file (with a warning) instead of failing startup.
"""

from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError

from playervault.config import DatabaseSettings, Settings
from playervault.core.codec import ItemCodec, JsonItemCodec
from playervault.exceptions import ConfigurationError
from playervault.storage.dialects import Backend, get_dialect
from playervault.storage.repository import VaultRepository

logger = logging.getLogger(__name__)

BACKEND_ALIASES: dict[str, Backend] = {
    "sqlite": Backend.SQLITE,
    "sqlite3": Backend.SQLITE,
    "file": Backend.SQLITE,
    "mysql": Backend.MYSQL,
    "mariadb": Backend.MYSQL,
    "postgresql": Backend.POSTGRESQL,
    "postgres": Backend.POSTGRESQL,
    "pgsql": Backend.POSTGRESQL,
}

DEFAULT_BACKEND = Backend.SQLITE


def select_backend(value: str | None) -> Backend:
    """Resolve a configured backend name. Never raises."""
    if value is None or not str(value).strip():
        logger.warning(f"No storage backend configured, falling back to {DEFAULT_BACKEND.value}")
        return DEFAULT_BACKEND

    backend = BACKEND_ALIASES.get(str(value).strip().lower())
    if backend is None:
        logger.warning(
            f"Unknown storage backend {value!r}, falling back to {DEFAULT_BACKEND.value}"
        )
        return DEFAULT_BACKEND
    return backend


def build_url(backend: Backend, db_settings: DatabaseSettings) -> str:
    """
    Build the SQLAlchemy URL for a backend.

    Raises:
        ConfigurationError: If a configured URL names a different backend
    """
    if backend is Backend.SQLITE:
        return f"sqlite:///{Path(db_settings.path).expanduser()}"

    url = db_settings.url or get_dialect(backend).default_url
    try:
        url_backend = make_url(url).get_backend_name()
    except ArgumentError as e:
        raise ConfigurationError(f"Invalid database URL: {e}", setting="database.url") from e

    if BACKEND_ALIASES.get(url_backend) is not backend:
        raise ConfigurationError(
            f"Database URL is for {url_backend!r} but backend is {backend.value!r}",
            setting="database.url",
        )
    return url


def _enable_sqlite_wal(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
    finally:
        cursor.close()


def create_engine_for(backend: Backend, db_settings: DatabaseSettings) -> Engine:
    """Create the shared engine (connection pool) for a backend."""
    url = build_url(backend, db_settings)

    if backend is Backend.SQLITE:
        db_path = Path(db_settings.path).expanduser()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            url,
            echo=db_settings.echo,
            connect_args={
                "check_same_thread": False,
                "timeout": db_settings.lock_timeout,
            },
        )
        event.listen(engine, "connect", _enable_sqlite_wal)
    else:
        engine = create_engine(
            url,
            echo=db_settings.echo,
            pool_size=db_settings.pool_size,
            max_overflow=db_settings.max_overflow,
            pool_recycle=db_settings.pool_recycle,
            pool_pre_ping=db_settings.pool_pre_ping,
        )

    logger.info(f"Created {backend.value} engine for {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_repository(
    settings: Settings,
    engine: Engine | None = None,
    codec: ItemCodec | None = None,
) -> VaultRepository:
    """
    Build a VaultRepository for the configured backend.

    Args:
        settings: Application settings
        engine: Existing shared engine to borrow; created from settings if None
        codec: Item codec; JsonItemCodec if None
    """
    backend = select_backend(settings.database.backend)
    if engine is None:
        engine = create_engine_for(backend, settings.database)
    return VaultRepository(engine, get_dialect(backend), codec or JsonItemCodec())
