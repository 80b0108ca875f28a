"""
Per-backend SQL primitives.

The repository algorithm is shared by every backend. The only things that
differ are collected here: the binary column type, table options and the
default connection URL.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from sqlalchemy import LargeBinary
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.engine import Dialect as SQLAlchemyDialect
from sqlalchemy.types import TypeEngine


class Backend(str, Enum):
    """Supported storage backends."""

    SQLITE = "sqlite"
    MYSQL = "mysql"
    POSTGRESQL = "postgresql"


@dataclass(frozen=True)
class Dialect:
    """
    Strategy object holding the backend-specific primitives.

    Attributes:
        backend: Which backend this describes
        binary_type: Factory for the payload column type
        table_options: Extra keyword arguments for every Table
        default_url: URL used when none is configured
        sqlalchemy_dialect: Factory for the SQLAlchemy dialect, used to
            render DDL without a live connection
    """

    backend: Backend
    binary_type: Callable[[], TypeEngine]
    default_url: str
    sqlalchemy_dialect: Callable[[], SQLAlchemyDialect]
    table_options: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.backend.value

    def binary_type_name(self) -> str:
        """SQL name of the payload column type, e.g. BLOB or BYTEA."""
        return self.binary_type().compile(dialect=self.sqlalchemy_dialect())


SQLITE = Dialect(
    backend=Backend.SQLITE,
    binary_type=LargeBinary,
    default_url="sqlite:///playervault.db",
    sqlalchemy_dialect=sqlite.dialect,
)

MYSQL = Dialect(
    backend=Backend.MYSQL,
    binary_type=mysql.BLOB,
    default_url="mysql+pymysql://localhost/playervault",
    sqlalchemy_dialect=mysql.dialect,
    table_options={"mysql_engine": "InnoDB", "mysql_charset": "utf8mb4"},
)

POSTGRESQL = Dialect(
    backend=Backend.POSTGRESQL,
    binary_type=postgresql.BYTEA,
    default_url="postgresql+psycopg://localhost/playervault",
    sqlalchemy_dialect=postgresql.dialect,
)

DIALECTS: dict[Backend, Dialect] = {
    Backend.SQLITE: SQLITE,
    Backend.MYSQL: MYSQL,
    Backend.POSTGRESQL: POSTGRESQL,
}


def get_dialect(backend: Backend) -> Dialect:
    return DIALECTS[backend]


__all__ = [
    "Backend",
    "Dialect",
    "DIALECTS",
    "SQLITE",
    "MYSQL",
    "POSTGRESQL",
    "get_dialect",
]
