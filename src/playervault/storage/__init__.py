"""
Vault storage: schema, dialect strategies, repository and backend selection.
"""

from playervault.storage.dialects import Backend, Dialect, get_dialect
from playervault.storage.repository import VaultRepository
from playervault.storage.schema import SchemaManager, build_tables
from playervault.storage.selector import (
    create_engine_for,
    create_repository,
    select_backend,
)

__all__ = [
    "Backend",
    "Dialect",
    "SchemaManager",
    "VaultRepository",
    "build_tables",
    "create_engine_for",
    "create_repository",
    "get_dialect",
    "select_backend",
]
