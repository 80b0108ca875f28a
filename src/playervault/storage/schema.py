"""
Vault schema definition and idempotent creation.

Two relations:
    vault_meta  one row per owner: rows, title, updated_at
    vault_item  one row per occupied slot: (owner_id, page, slot) -> payload

The items table references the meta table only in spirit; no foreign key is
declared so a clear can delete in any order on every backend.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    text,
)
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import CreateTable

from playervault.core.models import MAX_OWNER_ID_LENGTH
from playervault.exceptions import SchemaError
from playervault.storage.dialects import Dialect

logger = logging.getLogger(__name__)

META_TABLE = "vault_meta"
ITEM_TABLE = "vault_item"


@dataclass(frozen=True)
class VaultTables:
    """The bound table objects for one dialect."""

    metadata: MetaData
    meta: Table
    item: Table


def build_tables(dialect: Dialect) -> VaultTables:
    """Build the vault tables with the dialect's binary type and options."""
    metadata = MetaData()

    meta = Table(
        META_TABLE,
        metadata,
        Column("owner_id", String(MAX_OWNER_ID_LENGTH), primary_key=True),
        # ROWS is reserved on MySQL 8
        Column("rows", Integer, nullable=False, quote=True),
        Column("title", Text, nullable=True),
        Column("updated_at", DateTime(timezone=True), nullable=True),
        **dialect.table_options,
    )

    item = Table(
        ITEM_TABLE,
        metadata,
        Column("owner_id", String(MAX_OWNER_ID_LENGTH), primary_key=True),
        Column("page", Integer, primary_key=True, nullable=False, server_default=text("0")),
        Column("slot", Integer, primary_key=True, nullable=False),
        Column("payload", dialect.binary_type(), nullable=False),
        Index(f"idx_{ITEM_TABLE}_owner", "owner_id"),
        **dialect.table_options,
    )

    return VaultTables(metadata=metadata, meta=meta, item=item)


class SchemaManager:
    """Creates the vault relations for one backend. Safe to call repeatedly."""

    def __init__(self, dialect: Dialect):
        self.dialect = dialect
        self.tables = build_tables(dialect)

    def ensure_schema(self, connection: Connection) -> None:
        """
        Create missing tables and indexes on ``connection``.

        The caller owns the transaction.

        Raises:
            SchemaError: If any DDL statement fails
        """
        try:
            self.tables.metadata.create_all(connection, checkfirst=True)
        except SQLAlchemyError as e:
            raise SchemaError(
                f"Schema ensure failed: {e}",
                backend=self.dialect.name,
            ) from e
        logger.info(
            f"Vault schema ensured (backend={self.dialect.name}, "
            f"binary_type={self.dialect.binary_type_name()})"
        )

    def ddl(self) -> list[str]:
        """Render CREATE TABLE statements for this dialect without connecting."""
        sa_dialect = self.dialect.sqlalchemy_dialect()
        return [
            str(CreateTable(table).compile(dialect=sa_dialect)).strip()
            for table in self.tables.metadata.sorted_tables
        ]
