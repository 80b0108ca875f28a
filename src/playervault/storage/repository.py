"""
Backend-portable vault repository.

One implementation serves SQLite, MySQL and PostgreSQL; the differences are
injected through a Dialect. The engine (connection pool) is borrowed from the
caller: each operation checks out a connection and returns it to the pool,
but the repository never disposes the engine.

Error policy:
- ensure_schema() raises SchemaError
- load() never raises for storage failures; it falls back to defaults
- save() and clear() return False on failure after rolling back

Usage:
    >>> repo = VaultRepository(engine, SQLITE, JsonItemCodec())
    >>> repo.ensure_schema()
    >>> model = repo.load(owner_id, default_rows=6, default_title="Vault")
    >>> repo.save(model, container)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from playervault.core.codec import ItemCodec
from playervault.core.models import (
    DEFAULT_PAGE,
    SLOTS_PER_ROW,
    ItemRecord,
    VaultMeta,
    VaultModel,
    clamp_rows,
    normalize_owner_id,
)
from playervault.exceptions import EncodeError, SchemaError, StorageError
from playervault.logging import owner_context
from playervault.storage.dialects import Dialect
from playervault.storage.schema import SchemaManager

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VaultRepository:
    """
    CRUD for player vaults with transactional save and clear.

    Attributes:
        engine: Borrowed SQLAlchemy engine; never disposed here
        dialect: Backend primitives
        codec: Item codec used for every payload
    """

    def __init__(self, engine: Engine, dialect: Dialect, codec: ItemCodec):
        self.engine = engine
        self.dialect = dialect
        self.codec = codec
        self.schema = SchemaManager(dialect)
        self._meta = self.schema.tables.meta
        self._item = self.schema.tables.item

    def __repr__(self) -> str:
        return f"VaultRepository(backend={self.dialect.name!r}, url={self.engine.url!r})"

    @property
    def backend_name(self) -> str:
        return self.dialect.name

    @contextmanager
    def _transaction(self, operation: str, owner_id: str | None = None) -> Iterator[Connection]:
        """
        Check out a connection and run the block in one transaction.

        Commits on success. On error the transaction is rolled back, the
        connection goes back to the pool, and SQLAlchemy errors are wrapped
        in StorageError.
        """
        try:
            with self.engine.connect() as conn:
                with conn.begin():
                    yield conn
        except SQLAlchemyError as e:
            raise StorageError(
                f"Database error: {e}",
                operation=operation,
                owner_id=owner_id,
            ) from e

    # -------------------------------------------------------------------------
    # Schema
    # -------------------------------------------------------------------------

    def ensure_schema(self) -> None:
        """Create the vault tables if missing. Raises SchemaError."""
        try:
            with self.engine.connect() as conn:
                with conn.begin():
                    self.schema.ensure_schema(conn)
        except SQLAlchemyError as e:
            # Connect or commit failures surface here rather than in DDL
            raise SchemaError(
                f"Schema ensure failed: {e}",
                backend=self.dialect.name,
            ) from e

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def load(self, owner_id: str | UUID, default_rows: int, default_title: str | None) -> VaultModel:
        """
        Load an owner's vault, or synthesize one from the defaults.

        Meta rows supply rows/title when present. Page-0 items are decoded
        and undecodable or out-of-range slots are dropped. Any storage error
        is logged and yields an empty vault built from the defaults.
        """
        owner = normalize_owner_id(owner_id)
        rows = clamp_rows(default_rows)
        title = default_title

        with owner_context(owner):
            try:
                with self._transaction("load", owner) as conn:
                    meta_row = conn.execute(
                        select(self._meta.c.rows, self._meta.c.title)
                        .where(self._meta.c.owner_id == owner)
                    ).first()
                    if meta_row is not None:
                        rows = clamp_rows(meta_row.rows)
                        if meta_row.title is not None:
                            title = meta_row.title

                    item_rows = conn.execute(
                        select(self._item.c.slot, self._item.c.payload)
                        .where(self._item.c.owner_id == owner)
                        .where(self._item.c.page == DEFAULT_PAGE)
                        .order_by(self._item.c.slot)
                    ).all()
            except StorageError as e:
                logger.warning(f"Vault load failed, using defaults: {e}")
                return VaultModel.empty(owner, default_rows, default_title)

            capacity = rows * SLOTS_PER_ROW
            items: dict[int, ItemRecord] = {}
            for slot, payload in item_rows:
                if not 0 <= slot < capacity:
                    logger.warning(f"Ignoring stored slot {slot} outside capacity {capacity}")
                    continue
                item = self.codec.decode(payload)
                if item is None:
                    logger.warning(f"Dropping undecodable item in slot {slot}")
                    continue
                items[slot] = ItemRecord(slot, item)

            return VaultModel(owner_id=owner, rows=rows, title=title, page=DEFAULT_PAGE, items=items)

    def get_meta(self, owner_id: str | UUID) -> VaultMeta | None:
        """Return the stored metadata row, or None if absent or unreadable."""
        owner = normalize_owner_id(owner_id)
        try:
            with self._transaction("get_meta", owner) as conn:
                row = conn.execute(
                    select(self._meta).where(self._meta.c.owner_id == owner)
                ).first()
        except StorageError as e:
            logger.warning(f"Vault meta lookup failed: {e}")
            return None

        if row is None:
            return None
        return VaultMeta(owner_id=row.owner_id, rows=row.rows, title=row.title, updated_at=row.updated_at)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def save(self, model: VaultModel, container: Sequence[Any]) -> bool:
        """
        Persist a vault page from the live container in one transaction.

        Meta is inserted on first save only; afterwards just updated_at
        moves, so rows/title keep their first-written values. The page's
        item rows are replaced wholesale by the container's occupied slots.

        Returns:
            True if committed, False if anything failed (nothing is written)
        """
        owner = model.owner_id
        page = model.page
        expected_size = model.rows * SLOTS_PER_ROW

        with owner_context(owner):
            if len(container) != expected_size:
                logger.warning(
                    f"Container size ({len(container)}) does not match rows*9 "
                    f"({expected_size}). Proceeding anyway."
                )

            try:
                with self._transaction("save", owner) as conn:
                    now = _utcnow()
                    has_meta = conn.execute(
                        select(self._meta.c.owner_id).where(self._meta.c.owner_id == owner)
                    ).first() is not None

                    if has_meta:
                        conn.execute(
                            update(self._meta)
                            .where(self._meta.c.owner_id == owner)
                            .values(updated_at=now)
                        )
                    else:
                        conn.execute(
                            insert(self._meta).values(
                                owner_id=owner,
                                rows=model.rows,
                                title=model.title,
                                updated_at=now,
                            )
                        )

                    conn.execute(
                        delete(self._item)
                        .where(self._item.c.owner_id == owner)
                        .where(self._item.c.page == page)
                    )

                    rows = self._encode_container(owner, page, container)
                    if rows:
                        conn.execute(insert(self._item), rows)
            except Exception as e:  # nothing may escape a save
                logger.error(f"Vault save failed: {e}")
                return False

            logger.info(f"Saved vault for {owner} (page={page}, items={len(rows)})")
            return True

    def _encode_container(self, owner: str, page: int, container: Sequence[Any]) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        for slot in range(len(container)):
            item = container[slot]
            if self.codec.is_empty(item):
                continue
            try:
                payload = self.codec.encode(item)
            except EncodeError as e:
                logger.warning(f"Skipping slot {slot}: {e}")
                continue
            if not payload:
                continue
            rows.append({"owner_id": owner, "page": page, "slot": slot, "payload": payload})
        return rows

    def clear(self, owner_id: str | UUID) -> bool:
        """Delete every item row (all pages) and the meta row for an owner."""
        owner = normalize_owner_id(owner_id)
        with owner_context(owner):
            try:
                with self._transaction("clear", owner) as conn:
                    conn.execute(delete(self._item).where(self._item.c.owner_id == owner))
                    conn.execute(delete(self._meta).where(self._meta.c.owner_id == owner))
            except Exception as e:  # nothing may escape a clear
                logger.error(f"Vault clear failed: {e}")
                return False

            logger.info(f"Cleared vault for {owner}")
            return True
