"""
playervault Context.

Explicit context object constructed once at startup. It holds what would
otherwise be process-wide globals (settings, the shared engine, the chosen
backend, the session tracker) and is passed to whatever needs them.

Usage:
    >>> ctx = VaultContext.from_settings(get_settings())
    >>> ctx.start()              # ensures schema; tolerates SchemaError
    >>> container = ctx.service.open(owner_id)
    >>> ctx.service.on_close(owner_id, container)
    >>> ctx.close()

Tests build isolated contexts against a temporary SQLite file:
    >>> ctx = VaultContext.from_settings(Settings(database={"path": str(tmp_path / "v.db")}))
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from sqlalchemy.engine import Engine

from playervault.config import Settings, get_settings
from playervault.core.codec import ItemCodec, JsonItemCodec
from playervault.core.session import SessionTracker
from playervault.exceptions import SchemaError
from playervault.service import Notifier, VaultService
from playervault.storage.dialects import Backend, get_dialect
from playervault.storage.repository import VaultRepository
from playervault.storage.selector import create_engine_for, select_backend

logger = logging.getLogger(__name__)


@dataclass
class VaultContext:
    """
    Shared resources for one running application.

    ``owns_engine`` is False when the engine was borrowed from the host; the
    context then leaves it open on close().
    """

    settings: Settings
    backend: Backend
    engine: Engine
    repository: VaultRepository
    service: VaultService
    owns_engine: bool = True
    schema_ready: bool = False

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _closed: bool = field(default=False, repr=False)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        engine: Engine | None = None,
        codec: ItemCodec | None = None,
        notifier: Notifier | None = None,
    ) -> "VaultContext":
        """
        Build a context from settings.

        Args:
            settings: Settings to use; cached get_settings() if None
            engine: Host-owned engine to borrow instead of creating one
            codec: Item codec; JsonItemCodec if None
            notifier: User-visible message sink for the service
        """
        settings = settings or get_settings()
        backend = select_backend(settings.database.backend)
        owns_engine = engine is None
        if engine is None:
            engine = create_engine_for(backend, settings.database)

        repository = VaultRepository(engine, get_dialect(backend), codec or JsonItemCodec())
        service = VaultService(
            repository,
            tracker=SessionTracker(),
            default_rows=settings.vault.rows,
            default_title=settings.vault.title,
            notifier=notifier,
        )
        return cls(
            settings=settings,
            backend=backend,
            engine=engine,
            repository=repository,
            service=service,
            owns_engine=owns_engine,
        )

    def start(self) -> bool:
        """
        Ensure the schema once at startup.

        A SchemaError is logged, not raised: loads still degrade to defaults
        and saves report failure until the database is fixed.
        """
        try:
            self.repository.ensure_schema()
        except SchemaError as e:
            logger.error(f"Vault schema unavailable, continuing without it: {e}")
            self.schema_ready = False
            return False
        self.schema_ready = True
        return True

    def close(self) -> None:
        """Release the engine if this context created it. Safe to call twice."""
        with self._lock:
            if self._closed:
                return
            self._closed = True

        if self.owns_engine:
            self.engine.dispose()
            logger.debug("Disposed vault engine")

    def __enter__(self) -> "VaultContext":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False
