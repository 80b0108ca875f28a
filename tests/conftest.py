"""
Test configuration for playervault.

Every repository test runs against its own temporary SQLite file; MySQL and
PostgreSQL behavior is checked by compiling DDL against their dialects.
"""

import pytest
from sqlalchemy import create_engine

from playervault.config import Settings, get_settings
from playervault.core.codec import JsonItemCodec
from playervault.core.models import Item
from playervault.core.session import SessionTracker
from playervault.service import VaultService
from playervault.storage.dialects import SQLITE
from playervault.storage.repository import VaultRepository


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    """Keep tests away from real config files and PLAYERVAULT_* variables."""
    import os

    for key in list(os.environ):
        if key.startswith("PLAYERVAULT_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("PLAYERVAULT_CONFIG", str(tmp_path / "absent.yaml"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "vault.db"


@pytest.fixture
def engine(db_path):
    engine = create_engine(f"sqlite:///{db_path}")
    yield engine
    engine.dispose()


@pytest.fixture
def codec():
    return JsonItemCodec()


@pytest.fixture
def repository(engine, codec):
    """Repository with the schema already ensured."""
    repo = VaultRepository(engine, SQLITE, codec)
    repo.ensure_schema()
    return repo


@pytest.fixture
def tracker():
    return SessionTracker()


@pytest.fixture
def notifications():
    return []


@pytest.fixture
def service(repository, tracker, notifications):
    return VaultService(
        repository,
        tracker=tracker,
        default_rows=6,
        default_title="Vault",
        notifier=lambda owner, message: notifications.append((owner, message)),
    )


@pytest.fixture
def settings(db_path):
    return Settings(database={"backend": "sqlite", "path": str(db_path)})


@pytest.fixture
def diamond():
    return Item(type="DIAMOND", amount=3)


@pytest.fixture
def sword():
    return Item(
        type="DIAMOND_SWORD",
        amount=1,
        display_name="Excalibur",
        lore=["Pulled from a stone"],
        attributes={"enchantments": {"sharpness": 5}, "damage": 12},
    )
