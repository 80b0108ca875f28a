"""Tests for the vault repository on SQLite."""

import logging

import pytest
from sqlalchemy import create_engine, func, insert, select

from playervault.core.codec import JsonItemCodec
from playervault.core.container import VaultContainer
from playervault.core.models import Item, VaultModel
from playervault.storage.dialects import SQLITE
from playervault.storage.repository import VaultRepository


def _save(repository, owner, size, title, items):
    container = VaultContainer(size, title)
    for slot, item in items.items():
        container.set_item(slot, item)
    return repository.save(container.capture(owner), container)


def _count(repository, table):
    with repository.engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(table)).scalar_one()


class FragileCodec(JsonItemCodec):
    """Codec that fails with an unexpected error on decode."""

    def decode_strict(self, data):
        raise ValueError("bad pickle")


class ExplodingCodec(JsonItemCodec):
    """Codec that fails with an unexpected error on encode."""

    def encode(self, item):
        raise RuntimeError("codec exploded")


class TestLoad:
    """Loading vaults and falling back to defaults."""

    def test_unknown_owner_gets_defaults(self, repository):
        model = repository.load("U1", default_rows=3, default_title="Stash")
        assert model.owner_id == "U1"
        assert model.rows == 3
        assert model.title == "Stash"
        assert model.page == 0
        assert model.items == {}

    def test_default_rows_are_clamped(self, repository):
        assert repository.load("U1", default_rows=12, default_title=None).rows == 6
        assert repository.load("U1", default_rows=0, default_title=None).rows == 1

    def test_missing_schema_degrades_to_defaults(self, engine, codec):
        repo = VaultRepository(engine, SQLITE, codec)
        model = repo.load("U1", default_rows=2, default_title="Vault")
        assert model.rows == 2
        assert model.items == {}

    def test_corrupt_payload_is_dropped(self, repository, diamond):
        _save(repository, "U1", 9, "Vault", {0: diamond})
        with repository.engine.begin() as conn:
            conn.execute(insert(repository.schema.tables.item).values(
                owner_id="U1", page=0, slot=1, payload=b"\x00garbage",
            ))

        model = repository.load("U1", 6, "Vault")
        assert set(model.items) == {0}

    def test_failing_codec_degrades_to_empty_slots(self, engine, repository, diamond):
        _save(repository, "U1", 18, "Stash", {0: diamond, 9: diamond})

        model = VaultRepository(engine, SQLITE, FragileCodec()).load("U1", 6, "Vault")
        assert model.rows == 2
        assert model.title == "Stash"
        assert model.items == {}

    def test_slots_beyond_capacity_are_dropped(self, repository, diamond, codec):
        _save(repository, "U1", 18, "Vault", {0: diamond})
        with repository.engine.begin() as conn:
            conn.execute(insert(repository.schema.tables.item).values(
                owner_id="U1", page=0, slot=40, payload=codec.encode(diamond),
            ))

        model = repository.load("U1", 6, "Vault")
        assert model.rows == 2
        assert set(model.items) == {0}

    def test_other_pages_are_not_loaded(self, repository, diamond, codec):
        _save(repository, "U1", 9, "Vault", {0: diamond})
        with repository.engine.begin() as conn:
            conn.execute(insert(repository.schema.tables.item).values(
                owner_id="U1", page=1, slot=3, payload=codec.encode(diamond),
            ))

        assert set(repository.load("U1", 6, "Vault").items) == {0}

    def test_null_title_falls_back_to_default(self, repository, diamond):
        container = VaultContainer(9, "ignored")
        model = VaultModel(owner_id="U1", rows=1, title=None)
        assert repository.save(model, container)

        assert repository.load("U1", 6, "Fallback").title == "Fallback"


class TestSave:
    """Transactional save semantics."""

    def test_save_then_load(self, repository, diamond, sword):
        assert _save(repository, "U1", 27, "Vault", {0: diamond, 13: sword, 26: diamond})

        model = repository.load("U1", 6, "Vault")
        assert model.rows == 3
        assert {slot: r.item for slot, r in model.items.items()} == {0: diamond, 13: sword, 26: diamond}

    def test_empty_items_are_not_stored(self, repository, diamond):
        _save(repository, "U1", 9, "Vault", {0: diamond, 1: Item(type="AIR"), 2: Item(type="STONE", amount=0)})
        assert set(repository.load("U1", 6, "Vault").items) == {0}

    def test_unencodable_slot_is_skipped(self, repository, diamond):
        assert _save(repository, "U1", 9, "Vault", {0: diamond, 1: "not an item"})
        assert set(repository.load("U1", 6, "Vault").items) == {0}

    def test_first_write_wins_for_rows_and_title(self, repository, diamond):
        _save(repository, "U1", 18, "Original", {0: diamond})
        first = repository.get_meta("U1")

        assert _save(repository, "U1", 36, "Renamed", {5: diamond})

        meta = repository.get_meta("U1")
        assert meta.rows == 2
        assert meta.title == "Original"
        assert meta.updated_at >= first.updated_at
        assert set(repository.load("U1", 6, "Vault").items) == {5}

    def test_save_replaces_items(self, repository, diamond, sword):
        _save(repository, "U1", 18, "Vault", {0: diamond, 17: sword})

        # Second session: slot 0 emptied, slot 5 filled
        _save(repository, "U1", 18, "Vault", {5: sword})

        model = repository.load("U1", 1, "Other")
        assert model.rows == 2
        assert model.title == "Vault"
        assert {slot: r.item for slot, r in model.items.items()} == {5: sword}

    def test_empty_container_removes_all_items(self, repository, diamond):
        _save(repository, "U1", 9, "Vault", {0: diamond})
        assert _save(repository, "U1", 9, "Vault", {})
        assert repository.load("U1", 6, "Vault").items == {}
        assert repository.get_meta("U1") is not None

    def test_owners_are_isolated(self, repository, diamond, sword):
        _save(repository, "U1", 9, "Vault", {0: diamond})
        _save(repository, "U2", 9, "Vault", {0: sword})
        assert repository.load("U1", 6, "Vault").get(0) == diamond
        assert repository.load("U2", 6, "Vault").get(0) == sword

    def test_failure_rolls_back_everything(self, engine, repository, diamond, sword):
        _save(repository, "U1", 9, "Vault", {0: diamond})

        broken = VaultRepository(engine, SQLITE, ExplodingCodec())
        assert _save(broken, "U1", 9, "Vault", {4: sword}) is False

        model = repository.load("U1", 6, "Vault")
        assert {slot: r.item for slot, r in model.items.items()} == {0: diamond}

    def test_failed_first_save_leaves_no_meta(self, engine, repository, sword):
        broken = VaultRepository(engine, SQLITE, ExplodingCodec())
        assert _save(broken, "U1", 9, "Vault", {4: sword}) is False
        assert repository.get_meta("U1") is None

    def test_save_without_schema_returns_false(self, engine, codec, diamond):
        repo = VaultRepository(engine, SQLITE, codec)
        assert _save(repo, "U1", 9, "Vault", {0: diamond}) is False

    def test_size_mismatch_is_logged(self, repository, diamond, caplog):
        container = VaultContainer(18)
        container.set_item(0, diamond)
        model = VaultModel(owner_id="U1", rows=1, title="Vault")

        with caplog.at_level(logging.WARNING, logger="playervault.storage.repository"):
            assert repository.save(model, container)

        assert "does not match" in caplog.text

    def test_engine_stays_usable(self, repository, diamond):
        _save(repository, "U1", 9, "Vault", {0: diamond})
        repository.clear("U1")
        with repository.engine.connect() as conn:
            assert conn.execute(select(1)).scalar_one() == 1


class TestClear:
    """Administrative wipe."""

    def test_clear_removes_meta_and_items(self, repository, diamond):
        _save(repository, "U1", 18, "Custom", {0: diamond})
        assert repository.clear("U1")

        assert repository.get_meta("U1") is None
        model = repository.load("U1", 4, "Fresh")
        assert model.rows == 4
        assert model.title == "Fresh"
        assert model.items == {}

    def test_clear_removes_every_page(self, repository, diamond, codec):
        _save(repository, "U1", 9, "Vault", {0: diamond})
        with repository.engine.begin() as conn:
            conn.execute(insert(repository.schema.tables.item).values(
                owner_id="U1", page=2, slot=0, payload=codec.encode(diamond),
            ))

        repository.clear("U1")
        assert _count(repository, repository.schema.tables.item) == 0

    def test_clear_leaves_other_owners(self, repository, diamond):
        _save(repository, "U1", 9, "Vault", {0: diamond})
        _save(repository, "U2", 9, "Vault", {0: diamond})
        repository.clear("U1")
        assert repository.load("U2", 6, "Vault").get(0) == diamond

    def test_clear_unknown_owner_succeeds(self, repository):
        assert repository.clear("nobody") is True

    def test_clear_without_schema_returns_false(self, engine, codec):
        assert VaultRepository(engine, SQLITE, codec).clear("U1") is False


class TestGetMeta:
    """Metadata lookup."""

    def test_absent(self, repository):
        assert repository.get_meta("U1") is None

    def test_present(self, repository, diamond):
        _save(repository, "U1", 27, "Vault", {0: diamond})
        meta = repository.get_meta("U1")
        assert meta.owner_id == "U1"
        assert meta.rows == 3
        assert meta.title == "Vault"
        assert meta.updated_at is not None

    def test_missing_schema_returns_none(self, tmp_path, codec):
        engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
        try:
            assert VaultRepository(engine, SQLITE, codec).get_meta("U1") is None
        finally:
            engine.dispose()
