"""Vault data model, item codec, container and session tracking."""

from playervault.core.codec import ItemCodec, JsonItemCodec
from playervault.core.container import VaultContainer
from playervault.core.models import (
    DEFAULT_TITLE,
    MAX_ROWS,
    MIN_ROWS,
    SLOTS_PER_ROW,
    Item,
    ItemRecord,
    VaultMeta,
    VaultModel,
    clamp_rows,
    normalize_owner_id,
    rows_for_capacity,
)
from playervault.core.session import SessionTracker

__all__ = [
    "DEFAULT_TITLE",
    "MAX_ROWS",
    "MIN_ROWS",
    "SLOTS_PER_ROW",
    "Item",
    "ItemRecord",
    "ItemCodec",
    "JsonItemCodec",
    "SessionTracker",
    "VaultContainer",
    "VaultMeta",
    "VaultModel",
    "clamp_rows",
    "normalize_owner_id",
    "rows_for_capacity",
]
