"""
Core data types for player vaults.

- Item: the reference domain item stored in a slot
- ItemRecord: an item bound to its slot index
- VaultModel: one player's vault (rows, title, page, items)
- VaultMeta: the persisted metadata row

A VaultModel is built fresh on every open and never cached across sessions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from playervault.exceptions import ValidationError

__all__ = [
    "SLOTS_PER_ROW",
    "MIN_ROWS",
    "MAX_ROWS",
    "DEFAULT_PAGE",
    "DEFAULT_TITLE",
    "clamp_rows",
    "rows_for_capacity",
    "normalize_owner_id",
    "Item",
    "ItemRecord",
    "VaultModel",
    "VaultMeta",
]

logger = logging.getLogger(__name__)

SLOTS_PER_ROW = 9
MIN_ROWS = 1
MAX_ROWS = 6
DEFAULT_PAGE = 0
DEFAULT_TITLE = "Vault"

# Owner ids are the string form of a UUID (36 chars with dashes)
MAX_OWNER_ID_LENGTH = 36

EMPTY_ITEM_TYPES = frozenset({"", "AIR", "CAVE_AIR", "VOID_AIR"})


def clamp_rows(rows: int) -> int:
    """Clamp a row count into [MIN_ROWS, MAX_ROWS]."""
    return max(MIN_ROWS, min(MAX_ROWS, int(rows)))


def rows_for_capacity(size: int) -> int:
    """Infer a row count from a container capacity (size // 9, clamped)."""
    return clamp_rows(size // SLOTS_PER_ROW)


def normalize_owner_id(owner_id: str | UUID) -> str:
    """
    Return the canonical string form of an owner identifier.

    UUID instances become their hyphenated lowercase form. Strings are
    stripped and must be non-empty and fit the 36-character column.

    Raises:
        ValidationError: If the identifier is empty or too long
    """
    if isinstance(owner_id, UUID):
        return str(owner_id)
    if not isinstance(owner_id, str):
        raise ValidationError(
            "Owner id must be a string or UUID",
            field="owner_id",
            value=owner_id,
        )
    value = owner_id.strip()
    if not value:
        raise ValidationError("Owner id must not be empty", field="owner_id", value=owner_id)
    if len(value) > MAX_OWNER_ID_LENGTH:
        raise ValidationError(
            f"Owner id longer than {MAX_OWNER_ID_LENGTH} characters",
            field="owner_id",
            value=owner_id,
        )
    return value


class Item(BaseModel):
    """
    A stack of one material held in a vault slot.

    ``attributes`` carries everything else the host needs to rebuild the
    stack (enchantments, durability, custom data); it must be
    JSON-compatible.
    """

    model_config = ConfigDict(extra="forbid")

    type: str
    amount: int = Field(default=1, ge=0)
    display_name: str | None = None
    lore: list[str] = Field(default_factory=list)
    attributes: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """True for air and zero-sized stacks."""
        return self.amount == 0 or self.type.strip().upper() in EMPTY_ITEM_TYPES

    def clone(self) -> "Item":
        return self.model_copy(deep=True)


@dataclass(frozen=True)
class ItemRecord:
    """An item bound to its zero-based slot index."""

    slot: int
    item: Any


@dataclass(frozen=True)
class VaultMeta:
    """Persisted metadata row for one owner."""

    owner_id: str
    rows: int
    title: str | None
    updated_at: datetime | None = None


@dataclass
class VaultModel:
    """
    In-memory representation of a player's vault.

    Attributes:
        owner_id: Stable player identifier
        rows: Row count, 1..6 (capacity = rows * 9)
        title: Display title, may be None
        page: Reserved for multi-page vaults; always 0 today
        items: slot -> ItemRecord for occupied slots only
    """

    owner_id: str
    rows: int
    title: str | None = None
    page: int = DEFAULT_PAGE
    items: dict[int, ItemRecord] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.owner_id = normalize_owner_id(self.owner_id)
        if not isinstance(self.rows, int) or not MIN_ROWS <= self.rows <= MAX_ROWS:
            raise ValidationError(
                f"Rows must be between {MIN_ROWS} and {MAX_ROWS}",
                field="rows",
                value=self.rows,
            )
        if self.page < 0:
            raise ValidationError("Page must not be negative", field="page", value=self.page)
        for slot in self.items:
            self._check_slot(slot)

    @property
    def capacity(self) -> int:
        return self.rows * SLOTS_PER_ROW

    def _check_slot(self, slot: int) -> None:
        if not 0 <= slot < self.capacity:
            raise ValidationError(
                f"Slot outside vault capacity ({self.capacity})",
                field="slot",
                value=slot,
            )

    def put(self, slot: int, item: Any) -> None:
        self._check_slot(slot)
        self.items[slot] = ItemRecord(slot, item)

    def get(self, slot: int) -> Any | None:
        record = self.items.get(slot)
        return record.item if record else None

    def set_items(self, items: dict[int, ItemRecord]) -> None:
        """Replace the whole item map."""
        for slot in items:
            self._check_slot(slot)
        self.items = dict(items)

    @classmethod
    def empty(cls, owner_id: str | UUID, rows: int, title: str | None) -> "VaultModel":
        """Vault synthesized from defaults with no items."""
        return cls(owner_id=normalize_owner_id(owner_id), rows=clamp_rows(rows), title=title)
