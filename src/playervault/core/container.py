"""
Fillable vault container handed to the UI layer.

The container is the live grid a player edits while a session is open. It is
built from a VaultModel on open and captured back into one on close.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any
from uuid import UUID

from playervault.core.models import (
    DEFAULT_PAGE,
    DEFAULT_TITLE,
    SLOTS_PER_ROW,
    ItemRecord,
    VaultModel,
    clamp_rows,
    rows_for_capacity,
)


def _clone(item: Any) -> Any:
    clone = getattr(item, "clone", None)
    return clone() if callable(clone) else item


class VaultContainer:
    """
    Grid of whole rows of 9 slots with a display title.

    ``size`` is rounded up to a multiple of 9 and clamped to 9..54, so
    every slot of the grid lies inside the captured vault.

    Usage:
        >>> container = VaultContainer(18, "Vault")
        >>> container.set_item(0, Item(type="DIAMOND", amount=3))
        >>> [slot for slot, _ in container.occupied()]
        [0]
    """

    def __init__(self, size: int, title: str = DEFAULT_TITLE):
        rows = clamp_rows(-(-int(size) // SLOTS_PER_ROW))
        self.size = rows * SLOTS_PER_ROW
        self.title = title
        self._slots: list[Any | None] = [None] * self.size

    def __len__(self) -> int:
        return self.size

    def __getitem__(self, slot: int) -> Any | None:
        return self.get_item(slot)

    def __iter__(self) -> Iterator[Any | None]:
        return iter(self._slots)

    def __repr__(self) -> str:
        occupied = sum(1 for item in self._slots if item is not None)
        return f"VaultContainer(size={self.size}, title={self.title!r}, occupied={occupied})"

    def _check_slot(self, slot: int) -> None:
        if not 0 <= slot < self.size:
            raise IndexError(f"Slot {slot} out of range for container of size {self.size}")

    def get_item(self, slot: int) -> Any | None:
        self._check_slot(slot)
        return self._slots[slot]

    def set_item(self, slot: int, item: Any | None) -> None:
        self._check_slot(slot)
        self._slots[slot] = item

    def clear_slot(self, slot: int) -> None:
        self.set_item(slot, None)

    def occupied(self) -> Iterator[tuple[int, Any]]:
        """Yield (slot, item) for every non-None slot in slot order."""
        for slot, item in enumerate(self._slots):
            if item is not None:
                yield slot, item

    @classmethod
    def from_model(cls, model: VaultModel, default_title: str = DEFAULT_TITLE) -> "VaultContainer":
        """Build a container sized rows * 9 and filled with the model's items."""
        container = cls(model.rows * SLOTS_PER_ROW, model.title if model.title is not None else default_title)
        for slot, record in model.items.items():
            if 0 <= slot < container.size:
                container.set_item(slot, record.item)
        return container

    def capture(self, owner_id: str | UUID, page: int = DEFAULT_PAGE) -> VaultModel:
        """
        Snapshot the container into a new VaultModel.

        Rows are inferred from the container size and the title is the
        container's current title. Items are copied so later edits to the
        container do not leak into the snapshot.
        """
        items = {slot: ItemRecord(slot, _clone(item)) for slot, item in self.occupied()}
        return VaultModel(
            owner_id=owner_id,
            rows=rows_for_capacity(self.size),
            title=self.title,
            page=page,
            items=items,
        )
