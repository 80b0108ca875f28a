"""
Collaborator-facing vault API.

The UI/command layer drives vault sessions through three calls:

    open(owner_id)                -> VaultContainer to render; session Open
    on_close(owner_id, container) -> persists once per session
    clear(owner_id)               -> administrative wipe

Only the first close observed while a session is Open saves; closes while
Idle do nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from uuid import UUID

from playervault.core.container import VaultContainer
from playervault.core.models import (
    DEFAULT_TITLE,
    MAX_ROWS,
    SLOTS_PER_ROW,
    clamp_rows,
    normalize_owner_id,
)
from playervault.core.session import SessionTracker
from playervault.logging import owner_context
from playervault.storage.repository import VaultRepository

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]

MSG_OPENED = "Vault opened ({slots} slots)."
MSG_SAVED = "Vault saved."
MSG_SAVE_FAILED = "Vault could not be saved. Please contact an admin."
MSG_CLEARED = "Vault cleared."
MSG_CLEAR_FAILED = "Vault could not be cleared."


class CloseOutcome(str, Enum):
    """Result of a container-close notification."""

    IGNORED = "ignored"  # No open session for this owner
    SAVED = "saved"
    FAILED = "failed"


def _log_notifier(owner_id: str, message: str) -> None:
    logger.info(f"[notify {owner_id}] {message}")


class VaultService:
    """
    Open/close protocol on top of a VaultRepository.

    Args:
        repository: Storage for vaults
        tracker: Session flags; a fresh tracker if None
        default_rows: Rows used when an owner has no stored vault
        default_title: Title used when none is stored or supplied
        notifier: Called with (owner_id, message) for user-visible messages
    """

    def __init__(
        self,
        repository: VaultRepository,
        tracker: SessionTracker | None = None,
        default_rows: int = MAX_ROWS,
        default_title: str = DEFAULT_TITLE,
        notifier: Notifier | None = None,
    ):
        self.repository = repository
        self.tracker = tracker if tracker is not None else SessionTracker()
        self.default_rows = clamp_rows(default_rows)
        self.default_title = default_title
        self.notifier = notifier or _log_notifier

    def _notify(self, owner_id: str, message: str) -> None:
        try:
            self.notifier(owner_id, message)
        except Exception as e:  # Notification failures must not undo persistence
            logger.warning(f"Notifier failed for {owner_id}: {e}")

    def open(
        self,
        owner_id: str | UUID,
        rows: int | None = None,
        title: str | None = None,
    ) -> VaultContainer:
        """
        Load an owner's vault into a fresh container and mark the session Open.

        ``rows`` and ``title`` only shape a vault that has never been saved;
        stored metadata wins once it exists.
        """
        owner = normalize_owner_id(owner_id)
        requested_rows = clamp_rows(rows) if rows is not None else self.default_rows
        requested_title = title if title is not None and title.strip() else self.default_title

        with owner_context(owner):
            model = self.repository.load(owner, requested_rows, requested_title)
            container = VaultContainer.from_model(model, self.default_title)
            self.tracker.mark_open(owner)
            logger.info(f"Opened vault for {owner} ({container.size} slots)")
            self._notify(owner, MSG_OPENED.format(slots=model.rows * SLOTS_PER_ROW))
            return container

    def on_close(self, owner_id: str | UUID, container: VaultContainer) -> CloseOutcome:
        """
        Handle a container-close notification.

        The session flag is cleared before saving, so a repeated close for
        the same session is ignored.
        """
        owner = normalize_owner_id(owner_id)
        if not self.tracker.consume(owner):
            return CloseOutcome.IGNORED

        with owner_context(owner):
            try:
                model = container.capture(owner)
                ok = self.repository.save(model, container)
            except Exception as e:  # the flag is already cleared; report, never raise
                logger.error(f"Vault close failed for {owner}: {e}")
                ok = False

            if ok:
                logger.info(f"Persisted vault for {owner} ({model.capacity} slots)")
                self._notify(owner, MSG_SAVED)
                return CloseOutcome.SAVED

            logger.warning(f"Failed to persist vault for {owner}")
            self._notify(owner, MSG_SAVE_FAILED)
            return CloseOutcome.FAILED

    def clear(self, owner_id: str | UUID) -> bool:
        """Wipe an owner's vault; any open session is dropped unsaved."""
        owner = normalize_owner_id(owner_id)
        self.tracker.discard(owner)
        ok = self.repository.clear(owner)
        self._notify(owner, MSG_CLEARED if ok else MSG_CLEAR_FAILED)
        return ok

    def forget(self, owner_id: str | UUID) -> None:
        """Drop an owner's session without saving (e.g. player quit)."""
        self.tracker.discard(normalize_owner_id(owner_id))
