"""
Open/close session tracking for vault containers.

Each player is either Idle or Open. Open means "a vault container is showing
and must be captured when it closes". The first close observed while Open
clears the flag before any persistence happens, so a duplicate close
notification in the same session never triggers a second save.
"""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class SessionTracker:
    """Thread-safe set of owners with an open vault session."""

    def __init__(self) -> None:
        self._open: set[str] = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._open)

    def __contains__(self, owner_id: str) -> bool:
        return self.is_open(owner_id)

    def mark_open(self, owner_id: str) -> None:
        """Idle -> Open. Re-opening an open session keeps it open."""
        with self._lock:
            self._open.add(owner_id)
        logger.debug(f"Vault session opened for {owner_id}")

    def is_open(self, owner_id: str) -> bool:
        with self._lock:
            return owner_id in self._open

    def consume(self, owner_id: str) -> bool:
        """
        Open -> Idle.

        Returns:
            True if the owner was Open (the caller must now persist),
            False if the owner was already Idle.
        """
        with self._lock:
            if owner_id not in self._open:
                return False
            self._open.discard(owner_id)
        logger.debug(f"Vault session closed for {owner_id}")
        return True

    def discard(self, owner_id: str) -> None:
        """Drop a session without persisting (e.g. the player left)."""
        with self._lock:
            self._open.discard(owner_id)

    def open_sessions(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._open)
