"""
Unified exception hierarchy for playervault.

All exception classes live here. No per-module exception files.

Hierarchy:
    VaultError (base)
    ├── ConfigurationError
    ├── ValidationError
    ├── CodecError
    │   ├── EncodeError
    │   └── DecodeError
    ├── SchemaError
    └── StorageError

Storage-layer errors never escape the repository's load/save/clear
operations: they are converted to a safe default or a boolean failure there.

Usage:
    from playervault.exceptions import StorageError, DecodeError
"""

from __future__ import annotations

from typing import Any


class VaultError(Exception):
    """
    Base exception for all playervault errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about what was being done
        details: Technical details (owner id, slot, backend, etc.)
    """

    def __init__(
        self,
        message: str,
        context: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.context = context
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        if self.context:
            parts.append(f"Context: {self.context}")
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            parts.append(f"Details: {detail_str}")
        return ". ".join(parts)


class ConfigurationError(VaultError):
    """Raised when settings cannot produce a usable backend."""

    def __init__(self, message: str, setting: str | None = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if setting:
            details["setting"] = setting
        super().__init__(message, details=details, **kwargs)
        self.setting = setting


class ValidationError(VaultError):
    """Raised when a vault model is constructed with invalid values."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
            details["value"] = value
        super().__init__(message, details=details, **kwargs)
        self.field = field
        self.value = value


# =============================================================================
# CODEC
# =============================================================================


class CodecError(VaultError):
    """Base class for item (de)serialization failures."""


class EncodeError(CodecError):
    """An item could not be turned into a payload. Isolated to one slot."""

    def __init__(self, message: str, slot: int | None = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if slot is not None:
            details["slot"] = slot
        super().__init__(message, details=details, **kwargs)
        self.slot = slot


class DecodeError(CodecError):
    """A payload could not be turned back into an item."""

    def __init__(self, message: str, payload_size: int | None = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if payload_size is not None:
            details["payload_size"] = payload_size
        super().__init__(message, details=details, **kwargs)
        self.payload_size = payload_size


# =============================================================================
# STORAGE
# =============================================================================


class SchemaError(VaultError):
    """DDL for the vault relations failed."""

    def __init__(self, message: str, backend: str | None = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if backend:
            details["backend"] = backend
        super().__init__(message, details=details, **kwargs)
        self.backend = backend


class StorageError(VaultError):
    """Connectivity or SQL failure during load, save or clear."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        owner_id: str | None = None,
        **kwargs: Any,
    ):
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation
        if owner_id:
            details["owner_id"] = owner_id
        super().__init__(message, details=details, **kwargs)
        self.operation = operation
        self.owner_id = owner_id


__all__ = [
    "VaultError",
    "ConfigurationError",
    "ValidationError",
    "CodecError",
    "EncodeError",
    "DecodeError",
    "SchemaError",
    "StorageError",
]
