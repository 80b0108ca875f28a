"""
Item codec: turns one item into a self-contained byte payload and back.

The same payload bytes are stored by every backend, so the format depends
only on the codec, never on the database.

Default wire format (JsonItemCodec):

    +-------+---------+-------------------------------+
    | "PVI" | version | zlib(compact JSON of Item)    |
    +-------+---------+-------------------------------+
     3 bytes  1 byte    remainder

Decoding is forgiving through decode(): empty or malformed input yields None
so a single corrupt slot cannot block loading the rest of a vault.
"""

from __future__ import annotations

import logging
import zlib
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from pydantic import ValidationError as PydanticValidationError

from playervault.core.models import Item
from playervault.exceptions import DecodeError, EncodeError

logger = logging.getLogger(__name__)

T = TypeVar("T")

PAYLOAD_MAGIC = b"PVI"
PAYLOAD_VERSION = 1
HEADER_SIZE = len(PAYLOAD_MAGIC) + 1

# Upper bound for a decompressed item document
MAX_DECODED_SIZE = 1024 * 1024


class ItemCodec(ABC, Generic[T]):
    """Serializes items of type T to bytes. Implementations must be pure."""

    @abstractmethod
    def encode(self, item: T) -> bytes:
        """Encode an item. Raises EncodeError."""

    @abstractmethod
    def decode_strict(self, data: bytes) -> T:
        """Decode a payload. Raises DecodeError."""

    def decode(self, data: bytes | None) -> T | None:
        """Decode a payload, returning None for empty or malformed input."""
        if not data:
            return None
        try:
            return self.decode_strict(data)
        except DecodeError as e:
            logger.debug(f"Dropping undecodable payload: {e}")
            return None
        except Exception as e:  # a host codec may fail in its own way; one slot only
            logger.warning(f"{type(self).__name__} failed on a payload: {type(e).__name__}: {e}")
            return None

    def is_empty(self, item: T | None) -> bool:
        """Whether a container slot holding ``item`` counts as unoccupied."""
        return item is None


class JsonItemCodec(ItemCodec[Item]):
    """Codec for :class:`Item` using versioned, compressed JSON."""

    def __init__(self, compression_level: int = 6):
        self.compression_level = compression_level

    def encode(self, item: Item) -> bytes:
        if not isinstance(item, Item):
            raise EncodeError(f"Expected Item, got {type(item).__name__}")
        try:
            document = item.model_dump_json(exclude_defaults=True).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise EncodeError(f"Item is not serializable: {e}") from e
        return PAYLOAD_MAGIC + bytes([PAYLOAD_VERSION]) + zlib.compress(document, self.compression_level)

    def decode_strict(self, data: bytes) -> Item:
        if not data:
            raise DecodeError("Empty payload", payload_size=0)
        data = bytes(data)
        if len(data) <= HEADER_SIZE or not data.startswith(PAYLOAD_MAGIC):
            raise DecodeError("Not an item payload", payload_size=len(data))

        version = data[len(PAYLOAD_MAGIC)]
        if version != PAYLOAD_VERSION:
            raise DecodeError(
                f"Unsupported payload version {version}",
                payload_size=len(data),
            )

        try:
            decompressor = zlib.decompressobj()
            document = decompressor.decompress(data[HEADER_SIZE:], MAX_DECODED_SIZE)
            if decompressor.unconsumed_tail:
                raise DecodeError("Item document too large", payload_size=len(data))
            if not decompressor.eof:
                raise DecodeError("Truncated payload", payload_size=len(data))
            if decompressor.unused_data:
                raise DecodeError("Trailing bytes after item document", payload_size=len(data))
        except zlib.error as e:
            raise DecodeError(f"Corrupt payload: {e}", payload_size=len(data)) from e

        try:
            return Item.model_validate_json(document)
        except PydanticValidationError as e:
            raise DecodeError(
                f"Invalid item document: {e.error_count()} error(s)",
                payload_size=len(data),
            ) from e

    def is_empty(self, item: Any) -> bool:
        return item is None or (isinstance(item, Item) and item.is_empty)


__all__ = [
    "ItemCodec",
    "JsonItemCodec",
    "PAYLOAD_MAGIC",
    "PAYLOAD_VERSION",
]
