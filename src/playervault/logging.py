"""
Logging configuration for playervault.

Repository and service calls run inside owner_context(); OwnerFilter copies
the bound owner id onto each record when it is logged, so the formatters
below can print it even if the record is formatted later or elsewhere.

Usage:
    from playervault.logging import setup_logging, owner_context

    setup_logging(level="DEBUG")

    with owner_context("069a79f4-44e9-4726-a5be-fca90e38aaf5"):
        logger.info("Saving vault")
"""

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

owner_id_var: ContextVar[str | None] = ContextVar("owner_id", default=None)

# LogRecord attributes that are not caller-supplied extras
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message", "asctime", "owner_id",
}


def get_owner_id() -> str | None:
    """Owner id bound to the current context, if any."""
    return owner_id_var.get()


@contextmanager
def owner_context(owner_id: str) -> Iterator[None]:
    """Bind ``owner_id`` to records logged inside the block."""
    token = owner_id_var.set(owner_id)
    try:
        yield
    finally:
        owner_id_var.reset(token)


class OwnerFilter(logging.Filter):
    """Stamp ``record.owner_id`` from the current owner context."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "owner_id", None) is None:
            record.owner_id = get_owner_id()
        return True


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line:

        {"timestamp": "...", "level": "WARNING", "logger": "playervault.storage.repository",
         "owner_id": "U1", "message": "Vault save failed: ...", "location": "repository.py:245"}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        owner_id = getattr(record, "owner_id", None)
        if owner_id:
            entry["owner_id"] = owner_id
        if record.levelno >= logging.WARNING:
            entry["location"] = f"{record.filename}:{record.lineno}"
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(_extras(record))
        return json.dumps(entry, default=str)


class DevelopmentFormatter(logging.Formatter):
    """
    Console formatter:

        10:30:00 INFO     U1 playervault.service: Vault saved slots=18
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        if self.use_colors:
            level = f"{self.LEVEL_COLORS.get(record.levelno, '')}{level}{self.RESET}"

        owner_id = getattr(record, "owner_id", None) or "-"
        extras = " ".join(f"{key}={value}" for key, value in _extras(record).items())
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        line = f"{clock} {level} {owner_id} {record.name}: {record.getMessage()}"
        if extras:
            line += f" {extras}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name
        json_format: JSON lines on stderr instead of the console format
        log_file: Also append JSON lines to this file
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stderr)
    if json_format:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(DevelopmentFormatter(use_colors=sys.stderr.isatty()))
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())
        handlers.append(file_handler)

    owner_filter = OwnerFilter()
    for handler in handlers:
        handler.addFilter(owner_filter)
        root_logger.addHandler(handler)

    # SQL echo is controlled by database.echo
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
