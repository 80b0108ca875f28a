"""Shared CLI helpers."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import click

from playervault.config import get_settings
from playervault.context import VaultContext
from playervault.exceptions import ConfigurationError
from playervault.logging import setup_logging


@contextmanager
def vault_context(ensure_schema: bool = True) -> Iterator[VaultContext]:
    """
    Build a VaultContext from the current settings for one command.

    Configuration errors are reported as click usage errors; the engine is
    disposed when the command finishes.
    """
    settings = get_settings()
    setup_logging(
        level=settings.logging.level,
        json_format=settings.logging.json_format,
        log_file=settings.logging.file,
    )
    try:
        ctx = VaultContext.from_settings(settings)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    try:
        if ensure_schema:
            ctx.start()
        yield ctx
    finally:
        ctx.close()
