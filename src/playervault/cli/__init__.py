"""
playervault CLI module.

Administrative commands for inspecting and maintaining stored vaults.
"""

import click

from playervault import __version__
from playervault.cli.commands import backends, clear, config, db, show


@click.group()
@click.version_option(__version__)
def cli():
    """playervault - Persistent per-player item vaults"""
    pass


cli.add_command(db)
cli.add_command(show)
cli.add_command(clear)
cli.add_command(config)
cli.add_command(backends)

__all__ = ["cli"]
