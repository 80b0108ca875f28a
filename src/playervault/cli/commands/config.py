"""
Configuration commands.
"""

import json

import click
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from playervault.storage.dialects import DIALECTS
from playervault.storage.selector import BACKEND_ALIASES


@click.group()
def config():
    """Configuration management."""
    pass


def _mask_url(url: str | None) -> str | None:
    """Hide the password of a database URL."""
    if not url:
        return url
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return "<unparseable url>"


@config.command("show")
def config_show():
    """Display current configuration."""
    from playervault.config import get_settings

    data = get_settings().model_dump(mode="json")
    data["database"]["url"] = _mask_url(data["database"]["url"])
    click.echo(json.dumps(data, indent=2))


@click.command()
def backends():
    """List supported storage backends and their aliases."""
    from rich.console import Console
    from rich.table import Table

    table = Table(title="Storage backends")
    table.add_column("Backend")
    table.add_column("Aliases")
    table.add_column("Binary type")
    table.add_column("Default URL")

    for backend, dialect in DIALECTS.items():
        aliases = sorted(name for name, target in BACKEND_ALIASES.items() if target is backend)
        table.add_row(backend.value, ", ".join(aliases), dialect.binary_type_name(), dialect.default_url)

    Console().print(table)
