"""
Database management commands.
"""

import click

from playervault.storage.dialects import DIALECTS
from playervault.storage.schema import SchemaManager
from playervault.storage.selector import select_backend


@click.group()
def db():
    """Database management commands."""
    pass


@db.command("init")
def db_init():
    """Create the vault tables on the configured backend."""
    from playervault.cli.base import vault_context
    from playervault.exceptions import SchemaError

    with vault_context(ensure_schema=False) as ctx:
        try:
            ctx.repository.ensure_schema()
        except SchemaError as e:
            raise click.ClickException(str(e)) from e
        click.echo(f"Vault schema ready on {ctx.backend.value}")


@db.command("ddl")
@click.option("--backend", "backend_name", default=None, help="Backend to render DDL for")
def db_ddl(backend_name: str | None):
    """Print CREATE TABLE statements without connecting."""
    from playervault.config import get_settings

    if backend_name is None:
        backend_name = get_settings().database.backend
    dialect = DIALECTS[select_backend(backend_name)]

    for statement in SchemaManager(dialect).ddl():
        click.echo(f"{statement};\n")
