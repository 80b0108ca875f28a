"""
Vault inspection and maintenance commands.
"""

import json

import click

from playervault.cli.base import vault_context
from playervault.exceptions import ValidationError


@click.command()
@click.argument("owner_id")
@click.option(
    "--format", "-f", "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
def show(owner_id: str, output_format: str):
    """Show the stored vault of OWNER_ID."""
    with vault_context() as ctx:
        try:
            meta = ctx.repository.get_meta(owner_id)
            model = ctx.repository.load(owner_id, ctx.settings.vault.rows, ctx.settings.vault.title)
        except ValidationError as e:
            raise click.BadParameter(str(e), param_hint="OWNER_ID") from e

    items = [
        {
            "slot": slot,
            "type": getattr(record.item, "type", str(record.item)),
            "amount": getattr(record.item, "amount", ""),
            "name": getattr(record.item, "display_name", None) or "",
        }
        for slot, record in sorted(model.items.items())
    ]

    if output_format == "json":
        click.echo(json.dumps({
            "owner_id": model.owner_id,
            "stored": meta is not None,
            "rows": model.rows,
            "title": model.title,
            "updated_at": meta.updated_at.isoformat() if meta and meta.updated_at else None,
            "items": items,
        }, indent=2))
        return

    from rich.console import Console
    from rich.table import Table

    console = Console()
    if meta is None:
        console.print(f"[yellow]No stored vault for {model.owner_id}[/yellow]")
        return

    table = Table(title=f"{model.title or ''} ({model.owner_id}, {model.capacity} slots)")
    table.add_column("Slot", justify="right")
    table.add_column("Type")
    table.add_column("Amount", justify="right")
    table.add_column("Name")
    for row in items:
        table.add_row(str(row["slot"]), row["type"], str(row["amount"]), row["name"])
    console.print(table)


@click.command()
@click.argument("owner_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def clear(owner_id: str, yes: bool):
    """Delete every stored item and the metadata of OWNER_ID."""
    if not yes:
        click.confirm(f"Delete the vault of {owner_id}?", abort=True)

    with vault_context() as ctx:
        try:
            ok = ctx.service.clear(owner_id)
        except ValidationError as e:
            raise click.BadParameter(str(e), param_hint="OWNER_ID") from e

    if not ok:
        raise click.ClickException(f"Vault of {owner_id} could not be cleared")
    click.echo(f"Cleared vault of {owner_id}")
