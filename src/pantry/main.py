"""
Pantry - CLI Entry Point.

Usage:
    pantry health                         Check configuration
    pantry entities                       List registered entity schemas
    pantry validate ENTITY FILE.json      Validate rows against a schema
    pantry --help                         Show help
"""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

app = typer.Typer(
    name="pantry",
    help="Pantry - validation and data access for household pantry tracking.",
    add_completion=False,
)
console = Console()

VARIANTS = ("read", "insert", "update")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Pantry command line tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def health() -> None:
    """Check configuration."""
    from pantry.config import get_settings
    from pantry.errors import ConfigurationError

    console.print("\n[bold]Pantry Health Check[/bold]\n")

    try:
        settings = get_settings()
    except ConfigurationError as e:
        console.print(f"[red]❌ Configuration error:[/red]\n{escape(str(e))}")
        console.print("[dim]Make sure you have a .env file with required variables.[/dim]")
        raise typer.Exit(1)

    logging.getLogger().setLevel(settings.log_level)
    console.print("✅ Configuration loaded")
    console.print(f"   Environment: {settings.pantry_env}")
    console.print(f"   Log level: {settings.log_level}")

    if settings.supabase_url:
        console.print("✅ Supabase URL configured")
    else:
        console.print("ℹ️  Supabase URL not set (test mode)")

    console.print(f"   Cache: {settings.cache_max_entries} entries, {settings.cache_ttl_seconds:g}s TTL")
    console.print("\n[green]All checks passed![/green]")


@app.command()
def entities() -> None:
    """List registered entity schemas."""
    from pantry.validation.schemas import SCHEMA_REGISTRY

    table = Table(title="Registered entities")
    table.add_column("Entity", no_wrap=True)
    table.add_column("Table", no_wrap=True)
    table.add_column("Server fields")
    table.add_column("Immutable on update")

    for name, schemas in sorted(SCHEMA_REGISTRY.items()):
        table.add_row(name, schemas.table, ", ".join(schemas.server_fields), schemas.ownership_key or "-")

    console.print(table)


@app.command()
def validate(
    entity: str = typer.Argument(..., help="Entity name, e.g. ingredient"),
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="JSON file (object or array)"),
    variant: str = typer.Option("read", "--variant", help="Schema variant: read, insert or update"),
) -> None:
    """Validate a JSON file against an entity schema."""
    from pantry.validation.core import parse_json
    from pantry.validation.schemas import get_entity_schemas

    try:
        schemas = get_entity_schemas(entity)
    except KeyError as e:
        console.print(f"[red]{escape(e.args[0])}[/red]")
        raise typer.Exit(2)

    if variant not in VARIANTS:
        console.print(f"[red]Unknown variant '{escape(variant)}'. Use one of: {', '.join(VARIANTS)}[/red]")
        raise typer.Exit(2)

    schema = getattr(schemas, variant)
    raw = path.read_text(encoding="utf-8")
    if raw.lstrip().startswith("["):
        schema = list[schema]

    result = parse_json(schema, raw)
    if result.success:
        console.print(f"✅ {escape(path.name)}: valid {entity} ({variant})")
        return

    console.print(f"❌ {escape(path.name)}: {len(result.errors)} error(s)")
    for error in result.errors:
        console.print(f"  - {escape(error.field or '(root)')}: {escape(error.message)}")
    raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from pantry import __version__

    console.print(f"Pantry version {__version__}")


if __name__ == "__main__":
    app()
