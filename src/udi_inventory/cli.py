"""CLI for UDI Inventory scan parsing and database management."""

from datetime import datetime

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from udi_inventory.api.barcode_parser import parse_identifier
from udi_inventory.config import configure_logging, get_settings
from udi_inventory.core.expiration import (
    InvalidExpirationDateError,
    days_until_expiration,
    tier_for_days,
)
from udi_inventory.core.models import ExpirationTier
from udi_inventory.db.postgres import CREATE_TABLE_SQL, PostgresRecordStore
from udi_inventory.db.store import RecordStoreError

app = typer.Typer(
    name="udi-inventory",
    help="UDI Inventory CLI - parse scans, classify expirations, manage tables",
    add_completion=False,
)
console = Console()

_TIER_STYLES = {
    ExpirationTier.EXPIRED: "bold red",
    ExpirationTier.CRITICAL: "red",
    ExpirationTier.WARNING: "yellow",
    ExpirationTier.GOOD: "green",
}


@app.callback()
def main(
    log_level: str = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    """Configure logging before any command runs."""
    configure_logging(log_level)


def _show_connection() -> None:
    settings = get_settings()
    console.print(Panel.fit(
        f"[bold]Database:[/bold] {settings.database.database}\n"
        f"[bold]Host:[/bold] {settings.database.host or '(not configured)'}",
        title="Database Connection",
    ))


def _get_store() -> PostgresRecordStore:
    settings = get_settings()
    if not settings.database.is_configured:
        console.print("[red]✗ DATABASE_HOST is not set[/red]")
        raise typer.Exit(1)
    return PostgresRecordStore(settings.database.conninfo)


@app.command()
def parse(
    raw: str = typer.Argument(..., help="Raw scanned string, e.g. (01)00885544112233(17)250615"),
):
    """Parse a scanned barcode into product id, lot, expiration and serial."""
    parsed = parse_identifier(raw)

    table = Table(title="Parsed Identifier")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for field_name, value in (
        ("Product ID", parsed.product_id),
        ("Lot", parsed.lot),
        ("Expiration", parsed.expiration_date),
        ("Serial", parsed.serial),
    ):
        table.add_row(field_name, value if value is not None else "[dim]-[/dim]")
    console.print(table)


@app.command()
def classify(
    expiration_date: str = typer.Argument(..., help="Expiration date, e.g. 2025-06-15"),
    now: datetime = typer.Option(None, "--now", help="Reference time (default: now)"),
):
    """Show days remaining and expiration tier for a date."""
    thresholds = get_settings().expiration.thresholds
    try:
        days = days_until_expiration(expiration_date, now)
    except InvalidExpirationDateError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    tier = tier_for_days(days, thresholds)
    style = _TIER_STYLES[tier]
    console.print(f"[{style}]{tier.label}[/{style}] ({days} days remaining)")


@app.command()
def init_db(
    dry_run: bool = typer.Option(False, "--dry-run", help="Show SQL without executing"),
):
    """Create the inventory_records table and indexes."""
    _show_connection()

    if dry_run:
        console.print("\n[yellow]Dry run mode - SQL that would be executed:[/yellow]\n")
        console.print(CREATE_TABLE_SQL)
        return

    store = _get_store()
    console.print("\n[blue]Initializing database tables...[/blue]")
    try:
        store.create_tables()
    except RecordStoreError as e:
        console.print(f"[red]✗ Error initializing database: {e}[/red]")
        raise typer.Exit(1)

    console.print("[green]✓ Database tables initialized successfully![/green]")


@app.command()
def status():
    """Check database connection and show record count."""
    _show_connection()
    store = _get_store()

    console.print("\n[blue]Checking database connection...[/blue]")
    try:
        count = store.count()
    except RecordStoreError as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        raise typer.Exit(1)

    console.print("[green]✓ Database connected[/green]\n")
    console.print("[bold]Table Statistics:[/bold]")
    console.print(f"  inventory_records: {count} rows")


if __name__ == "__main__":
    app()
