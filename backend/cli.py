"""
Storefront admin CLI.

Operator commands for the database and the global trash.

    python cli.py db-create
    python cli.py sweep-trash --dry-run
    python cli.py trash-list --type product
"""

import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent))

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="storefront",
    help="Storefront admin CLI",
    add_completion=False,
)
console = Console()


# =============================================================================
# Database Commands
# =============================================================================


@app.command()
def db_create():
    """Create all tables that do not exist yet."""
    from storefront_shared.config.logging import setup_logging
    from storefront_shared.infrastructure.db import engine
    from storefront_api.models import Base

    setup_logging()
    Base.metadata.create_all(bind=engine)
    console.print("[green]✓ Tables created/verified[/green]")


# =============================================================================
# Trash Commands
# =============================================================================


@app.command()
def sweep_trash(
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Only count eligible rows"),
    retention_days: int = typer.Option(None, help="Override the retention window (days)"),
):
    """Purge rows that have been in the trash longer than the retention window."""
    from storefront_shared.config.constants import SWEEP_FAILED
    from storefront_shared.config.logging import setup_logging
    from storefront_shared.infrastructure.db import get_db_context
    from storefront_shared.infrastructure.notifications import get_notifier
    from storefront_api.services.trash import RecordStore, RetentionSweeper

    setup_logging()
    with get_db_context() as db:
        sweeper = RetentionSweeper(RecordStore(db), retention_days=retention_days, notifier=get_notifier())
        if dry_run:
            counts = sweeper.count_eligible()
            title = f"Eligible rows (cutoff {sweeper.cutoff().isoformat()})"
        else:
            counts = sweeper.run().cleaned
            title = "Removed rows"

    table = Table(title=title)
    table.add_column("Entity type", style="cyan")
    table.add_column("Rows", justify="right")
    for entity_type, count in counts.items():
        shown = "[red]failed[/red]" if count == SWEEP_FAILED else str(count)
        table.add_row(entity_type, shown)
    console.print(table)

    if any(c == SWEEP_FAILED for c in counts.values()):
        raise typer.Exit(1)
    if dry_run:
        console.print("[yellow]Dry run: nothing was deleted[/yellow]")
    else:
        console.print(f"[green]✓ Sweep complete ({sum(counts.values())} rows removed)[/green]")


@app.command()
def trash_list(
    entity_type: str = typer.Option("all", "--type", "-t", help="Entity type or 'all'"),
):
    """List trashed rows, most recently deleted first."""
    from storefront_shared.infrastructure.db import get_db_context
    from storefront_api.services.trash import RecordStore, TrashLifecycleManager

    with get_db_context() as db:
        items = TrashLifecycleManager(RecordStore(db)).list_trashed(entity_type)

    if not items:
        console.print("[yellow]Trash is empty[/yellow]")
        return

    table = Table(title=f"Trash ({len(items)} items)")
    table.add_column("Type", style="cyan")
    table.add_column("ID")
    table.add_column("Name", style="bold")
    table.add_column("Deleted at")
    for item in items:
        table.add_row(item.entity_type.value, item.id, item.name, item.deleted_at.isoformat())
    console.print(table)


@app.command()
def trash_activity(
    limit: int = typer.Option(50, "--limit", "-l", help="Number of entries"),
):
    """Show the latest trash log entries."""
    from storefront_shared.infrastructure.db import get_db_context
    from storefront_api.services.trash import RecordStore, TrashLog

    with get_db_context() as db:
        entries = TrashLog(RecordStore(db)).recent_activity(limit)

    table = Table(title="Trash activity")
    table.add_column("When")
    table.add_column("Action", style="cyan")
    table.add_column("Type")
    table.add_column("Name", style="bold")
    table.add_column("By")
    for entry in entries:
        table.add_row(
            str(entry["created_at"]),
            entry["action"],
            entry["entity_type"],
            entry["entity_name"],
            entry["performed_by_email"] or "-",
        )
    console.print(table)


if __name__ == "__main__":
    app()
