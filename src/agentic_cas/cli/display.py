"""Consolidated display utilities for CLI commands."""
from rich.console import Console
from rich.table import Table

from ..services.reference import StorageReference

console = Console()
err_console = Console(stderr=True)


def success(message: str) -> None:
    """Print success message."""
    err_console.print(f"[green]✓ {message}[/green]")


def warning(message: str) -> None:
    """Print warning message."""
    err_console.print(f"[yellow]⚠️  {message}[/yellow]")


def error(message: str) -> None:
    """Print error message."""
    err_console.print(f"[red]❌ {message}[/red]")


def info(message: str) -> None:
    """Print info message."""
    console.print(message)


def section(title: str) -> None:
    """Print section header."""
    console.print(f"\n[bold]{title}[/bold]")


def reference_table(ref: StorageReference) -> Table:
    """Build a two-column table describing a storage reference."""
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Content Hash", ref.content_hash)
    table.add_row("Storage Location", ref.location)
    table.add_row("Content Type", ref.content_type)
    table.add_row("Size", f"{ref.size} bytes")
    return table
