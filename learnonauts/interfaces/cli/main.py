"""
CLI Main - Typer-based command-line interface.

Usage:
    learnonauts serve --port 8787
    learnonauts migrate
    learnonauts migrate --target 2
    learnonauts migrations
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from learnonauts.adapters.sqlite import MIGRATIONS, SQLiteRepository
from learnonauts.config import get_settings

app = typer.Typer(
    name="learnonauts",
    help="Learnonauts - Auth and settings server for the learning app",
    add_completion=False,
)
console = Console()


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Host to bind"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to bind"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print("\n[green]Starting Learnonauts API server[/green]")
    console.print(f"[dim]http://{host}:{port}[/dim]\n")

    uvicorn.run(
        "learnonauts.interfaces.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


@app.command()
def migrate(
    target: int | None = typer.Option(None, "--target", "-t", help="Stop at this version"),
    db: Path | None = typer.Option(None, "--db", help="Database path"),
) -> None:
    """Apply pending schema migrations."""
    db_path = db or get_settings().db_path
    applied = asyncio.run(_migrate_async(db_path, target))

    if not applied:
        console.print("[green]Schema is up to date[/green]")
        return
    for version, name in applied:
        console.print(f"[green]Applied[/green] {version:03d}_{name}")
    console.print(f"\n[dim]Database: {db_path}[/dim]")


async def _migrate_async(db_path: Path, target: int | None) -> list[tuple[int, str]]:
    repo = SQLiteRepository(db_path)
    try:
        runner = await repo.migrations()
        applied = await runner.apply(target)
        return [(m.version, m.name) for m in applied]
    finally:
        await repo.close()


@app.command()
def migrations(
    db: Path | None = typer.Option(None, "--db", help="Database path"),
) -> None:
    """Show which migrations have been applied."""
    db_path = db or get_settings().db_path
    applied = asyncio.run(_applied_async(db_path))

    table = Table(title=f"Migrations ({db_path})")
    table.add_column("Version", style="cyan")
    table.add_column("Name")
    table.add_column("Status")

    for migration in MIGRATIONS:
        status = "[green]applied[/green]" if migration.version in applied else "[yellow]pending[/yellow]"
        table.add_row(f"{migration.version:03d}", migration.name, status)

    console.print(table)


async def _applied_async(db_path: Path) -> set[int]:
    repo = SQLiteRepository(db_path)
    try:
        runner = await repo.migrations()
        return set(await runner.applied_versions())
    finally:
        await repo.close()


@app.command()
def version() -> None:
    """Show version information."""
    from learnonauts import __version__

    console.print(f"Learnonauts Server v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
