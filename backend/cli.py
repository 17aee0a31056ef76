"""
ViewSet CLI.

Command-line interface for running the API and managing its database.
"""

import sys
import time

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="viewset",
    help="Generic CRUD ViewSet service CLI",
    add_completion=False,
)
console = Console()

API_VERSION = "1.0.0"


# =============================================================================
# Server Commands
# =============================================================================

@app.command()
def serve(
    host: str = typer.Option(None, help="Bind address (defaults to REST_API_HOST)"),
    port: int = typer.Option(None, help="Port (defaults to REST_API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the REST API with uvicorn."""
    import uvicorn

    from shared.config.settings import settings

    host = host or settings.rest_api_host
    port = port or settings.rest_api_port

    print_routes()
    console.print(f"[blue]Serving on http://{host}:{port}[/blue]")
    uvicorn.run("rest_api.main:app", host=host, port=port, reload=reload)


@app.command()
def routes():
    """List the mounted API routes."""
    print_routes()


def print_routes() -> None:
    from fastapi.routing import APIRoute

    from rest_api.main import app as api

    table = Table(title="API Routes")
    table.add_column("Method", style="cyan")
    table.add_column("Path", style="green")
    table.add_column("Name", style="yellow")

    for route in api.routes:
        if not isinstance(route, APIRoute):
            continue
        for method in sorted(route.methods):
            table.add_row(method, route.path, route.name)

    console.print(table)


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def db_init(
    seed: bool = typer.Option(True, "--seed/--no-seed", help="Insert sample users into an empty table"),
):
    """Create database tables and optionally seed sample data."""
    from shared.config.settings import settings
    from rest_api.core.lifespan import init_database

    console.print(f"[blue]Initializing database: {settings.database_url}[/blue]")
    try:
        created = init_database(seed=seed)
    except Exception as e:
        console.print(f"[red]✗ Database initialization failed: {e}[/red]")
        raise typer.Exit(1)

    console.print("[green]✓ Tables created/verified[/green]")
    if seed:
        console.print(f"[green]✓ Seeded {created} sample users[/green]")


# =============================================================================
# Health Commands
# =============================================================================

@app.command()
def health(
    url: str = typer.Option("http://localhost:8080", help="Base URL of a running API"),
):
    """Check a running API instance."""
    import httpx

    table = Table(title="Service Health")
    table.add_column("Endpoint", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Response Time", style="yellow")

    with httpx.Client(timeout=5.0) as client:
        for path in ("/health", "/health/detailed"):
            try:
                start = time.time()
                response = client.get(f"{url.rstrip('/')}{path}")
                elapsed = (time.time() - start) * 1000

                if response.status_code == 200:
                    table.add_row(path, "✓ Healthy", f"{elapsed:.0f}ms")
                else:
                    table.add_row(path, f"✗ Status {response.status_code}", f"{elapsed:.0f}ms")
            except httpx.HTTPError as e:
                table.add_row(path, f"✗ {type(e).__name__}", "-")

    console.print(table)


@app.command()
def version():
    """Show version information."""
    table = Table(title="ViewSet Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", API_VERSION)
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
