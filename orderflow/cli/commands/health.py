"""
Health commands for the admin CLI.

`status` and `ping` talk to a running API; `check` only imports the
application and reads its configuration, so it works offline.
"""

import asyncio
from collections.abc import Callable

import httpx
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from orderflow.cli.client import close_api_client, get_api_client

app = typer.Typer(help="Health check commands")
console = Console()

STATUS_COLORS = {"healthy": "green", "unhealthy": "red"}
START_HINT = "Is the server running? Start it with: python cli.py --service server"


def _colored(status: str, label: str | None = None) -> str:
    color = STATUS_COLORS.get(status, "yellow")
    return f"[{color}]{label or status}[/{color}]"


@app.command()
def status(
    detailed: bool = typer.Option(False, "--detailed", "-d", help="Show per-component checks"),
) -> None:
    """
    Readiness of the running API, or every component with --detailed.

    Exits 1 when the API reports itself unhealthy or cannot be reached.
    """
    asyncio.run(_status(detailed))


async def _status(detailed: bool) -> None:
    path = "/health/detailed" if detailed else "/health/ready"
    try:
        response = await get_api_client().get(path)
    except httpx.ConnectError:
        console.print("[red]Error: Cannot connect to backend[/red]")
        console.print(f"[dim]{START_HINT}[/dim]")
        raise typer.Exit(1)
    except httpx.HTTPError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    finally:
        await close_api_client()

    if response.status_code not in (200, 503):
        console.print(f"[red]Unexpected response: {response.status_code}[/red]")
        raise typer.Exit(1)

    _render(response.json(), detailed)
    if response.status_code == 503:
        raise typer.Exit(1)


def _render(data: dict, detailed: bool) -> None:
    if not (detailed and "checks" in data):
        overall = data.get("status", "unknown")
        console.print(Panel(_colored(overall, overall.upper()), title="Backend Status"))
        return

    table = Table(title="Health Status", show_header=True)
    table.add_column("Component", style="cyan")
    table.add_column("Status")
    table.add_column("Details")
    for component, check in data["checks"].items():
        details = [
            f"{key}: {check[key]}{'ms' if key == 'latency_ms' else ''}"
            for key in ("latency_ms", "error", "reason")
            if key in check
        ]
        table.add_row(component, _colored(check.get("status", "unknown")), ", ".join(details) or "-")
    console.print(table)

    application = data.get("application")
    if application:
        console.print(
            f"\n[dim]{application.get('name', 'N/A')} v{application.get('version', 'N/A')}"
            f" ({application.get('env', 'N/A')})[/dim]"
        )


@app.command()
def ping() -> None:
    """Exit 0 if the API answers /health at all."""
    asyncio.run(_ping())


async def _ping() -> None:
    try:
        response = await get_api_client().get("/health")
    except httpx.HTTPError as e:
        console.print(f"[red]✗ Backend is not reachable: {e}[/red]")
        raise typer.Exit(1)
    finally:
        await close_api_client()

    if response.status_code == 200:
        console.print("[green]✓ Backend is reachable[/green]")
    else:
        console.print(f"[yellow]Backend responded with status {response.status_code}[/yellow]")


def _check_config() -> str:
    from orderflow.backend.core.config import get_app_config

    return f"App: {get_app_config().application.name}"


def _check_secrets() -> str:
    from orderflow.backend.core.config import get_settings

    get_settings()
    return "JWT_SECRET present"


def _check_app() -> str:
    from orderflow.backend.main import get_app

    return f"Title: {get_app().title}"


def _check_models() -> str:
    from orderflow.backend.models import Base

    return ", ".join(sorted(Base.metadata.tables))


def _check_order_flow() -> str:
    from orderflow.backend.core.config import get_app_config

    order_flow = get_app_config().order_flow
    return f"{len(order_flow.roles)} roles, {len(order_flow.status_buttons)} status buttons"


LOCAL_CHECKS: list[tuple[str, Callable[[], str]]] = [
    ("YAML configuration", _check_config),
    ("Secrets (.env)", _check_secrets),
    ("FastAPI application", _check_app),
    ("Database models", _check_models),
    ("Order flow config", _check_order_flow),
]


@app.command()
def check() -> None:
    """Import the app and load its configuration without a running server."""
    table = Table(title="Health Check Results", show_header=True)
    table.add_column("Check", style="cyan")
    table.add_column("Status")
    table.add_column("Details")

    failed = 0
    for name, run_check in LOCAL_CHECKS:
        try:
            detail = run_check()
        except Exception as e:
            failed += 1
            table.add_row(name, "[red]✗ FAIL[/red]", str(e))
        else:
            table.add_row(name, "[green]✓ PASS[/green]", detail)

    console.print(table)
    if failed:
        console.print(f"\n[yellow]{failed} check(s) failed. Secrets need config/.env.[/yellow]")
        raise typer.Exit(1)
    console.print("\n[green]All checks passed![/green]")
