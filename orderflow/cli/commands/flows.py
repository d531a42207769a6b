"""
Order Flow Commands.

Admin commands for inspecting and editing order flows through the API.
Mutations need an admin bearer token (--token or ORDERFLOW_API_TOKEN).
"""

import asyncio
from pathlib import Path
from typing import Any, Awaitable, Callable

import httpx
import typer
import yaml
from rich.console import Console
from rich.table import Table

from orderflow.cli.client import APIClient
from orderflow.cli.order_flows import OrderFlowClient

app = typer.Typer(help="Order flow commands")
console = Console()

TokenOption = typer.Option(
    None,
    "--token",
    "-t",
    envvar="ORDERFLOW_API_TOKEN",
    help="Bearer token for the API",
)
ShopOption = typer.Option(None, "--shop", "-s", help="Shop ID (defaults to the system flow)")


def _run(token: str | None, call: Callable[[OrderFlowClient], Awaitable[Any]]) -> Any:
    """Run one client call, turning transport and HTTP errors into exit code 1."""

    async def runner() -> Any:
        async with OrderFlowClient(APIClient(token=token)) as flows:
            return await call(flows)

    try:
        return asyncio.run(runner())
    except httpx.HTTPStatusError as e:
        error = {}
        try:
            error = e.response.json().get("error") or {}
        except ValueError:
            pass
        code = error.get("code", e.response.status_code)
        message = error.get("message", e.response.text)
        console.print(f"[red]{code}: {message}[/red]")
        raise typer.Exit(1)
    except httpx.HTTPError as e:
        console.print(f"[red]Error: Cannot reach backend ({e})[/red]")
        raise typer.Exit(1)


def _flow_kind(flow: dict[str, Any]) -> str:
    if flow.get("isDefault"):
        return "[green]default[/green]"
    if flow.get("shopId"):
        return "custom"
    return "[dim]unassigned[/dim]"


def _print_steps(flow: dict[str, Any]) -> None:
    table = Table(title=f"{flow['name']} ({flow['_id']})", show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Status", style="cyan")
    table.add_column("Name")
    table.add_column("Roles")
    table.add_column("Next")
    table.add_column("Forward to")

    for step in flow.get("steps", []):
        destinations = ", ".join(
            f"{d['type']}:{d['identifier']}"
            for d in step.get("forwardingDestinations", [])
            if d.get("isActive", True)
        )
        status = step["status"] if step.get("isActive", True) else f"[dim]{step['status']}[/dim]"
        table.add_row(
            str(step.get("order", "")),
            status,
            step["name"],
            ", ".join(step.get("authorizedRoles", [])) or "-",
            ", ".join(step.get("nextStatuses", [])) or "-",
            destinations or "-",
        )

    console.print(table)


@app.command("list")
def list_flows(token: str | None = TokenOption) -> None:
    """
    List all order flows.

    Examples:
        orderflow-admin flows list
    """
    flows = _run(token, lambda c: c.get_all_flows())

    table = Table(title="Order Flows", show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Kind")
    table.add_column("Shop")
    table.add_column("Steps", justify="right")
    table.add_column("Active")

    for flow in flows:
        table.add_row(
            flow["_id"],
            flow["name"],
            _flow_kind(flow),
            flow.get("shopId") or "-",
            str(len(flow.get("steps", []))),
            "yes" if flow.get("isActive") else "no",
        )

    console.print(table)


@app.command()
def vocabulary(token: str | None = TokenOption) -> None:
    """Show the configured flow roles and the statuses offered to flow editors."""
    vocab = _run(token, lambda c: c.get_vocabulary())

    console.print(f"Roles: [cyan]{', '.join(vocab['roles'])}[/cyan]")
    table = Table(title="Common Statuses", show_header=True)
    table.add_column("Status", style="cyan")
    table.add_column("Button")
    buttons = vocab.get("statusButtons", {})
    for status in vocab["commonStatuses"]:
        table.add_row(status, buttons.get(status, "-"))
    console.print(table)


@app.command()
def show(flow_id: str, token: str | None = TokenOption) -> None:
    """Show one flow with its steps."""
    _print_steps(_run(token, lambda c: c.get_flow_by_id(flow_id)))


@app.command()
def shop(shop_id: str, token: str | None = TokenOption) -> None:
    """Show the flow in effect for a shop (custom, else default)."""
    flow = _run(token, lambda c: c.get_flow_for_shop(shop_id))
    console.print(f"Kind: {_flow_kind(flow)}")
    _print_steps(flow)


@app.command("next")
def next_statuses(
    status: str,
    shop_id: str | None = ShopOption,
    token: str | None = TokenOption,
) -> None:
    """List the statuses reachable from STATUS."""
    statuses = _run(token, lambda c: c.get_next_statuses(status, shop_id))
    if not statuses:
        console.print(f"[yellow]No transitions from {status}[/yellow]")
        return
    for value in statuses:
        console.print(f"  {status} -> [cyan]{value}[/cyan]")


@app.command("can-change")
def can_change(
    current_status: str,
    new_status: str,
    role: str = typer.Option(..., "--role", "-r", help="Flow role, see `flows vocabulary`"),
    shop_id: str | None = ShopOption,
    token: str | None = TokenOption,
) -> None:
    """
    Check whether ROLE may move an order from CURRENT_STATUS to NEW_STATUS.

    Exits with code 1 when the transition is not allowed.

    Examples:
        orderflow-admin flows can-change created confirmed --role Operator
    """
    allowed = _run(
        token,
        lambda c: c.can_change_status(current_status, new_status, role, shop_id),
    )
    if allowed:
        console.print(f"[green]✓ {role} can change {current_status} -> {new_status}[/green]")
    else:
        console.print(f"[red]✗ {role} cannot change {current_status} -> {new_status}[/red]")
        raise typer.Exit(1)


@app.command()
def create(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML or JSON flow file"),
    token: str | None = TokenOption,
) -> None:
    """Create a flow from a YAML or JSON file (wire field names)."""
    body = yaml.safe_load(path.read_text(encoding="utf-8"))
    flow = _run(token, lambda c: c.create_flow(body))
    console.print(f"[green]Created flow {flow['_id']}[/green]")


@app.command("set-default")
def set_default(flow_id: str, token: str | None = TokenOption) -> None:
    """Make FLOW_ID the system default flow."""
    flow = _run(token, lambda c: c.set_default_flow(flow_id))
    console.print(f"[green]{flow['name']} is now the default flow[/green]")


@app.command()
def delete(
    flow_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    token: str | None = TokenOption,
) -> None:
    """Delete a flow."""
    if not yes:
        typer.confirm(f"Delete flow {flow_id}?", abort=True)
    _run(token, lambda c: c.delete_flow(flow_id))
    console.print(f"[green]Deleted flow {flow_id}[/green]")


@app.command()
def customize(shop_id: str, token: str | None = TokenOption) -> None:
    """Give a shop its own copy of the flow it currently uses."""
    flow = _run(token, lambda c: c.customize_shop_flow(shop_id))
    console.print(f"[green]Shop {shop_id} now uses custom flow {flow['_id']}[/green]")


@app.command()
def reset(shop_id: str, token: str | None = TokenOption) -> None:
    """Drop a shop's custom flow so it falls back to the default."""
    flow = _run(token, lambda c: c.reset_shop_flow(shop_id))
    console.print(f"[green]Shop {shop_id} reset to {flow['name']}[/green]")
