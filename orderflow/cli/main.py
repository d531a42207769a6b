"""
Admin CLI entry point.

Installed as the `orderflow-admin` console script.
"""

import typer

from orderflow.backend.core.logging import setup_logging
from orderflow.cli.commands import flows_app, health_app

app = typer.Typer(
    name="orderflow-admin",
    help="Order flow admin client",
    no_args_is_help=True,
)

app.add_typer(flows_app, name="flows")
app.add_typer(health_app, name="health")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable INFO level logging"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable DEBUG level logging"),
) -> None:
    """Order flow admin client."""
    level = "DEBUG" if debug else "INFO" if verbose else "WARNING"
    setup_logging(level=level, format_type="console")


if __name__ == "__main__":
    app()
