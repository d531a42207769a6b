"""Typer sub-applications mounted by orderflow.cli.main."""

from orderflow.cli.commands.flows import app as flows_app
from orderflow.cli.commands.health import app as health_app

__all__ = ["flows_app", "health_app"]
