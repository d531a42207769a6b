#!/usr/bin/env python3
"""
Order Flow Service CLI.

Developer entry point: runs the API server or the polling bot, prepares
the database, seeds the default order flow and inspects configuration.
Pick the job with --service; long-running services also take --action.

    python cli.py --service server --reload --verbose
    python cli.py --service server --action status
    python cli.py --service init-db && python cli.py --service seed
    python cli.py --service flows
    python cli.py --service migrate --migrate-action upgrade
    python cli.py --service test --test-type unit --coverage

Day-to-day flow administration against a running server lives in the
`orderflow-admin` command.
"""

import asyncio
import os
import signal
import subprocess
import sys
import time
from collections.abc import Callable
from pathlib import Path

import click
import structlog

PROJECT_ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(PROJECT_ROOT))

from orderflow.backend.core.logging import get_logger, setup_logging

LONG_RUNNING_SERVICES = {"server", "telegram-poll"}
RESTART_GRACE_SECONDS = 2

logger = get_logger("cli")


def fail(message: str, **context) -> None:
    logger.error(message, extra=context)
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


def enter_project_root() -> None:
    """Configuration paths resolve from the working directory, so run from the script's root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(click.style("Error: .project_root not found next to cli.py.", fg="red"), err=True)
        sys.exit(1)
    os.chdir(PROJECT_ROOT)


def run_async(job: Callable[[], object]) -> object:
    """Run a coroutine function and dispose of the engine it opened."""
    from orderflow.backend.core.database import dispose_engine

    async def wrapped():
        try:
            return await job()
        finally:
            await dispose_engine()

    return asyncio.run(wrapped())


# =============================================================================
# Lifecycle of long-running services
# =============================================================================


def _pids_on_port(port: int) -> list[int]:
    result = subprocess.run(["lsof", "-ti", f":{port}"], capture_output=True, text=True)
    return [int(pid) for pid in result.stdout.split()]


def _configured_port(port: int | None) -> int:
    if port is not None:
        return port
    from orderflow.backend.core.config import get_app_config

    return get_app_config().application.server.port


def manage_lifecycle(service: str, action: str, port: int | None) -> bool:
    """Handle stop/status/restart. True when nothing is left to start."""
    port = _configured_port(port)
    pids = _pids_on_port(port)
    label = f"{service.title()} on port {port}"

    if action == "status":
        click.echo(f"{label}: " + (f"running (PID {', '.join(map(str, pids))})" if pids else "not running"))
        return True

    if not pids:
        click.echo(f"{label}: not running.")
    for pid in pids:
        os.kill(pid, signal.SIGINT)
        logger.info("Sent SIGINT", extra={"service": service, "pid": pid, "port": port})
    if pids:
        click.echo(f"{label}: stopped (PID {', '.join(map(str, pids))}).")

    if action == "restart":
        time.sleep(RESTART_GRACE_SECONDS)
        return False
    return True


# =============================================================================
# Services
# =============================================================================


def run_server(options: dict) -> None:
    """FastAPI server under uvicorn."""
    from orderflow.backend.core.config import get_app_config

    server = get_app_config().application.server
    host = options["host"] or server.host
    port = options["port"] or server.port

    cmd = [sys.executable, "-m", "uvicorn", "orderflow.backend.main:app", "--host", host, "--port", str(port)]
    if options["reload"]:
        cmd.append("--reload")

    logger.info("Starting server", extra={"host": host, "port": port, "reload": options["reload"]})
    click.echo(f"Order flow API at http://{host}:{port} (Ctrl+C to stop)\n")
    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server exited", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


def run_telegram_poll(options: dict) -> None:
    """Order forwarding bot in polling mode, for development without a public URL."""
    from orderflow.backend.core.config import get_app_config

    if not get_app_config().features.channel_telegram_enabled:
        fail("channel_telegram_enabled is false in features.yaml")

    from orderflow.telegram.bot import create_bot, create_dispatcher

    try:
        bot = create_bot()
    except RuntimeError as e:
        fail(str(e))
    dispatcher = create_dispatcher()

    async def poll() -> None:
        try:
            await bot.delete_webhook(drop_pending_updates=True)
            await dispatcher.start_polling(bot)
        finally:
            await bot.session.close()

    click.echo("Telegram bot polling; next-status buttons are live (Ctrl+C to stop)\n")
    logger.info("Telegram polling started")
    asyncio.run(poll())


def run_init_db(options: dict) -> None:
    """Create every table from the models, for development databases."""
    from orderflow.backend.core.database import create_all_tables

    try:
        run_async(create_all_tables)
    except Exception as e:
        fail(f"Database initialisation failed: {e}")
    click.echo(click.style("Database tables created.", fg="green"))


def run_seed(options: dict) -> None:
    """Insert the default order flow unless one exists."""
    from orderflow.backend.core.database import get_session_factory
    from orderflow.backend.services.seed import seed_default_flow

    async def seed():
        async with get_session_factory()() as session:
            flow = await seed_default_flow(session)
            await session.commit()
            return flow

    try:
        flow = run_async(seed)
    except Exception as e:
        fail(f"Seeding failed: {e}")

    if flow is None:
        click.echo("A default order flow already exists. Nothing to seed.")
    else:
        click.echo(click.style(f"Seeded default order flow {flow.id} ({len(flow.steps)} steps).", fg="green"))


def show_flows(options: dict) -> None:
    """Print every flow with its transition table straight from the database."""
    from orderflow.backend.core.database import get_session_factory
    from orderflow.backend.services.order_flow import OrderFlowService

    async def load():
        async with get_session_factory()() as session:
            return await OrderFlowService(session).get_all_flows()

    try:
        flows = run_async(load)
    except Exception as e:
        fail(f"Failed to load order flows: {e}")

    if not flows:
        click.echo("No order flows. Run: python cli.py --service seed")
        return

    for flow in flows:
        scope = "default" if flow.is_default else f"shop {flow.shop_id}" if flow.shop_id else "unassigned"
        click.echo(f"{flow.name} [{scope}] {flow.id}")
        for step in flow.steps:
            mark = " " if step.get("isActive", True) else "x"
            roles = ", ".join(step.get("authorizedRoles", []))
            targets = ", ".join(step.get("nextStatuses", [])) or "-"
            click.echo(f"  {mark} {step['status']:<16} -> {targets:<32} [{roles}]")
        click.echo()


def check_health(options: dict) -> None:
    """The admin CLI's offline checks plus the startup security checks."""
    from orderflow.cli.commands.health import LOCAL_CHECKS

    def startup_checks() -> str:
        from orderflow.backend.core.startup_checks import run_startup_checks

        run_startup_checks()
        return "secrets and production safety"

    click.echo("Health Check Results:")
    failed = 0
    for name, check in [*LOCAL_CHECKS, ("Startup checks", startup_checks)]:
        try:
            detail = check()
        except Exception as e:
            failed += 1
            logger.warning("Health check failed", extra={"check": name, "error": str(e)})
            click.echo(f"  {click.style('✗ FAIL', fg='red')}  {name} ({e})")
        else:
            click.echo(f"  {click.style('✓ PASS', fg='green')}  {name} ({detail})")

    if failed:
        click.echo(click.style(f"\n{failed} check(s) failed. Secrets need config/.env.", fg="yellow"))
        sys.exit(1)
    click.echo(click.style("\nAll checks passed!", fg="green"))


def show_config(options: dict) -> None:
    """Dump the validated YAML sections."""
    from orderflow.backend.core.config import get_app_config

    try:
        config = get_app_config()
    except (RuntimeError, FileNotFoundError, ValueError) as e:
        fail(f"Could not load configuration: {e}")

    sections = [
        ("Application Settings", config.application),
        ("Database Settings", config.database),
        ("Logging Settings", config.logging),
        ("Feature Flags", config.features),
        ("Order Flow Vocabulary", config.order_flow),
    ]
    for title, section in sections:
        click.echo(f"\n{title}:")
        for key, value in section.model_dump().items():
            if isinstance(value, dict):
                click.echo(f"  {key}:")
                for inner_key, inner_value in value.items():
                    click.echo(f"    {inner_key}: {inner_value}")
            else:
                click.echo(f"  {key}: {value}")


def run_tests(options: dict) -> None:
    """pytest over tests/, tests/unit or tests/integration."""
    target = {"unit": "tests/unit", "integration": "tests/integration"}.get(options["test_type"], "tests/")
    cmd = [sys.executable, "-m", "pytest", target, "-v"]
    if options["coverage"]:
        cmd += ["--cov=orderflow", "--cov-report=term-missing"]

    click.echo(f"Running: {' '.join(cmd)}\n")
    sys.exit(subprocess.run(cmd).returncode)


def run_migrations(options: dict) -> None:
    """Alembic against orderflow/backend/migrations."""
    alembic_ini = PROJECT_ROOT / "orderflow" / "backend" / "migrations" / "alembic.ini"
    if not alembic_ini.exists():
        fail("orderflow/backend/migrations/alembic.ini not found")

    action, revision, message = options["migrate_action"], options["revision"], options["message"]
    if action == "autogenerate" and not message:
        fail("--message/-m is required for autogenerate")

    arguments = {
        "upgrade": ["upgrade", revision],
        "downgrade": ["downgrade", revision],
        "current": ["current"],
        "history": ["history", "--verbose"],
        "autogenerate": ["revision", "--autogenerate", "-m", message],
    }[action]

    logger.info("Running migrations", extra={"action": action, "revision": revision})
    result = subprocess.run([sys.executable, "-m", "alembic", "-c", str(alembic_ini), *arguments])
    if result.returncode != 0:
        logger.error("Migration failed", extra={"exit_code": result.returncode})
        sys.exit(result.returncode)


def show_info(options: dict) -> None:
    """Application identity and the list of services."""
    from orderflow.backend.core.config import get_app_config

    try:
        application = get_app_config().application
    except (RuntimeError, FileNotFoundError, ValueError) as e:
        fail(f"Could not load application.yaml: {e}")

    click.echo(f"{application.name} {application.version}")
    click.echo(application.description)
    click.echo("\nServices (--service):")
    for name, handler in SERVICES.items():
        summary = (handler.__doc__ or "").strip().splitlines()[0]
        click.echo(f"  {name:<14} {summary}")
    click.echo("\nLifecycle (--action, server and telegram-poll): start, stop, restart, status")
    click.echo("\nFlow administration against a running server: orderflow-admin flows --help")


SERVICES: dict[str, Callable[[dict], None]] = {
    "info": show_info,
    "server": run_server,
    "telegram-poll": run_telegram_poll,
    "init-db": run_init_db,
    "seed": run_seed,
    "flows": show_flows,
    "health": check_health,
    "config": show_config,
    "test": run_tests,
    "migrate": run_migrations,
}


@click.command()
@click.option("--service", "-s", type=click.Choice(list(SERVICES)), default="info", help="Service or command to run.")
@click.option(
    "--action", "-a",
    type=click.Choice(["start", "stop", "restart", "status"]),
    default="start",
    help="Lifecycle action for server and telegram-poll.",
)
@click.option("--verbose", "-v", is_flag=True, help="INFO level logging.")
@click.option("--debug", "-d", is_flag=True, help="DEBUG level logging.")
@click.option("--host", default=None, help="Server host.")
@click.option("--port", default=None, type=int, help="Server port.")
@click.option("--reload", is_flag=True, help="Auto-reload (server only).")
@click.option("--test-type", type=click.Choice(["all", "unit", "integration"]), default="all")
@click.option("--coverage", is_flag=True, help="Run tests with coverage.")
@click.option(
    "--migrate-action",
    type=click.Choice(["upgrade", "downgrade", "current", "history", "autogenerate"]),
    default="current",
)
@click.option("--revision", default="head", help="Target revision for upgrade/downgrade.")
@click.option("-m", "--message", default=None, help="Migration message (autogenerate).")
def main(service: str, action: str, verbose: bool, debug: bool, **options) -> None:
    """
    Order Flow Service CLI.

    \b
    Examples:
        python cli.py --service server --reload
        python cli.py --service server --action restart --port 8099
        python cli.py --service seed
        python cli.py --service flows
        python cli.py --service migrate --migrate-action autogenerate -m "add orders"
        python cli.py --service telegram-poll --verbose
    """
    enter_project_root()

    level = "DEBUG" if debug else "INFO" if verbose else "WARNING"
    setup_logging(level=level, format_type="console")
    structlog.contextvars.bind_contextvars(source="cli")
    logger.debug("CLI invoked", extra={"service": service, "action": action})

    if service in LONG_RUNNING_SERVICES and action != "start":
        if manage_lifecycle(service, action, options["port"]):
            return

    SERVICES[service](options)


if __name__ == "__main__":
    main()
