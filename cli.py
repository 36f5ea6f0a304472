#!/usr/bin/env python3
"""
Notekeeper operations CLI.

    python cli.py                                   # info
    python cli.py -s server --reload -v
    python cli.py -s server -a status
    python cli.py -s health
    python cli.py -s config
    python cli.py -s test --test-type unit --coverage
    python cli.py -s migrate --migrate-action upgrade
    python cli.py -s migrate --migrate-action autogenerate -m "add tasks"
"""

import os
import signal
import subprocess
import sys
import time
from collections.abc import Callable
from pathlib import Path

import click
import structlog

from notekeeper.backend.core.config import get_app_config
from notekeeper.backend.core.logging import get_logger, setup_logging

PROJECT_ROOT = Path(__file__).parent

TEST_TARGETS = {"unit": "tests/unit", "integration": "tests/integration", "all": "tests/"}

# --migrate-action -> alembic arguments; {revision} is filled from --revision
ALEMBIC_ARGS = {
    "upgrade": ["upgrade", "{revision}"],
    "downgrade": ["downgrade", "{revision}"],
    "current": ["current"],
    "history": ["history", "--verbose"],
}


def _fail(message: str, code: int = 1) -> None:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(code)


# =============================================================================
# Server lifecycle
# =============================================================================


def _pids_on_port(port: int) -> list[int]:
    result = subprocess.run(["lsof", "-ti", f":{port}"], capture_output=True, text=True)
    return [int(pid) for pid in result.stdout.split()]


def stop_server(logger, port: int) -> None:
    pids = _pids_on_port(port)
    if not pids:
        click.echo(f"No server running on port {port}.")
        return
    for pid in pids:
        os.kill(pid, signal.SIGINT)
        logger.info("Sent SIGINT", extra={"pid": pid, "port": port})
    click.echo(f"Stopped server on port {port} (PID {', '.join(map(str, pids))}).")


def server_status(port: int) -> None:
    pids = _pids_on_port(port)
    state = f"running (PID {', '.join(map(str, pids))})" if pids else "not running"
    click.echo(f"Server on port {port}: {state}.")


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Run uvicorn in the foreground until interrupted."""
    server = get_app_config().application.server
    host = host or server.host
    port = port or server.port

    cmd = [sys.executable, "-m", "uvicorn", "notekeeper.backend.main:app", "--host", host, "--port", str(port)]
    if reload:
        cmd.append("--reload")

    logger.info("Starting server", extra={"host": host, "port": port, "reload": reload})
    click.echo(f"Notekeeper API on http://{host}:{port} (Ctrl+C to stop)\n")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server exited with error", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


def manage_server(logger, action: str, host: str | None, port: int | None, reload: bool) -> None:
    server_port = port if port is not None else get_app_config().application.server.port
    if action == "status":
        server_status(server_port)
    elif action == "stop":
        stop_server(logger, server_port)
    else:
        if action == "restart":
            stop_server(logger, server_port)
            time.sleep(2)
        run_server(logger, host, port, reload)


# =============================================================================
# Diagnostics
# =============================================================================


def _check_config() -> str:
    return f"App: {get_app_config().application.name}"


def _check_secrets() -> None:
    from notekeeper.backend.core.config import get_settings

    get_settings()


def _check_app() -> str:
    from notekeeper.backend.main import get_app

    return f"{len(get_app().routes)} routes"


def _check_pdf_export() -> None:
    from notekeeper.backend.services.export import render_text_document

    render_text_document("Health", None, ["ok"])


HEALTH_CHECKS: list[tuple[str, Callable[[], str | None]]] = [
    ("YAML configuration", _check_config),
    ("Secrets (config/.env)", _check_secrets),
    ("FastAPI application", _check_app),
    ("PDF export", _check_pdf_export),
]


def check_health(logger) -> None:
    """Run each wiring check and print a pass/fail table. Never raises."""
    click.echo("Checking application health...\n")
    results: list[tuple[str, bool, str | None]] = []
    for name, check in HEALTH_CHECKS:
        try:
            results.append((name, True, check()))
        except Exception as e:
            logger.error("Health check failed", extra={"check": name, "error": str(e)})
            results.append((name, False, str(e)))

    click.echo("-" * 50)
    for name, passed, detail in results:
        mark = click.style("PASS", fg="green") if passed else click.style("FAIL", fg="red")
        suffix = f" ({detail})" if detail else ""
        click.echo(f"  {mark}  {name}{suffix}")
    click.echo("-" * 50)

    if all(passed for _, passed, _ in results):
        click.echo(click.style("All checks passed.", fg="green"))
    else:
        click.echo(click.style("Some checks failed.", fg="yellow"))


def _echo_tree(values: dict, indent: int = 2) -> None:
    for key, value in values.items():
        if isinstance(value, dict):
            click.echo(f"{' ' * indent}{key}:")
            _echo_tree(value, indent + 2)
        else:
            click.echo(f"{' ' * indent}{key}: {value}")


def show_config(logger) -> None:
    """Print every validated YAML section. Secrets are never shown."""
    try:
        app_config = get_app_config()
    except (FileNotFoundError, ValueError) as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        _fail(f"loading configuration: {e}")

    for section in ("application", "database", "logging", "features", "security", "events", "notes"):
        click.echo(f"\n{section}:")
        click.echo("-" * 40)
        _echo_tree(getattr(app_config, section).model_dump())


def show_info() -> None:
    app = get_app_config().application
    click.echo(f"{app.name} {app.version}")
    click.echo("=" * 40)
    click.echo(app.description)
    click.echo("\nServices (--service):")
    click.echo("  server   API server (--action start|stop|restart|status)")
    click.echo("  health   Check configuration and app wiring")
    click.echo("  config   Display configuration")
    click.echo("  test     Run the test suite")
    click.echo("  migrate  Database migrations")
    click.echo("  info     Show this information")


# =============================================================================
# Tooling wrappers
# =============================================================================


def run_tests(logger, test_type: str, coverage: bool) -> None:
    cmd = [sys.executable, "-m", "pytest", TEST_TARGETS[test_type], "-v"]
    if coverage:
        cmd += ["--cov=notekeeper", "--cov-report=term-missing"]

    logger.info("Running tests", extra={"type": test_type, "coverage": coverage})
    click.echo(f"Running: {' '.join(cmd)}\n")
    sys.exit(subprocess.run(cmd, cwd=PROJECT_ROOT).returncode)


def run_migrations(logger, migrate_action: str, revision: str, message: str | None) -> None:
    if migrate_action == "autogenerate":
        if not message:
            _fail("--message/-m is required for autogenerate.")
        args = ["revision", "--autogenerate", "-m", message]
    else:
        args = [arg.format(revision=revision) for arg in ALEMBIC_ARGS[migrate_action]]

    cmd = [sys.executable, "-m", "alembic", "-c", str(PROJECT_ROOT / "alembic.ini"), *args]
    logger.info("Running migrations", extra={"action": migrate_action, "revision": revision})
    result = subprocess.run(cmd, cwd=PROJECT_ROOT)
    if result.returncode != 0:
        logger.error("Migration failed", extra={"exit_code": result.returncode})
        sys.exit(result.returncode)


# =============================================================================
# Entry point
# =============================================================================


@click.command()
@click.option(
    "--service", "-s",
    type=click.Choice(["server", "health", "config", "test", "info", "migrate"]),
    default="info",
    help="What to run.",
)
@click.option(
    "--action", "-a",
    type=click.Choice(["start", "stop", "restart", "status"]),
    default="start",
    help="Server lifecycle action.",
)
@click.option("--verbose", "-v", is_flag=True, help="INFO level logging.")
@click.option("--debug", "-d", is_flag=True, help="DEBUG level logging.")
@click.option("--host", default=None, help="Bind host (server).")
@click.option("--port", default=None, type=int, help="Bind port (server).")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes (server).")
@click.option("--test-type", type=click.Choice(list(TEST_TARGETS)), default="all", help="Test suite.")
@click.option("--coverage", is_flag=True, help="Collect coverage (test).")
@click.option(
    "--migrate-action",
    type=click.Choice([*ALEMBIC_ARGS, "autogenerate"]),
    default="current",
    help="Alembic operation (migrate).",
)
@click.option("--revision", default="head", help="Target revision for upgrade/downgrade.")
@click.option("-m", "--message", default=None, help="Revision message for autogenerate.")
def main(
    service: str,
    action: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    test_type: str,
    coverage: bool,
    migrate_action: str,
    revision: str,
    message: str | None,
) -> None:
    """Run and inspect the Notekeeper backend."""
    if not (PROJECT_ROOT / ".project_root").exists():
        _fail(".project_root not found. Run from the project root.")

    setup_logging(level="DEBUG" if debug else "INFO" if verbose else "WARNING", format_type="console")
    structlog.contextvars.bind_contextvars(source="cli")
    logger = get_logger(__name__)
    logger.debug("CLI invoked", extra={"service": service, "action": action})

    handlers: dict[str, Callable[[], None]] = {
        "server": lambda: manage_server(logger, action, host, port, reload),
        "health": lambda: check_health(logger),
        "config": lambda: show_config(logger),
        "test": lambda: run_tests(logger, test_type, coverage),
        "migrate": lambda: run_migrations(logger, migrate_action, revision, message),
        "info": show_info,
    }
    handlers[service]()


if __name__ == "__main__":
    main()
