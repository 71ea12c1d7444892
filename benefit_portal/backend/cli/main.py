#!/usr/bin/env python3
"""
Benefit Eligibility Portal – operator command line.

Entry point for running and maintaining the portal backend:
1. Serve the HTTP API under uvicorn
2. Seed the admin account and example program
3. Add reviewer / admin accounts
4. Export applications to CSV
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from benefit_portal.backend.core.analysis.exporter import export_applications_csv
from benefit_portal.backend.core.db import build_engine, build_session_factory, init_db, session_scope
from benefit_portal.backend.core.errors import PortalError
from benefit_portal.backend.core.models import APPLICATION_STATUSES, USER_ROLES
from benefit_portal.backend.core.security import hash_password
from benefit_portal.backend.core.seed import seed_database
from benefit_portal.backend.core.storage import Storage
from benefit_portal.backend.core.utils.config import PortalSettings, get_settings
from benefit_portal.backend.core.utils.logging_setup import setup_logging

console = Console()
logger = logging.getLogger(__name__)


def print_banner():
    """Print the project banner."""
    banner = """
╔══════════════════════════════════════════════════════════════╗
║     Benefit Eligibility Portal                               ║
║     Applicant intake · income-limit checks · review queue    ║
╚══════════════════════════════════════════════════════════════╝
    """
    console.print(banner, style="bold blue")


@contextmanager
def _open_storage(settings: PortalSettings):
    """One-off transaction for a CLI command; the engine is disposed afterwards."""
    engine = build_engine(settings.database.url, echo=settings.database.echo)
    try:
        init_db(engine)
        with session_scope(build_session_factory(engine)) as session:
            yield session
    finally:
        engine.dispose()


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    default=None,
    help="Path to configuration file (default: $PORTAL_CONFIG or configs/default_config.yaml).",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable verbose output.")
@click.option("--debug", is_flag=True, default=False, help="Enable debug mode with additional logging.")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool, debug: bool):
    """Run and maintain the benefit eligibility portal."""
    log_level = logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)
    setup_logging(log_level)

    try:
        settings = get_settings(config)
    except FileNotFoundError as e:
        console.print(f"\n[bold red]Configuration error:[/bold red] {e}")
        raise SystemExit(1) from e

    ctx.obj = {"settings": settings, "config_path": config, "debug": debug}


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", "-p", default=8000, type=int, show_default=True, help="Port to listen on.")
@click.option("--reload", is_flag=True, default=False, help="Reload on code changes.")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, reload: bool):
    """Serve the HTTP API."""
    import uvicorn

    print_banner()
    if reload:
        # The reloader re-imports the app by path; it only sees $PORTAL_CONFIG.
        if ctx.obj["config_path"]:
            os.environ["PORTAL_CONFIG"] = str(Path(ctx.obj["config_path"]).resolve())
        uvicorn.run("benefit_portal.backend.api.app:app", host=host, port=port, reload=True)
    else:
        from benefit_portal.backend.api.app import create_app

        uvicorn.run(create_app(ctx.obj["settings"]), host=host, port=port)


@cli.command()
@click.pass_context
def seed(ctx: click.Context):
    """Create the admin account and example program if missing."""
    settings: PortalSettings = ctx.obj["settings"]
    with _open_storage(settings) as session:
        created = seed_database(Storage(session), settings.seed)

    if not any(created.values()):
        console.print("[yellow]Nothing to seed – database already initialised.[/yellow]")
        return
    if created["admin"]:
        console.print(f"[green]Created admin user[/green] {settings.seed.admin_email}")
    if created["program"]:
        console.print("[green]Created example program with income limits[/green]")


@cli.command("create-user")
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option(
    "--role",
    type=click.Choice(list(USER_ROLES)),
    default="Reviewer",
    show_default=True,
)
@click.pass_context
def create_user(ctx: click.Context, email: str, password: str, role: str):
    """Add a reviewer or admin account."""
    settings: PortalSettings = ctx.obj["settings"]
    try:
        with _open_storage(settings) as session:
            user = Storage(session).create_user(email, hash_password(password), role=role)
            user_id = user.id
    except PortalError as e:
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        raise SystemExit(1) from e

    console.print(f"[green]Created {role}[/green] {email} (id {user_id})")


@cli.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default="outputs/applications.csv",
    show_default=True,
    help="CSV file to write.",
)
@click.option("--status", type=click.Choice(list(APPLICATION_STATUSES)), default=None)
@click.option("--program-id", type=int, default=None)
@click.option("--search", default=None, help="Case-insensitive applicant name filter.")
@click.pass_context
def export(ctx: click.Context, output: str, status: str | None, program_id: int | None, search: str | None):
    """Export applications to CSV."""
    settings: PortalSettings = ctx.obj["settings"]
    try:
        with _open_storage(settings) as session:
            apps = Storage(session).list_applications(
                status=status, program_id=program_id, search=search
            )
            n_rows = export_applications_csv(apps, Path(output))
            by_status: dict[str, int] = {}
            for a in apps:
                by_status[a.status] = by_status.get(a.status, 0) + 1
    except Exception as e:
        console.print(f"\n[bold red]Export error:[/bold red] {e}")
        logger.exception("Export failed")
        if ctx.obj["debug"]:
            raise
        raise SystemExit(1) from e

    table = Table(title=f"Exported {n_rows} applications → {output}")
    table.add_column("Status")
    table.add_column("Count", justify="right")
    for name, count in sorted(by_status.items()):
        table.add_row(name, str(count))
    console.print(table)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
