"""
Custom Flask CLI commands.

These commands are registered with the app in the application
factory. Run them with ``flask <command_name>``.

Usage::

    flask db-check       # Verify database connectivity and tables
    flask init-db        # Create any missing tables
    flask create-admin   # Bootstrap an admin account
"""

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import inspect

from logistics.extensions import db

EXPECTED_TABLES = ("parcel", "worker", "admin")


@click.command("db-check")
@with_appcontext
def db_check_command():
    """
    Verify database connectivity and confirm expected tables exist.

    Runs a simple query against the configured database and lists the
    application tables it finds. Useful for confirming that
    DATABASE_URL is correct and migrations have been applied.
    """
    click.echo("=" * 60)
    click.echo("  Logistics Tracker: Database Connectivity Check")
    click.echo("=" * 60)

    # Show the connection URL with any password masked.
    db_url = db.engine.url.render_as_string(hide_password=True)
    click.echo(f"\n  Connection string: {db_url}\n")

    # -- Step 1: Basic connectivity ----------------------------------------
    click.echo("[1/2] Testing connection...")
    try:
        row = db.session.execute(db.text("SELECT 1 AS connected")).fetchone()
        if row and row[0] == 1:
            click.secho("      ✓ Connected successfully.", fg="green")
        else:
            click.secho("      ✗ Unexpected result from test query.", fg="red")
            return
    except Exception as exc:  # pylint: disable=broad-exception-caught
        click.secho(f"      ✗ Connection failed: {exc}", fg="red")
        click.echo("\n  Troubleshooting tips:")
        click.echo("    - Is the database server running?")
        click.echo("    - Does your .env DATABASE_URL match your server config?")
        return

    # -- Step 2: Tables ----------------------------------------------------
    click.echo("[2/2] Checking tables...\n")
    found = set(inspect(db.engine).get_table_names())
    missing = [name for name in EXPECTED_TABLES if name not in found]
    for name in EXPECTED_TABLES:
        mark = "✗ missing" if name in missing else "✓"
        click.echo(f"      {name:>8}  {mark}")

    if missing:
        click.secho(
            "\n  Some tables are missing. Run `flask db upgrade` or `flask init-db`.",
            fg="yellow",
        )
        return

    click.echo("\n" + "=" * 60)
    click.secho("  All checks passed. Database is ready.", fg="green", bold=True)
    click.echo("=" * 60)


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Create all tables that do not exist yet."""
    from logistics import models  # noqa: F401  pylint: disable=import-outside-toplevel,unused-import

    db.create_all()
    click.secho("Database tables created.", fg="green")


@click.command("create-admin")
@click.option("--first-name", prompt=True)
@click.option("--second-name", prompt=True)
@click.option("--email", prompt=True)
@click.password_option()
@with_appcontext
def create_admin_command(first_name, second_name, email, password):
    """Create an admin account from the terminal."""
    from logistics.services import account_service  # pylint: disable=import-outside-toplevel

    # No request is waiting on this; send the welcome email inline.
    current_app.config["MAIL_ASYNC"] = False
    try:
        admin = account_service.register_admin(
            first_name=first_name,
            second_name=second_name,
            email=email,
            password=password,
        )
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    click.secho(f"Admin {admin.email} created with ID {admin.admin_code}.", fg="green")


def register_commands(app):
    """Register all custom CLI commands with the Flask application."""
    app.cli.add_command(db_check_command)
    app.cli.add_command(init_db_command)
    app.cli.add_command(create_admin_command)
