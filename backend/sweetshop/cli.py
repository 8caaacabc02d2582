# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/sweetshop/cli.py
# Commands Legend (run from the backend directory, FLASK_APP=wsgi.py):
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables (idempotent). Use "flask db upgrade" for migrated deployments.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system purge-sessions
#   Delete expired session tokens.
#
# Users:
# - python -m flask users list
# - python -m flask users create --username admin --email admin@shop.local --password "password123"
#
# Inventory:
# - python -m flask inventory low-stock
#   Print items at or below their reorder point.

import click
from flask.cli import with_appcontext
from sqlalchemy import select

from .extensions import db
from .models import User
from .services import inventory_service, session_service
from .services.auth_service import create_user
from .validation import ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create every table that does not exist yet."""
    db.create_all()
    click.echo("OK Database tables created")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    db.drop_all()
    db.create_all()
    click.echo("OK Database reset")


@system_group.command('purge-sessions')
@with_appcontext
def purge_sessions():
    removed = session_service.purge_expired_sessions()
    click.echo(f"OK Removed {removed} expired session(s)")


@click.group('users')
def users_group():
    """User inspection and bootstrap."""


@users_group.command('list')
@with_appcontext
def list_users():
    users = db.session.execute(select(User).order_by(User.id)).scalars().all()
    if not users:
        click.echo("No users found")
        return
    for u in users:
        status = "active" if u.is_active else "inactive"
        click.echo(f"{u.id:>4}  {u.username:<20} {u.email:<32} {status}")


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password (min 8 characters)')
@with_appcontext
def create_user_cli(username, email, password):
    try:
        user = create_user(username=username, email=email, password=password)
    except ValidationError as e:
        db.session.rollback()
        raise click.ClickException(str(e))
    click.echo(f"OK Created user {user.username} (id={user.id})")


@click.group('inventory')
def inventory_group():
    """Stock inspection."""


@inventory_group.command('low-stock')
@with_appcontext
def low_stock():
    items = inventory_service.list_low_stock()
    if not items:
        click.echo("All items are in stock")
        return
    for item in items:
        click.echo(
            f"{item['id']:>4}  {item['name']:<28} {item['quantity']:>10g} {item['unit']:<6} "
            f"(min {item['min_stock']:g})  {item['status']}"
        )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(inventory_group)
