# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/stockmaster/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users.
# - python -m flask users create --name "Ada" --email ada@example.com --password "secret1" --company "Acme"
#   Create a user (prompts if options are omitted).
#
# Inventory inspection:
# - python -m flask inventory low-stock [--limit 10]
#   Print products at or below their minimum stock level.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .services import auth_service, dashboard_service
from .validation import ConflictError, ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables are in place.")


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

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--company', default='', help='Company name')
@with_appcontext
def create_user_cli(name, email, password, company):
    """Create a user account with default settings."""
    try:
        user = auth_service.register_user(
            name=name,
            email=email,
            password=password,
            company_name=company,
        )
    except (ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created user: {user.name} ({user.email}) ID: {user.id}")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users."""
    users = db.session.query(User).order_by(User.id.asc()).all()
    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Name':<25} {'Email':<35} {'Company'}")
    click.echo("="*80)
    for user in users:
        click.echo(f"{user.id:<5} {user.name:<25} {user.email:<35} {user.company_name or '-'}")
    click.echo("="*80 + "\n")


@click.group('inventory')
def inventory_group():
    """Inventory inspection commands."""


@inventory_group.command('low-stock')
@click.option('--limit', type=int, default=10, show_default=True, help='Maximum rows')
@with_appcontext
def low_stock(limit):
    """Print products at or below their minimum stock level."""
    products = dashboard_service.low_stock_products(limit=limit)
    if not products:
        click.echo("PASS No low-stock products.")
        return

    click.echo(f"{'ID':<5} {'SKU':<20} {'Name':<30} {'Stock':>8} {'Min':>8}")
    for p in products:
        click.echo(
            f"{p['id']:<5} {p['sku']:<20} {p['name']:<30} "
            f"{p['stock']!s:>8} {p['min_stock']!s:>8}"
        )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(inventory_group)
