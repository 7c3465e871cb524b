# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/ppe_tracker/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: python -m flask --app wsgi <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask --app wsgi system init
#   Idempotent bootstrap: creates tables, default categories, and departments.
# - python -m flask --app wsgi system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask --app wsgi system hash-password
#   Print a bcrypt hash to use as ADMIN_PASSWORD_HASH.
#
# Item inspection:
# - python -m flask --app wsgi items list
#   List all items with stock and on-loan counts.
# - python -m flask --app wsgi items low-stock
#   List items at or below their reorder point.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Category, Department
from .services import catalog_service, dashboard_service
from .services.auth_service import hash_password
from .services.sequence_service import next_id


DEFAULT_CATEGORIES = [
    "Head protection",
    "Eye and face protection",
    "Hearing protection",
    "Respiratory protection",
    "Hand protection",
    "Foot protection",
    "Body protection",
    "Fall protection",
]

DEFAULT_DEPARTMENTS = [
    "Production",
    "Maintenance",
    "Warehouse",
    "Quality",
    "Safety",
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create tables and seed lookup data.

    Safe to run repeatedly: existing categories and departments are kept.
    """
    click.echo("START Initializing PPE tracker...")
    db.create_all()

    existing = {c.name for c in db.session.query(Category).all()}
    created = 0
    for name in DEFAULT_CATEGORIES:
        if name in existing:
            continue
        db.session.add(Category(id=next_id(Category.__tablename__), name=name))
        db.session.flush()
        created += 1
    db.session.commit()
    click.echo(f"PASS Categories: {created} created, {len(existing)} existing")

    existing = {d.name for d in db.session.query(Department).all()}
    created = 0
    for name in DEFAULT_DEPARTMENTS:
        if name in existing:
            continue
        db.session.add(Department(name=name))
        created += 1
    db.session.commit()
    click.echo(f"PASS Departments: {created} created, {len(existing)} existing")
    click.echo("DONE PPE tracker initialized.")


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

    click.echo("PASS Database reset complete. Run 'python -m flask --app wsgi system init' to initialize.")


@system_group.command('hash-password')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Admin password')
def hash_password_cli(password):
    """Print a bcrypt hash for ADMIN_PASSWORD_HASH."""
    click.echo(hash_password(password))


@click.group('items')
def items_group():
    """Item inspection commands."""


@items_group.command('list')
@with_appcontext
def list_items():
    """List all items."""
    items = catalog_service.list_items()
    if not items:
        click.echo("No items found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Code':<12} {'Name':<30} {'Stock':>7} {'On loan':>8} {'Reorder':>8}")
    click.echo("="*80)
    for item in items:
        click.echo(
            f"{item.id:<5} {item.code or '-':<12} {item.name[:30]:<30} "
            f"{item.stock:>7} {item.on_loan_quantity:>8} {item.reorder_point:>8}"
        )
    click.echo("="*80 + "\n")


@items_group.command('low-stock')
@with_appcontext
def low_stock():
    """List items at or below their reorder point."""
    items = [i.to_dict() for i in catalog_service.list_items()]
    low = dashboard_service.low_stock_items(items)
    if not low:
        click.echo("PASS No items at or below their reorder point.")
        return
    for item in low:
        click.echo(f"WARN {item['name']}: stock {item['stock']} (reorder point {item['reorderPoint']})")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(items_group)
