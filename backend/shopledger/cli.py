# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/shopledger/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (prefer `flask db upgrade` for real deployments).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Business (tenant) management:
# - python -m flask businesses list
# - python -m flask businesses create --name "Ada Retail" --email ops@ada.ng
#
# Store management:
# - python -m flask stores list --business-id 1
# - python -m flask stores create --business-id 1 --name "Lagos Main" --code LAG
#
# Reports:
# - python -m flask reports profit-loss --store-id 1

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Customer, Staff, InventoryItem
from .services import business_service, profit_loss_service, reporting_service, store_service
from .services.counter_service import peek_next_customer_number
from .validation import ConflictError, NotFoundError, ValidationError


def _money(cents: int) -> str:
    return f"{cents / 100:,.2f}"


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created.")


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


@click.group('businesses')
def businesses_group():
    """Business (tenant) management commands."""


@businesses_group.command('list')
@with_appcontext
def list_businesses():
    """List all businesses."""
    businesses = business_service.list_businesses()

    if not businesses:
        click.echo("No businesses found.")
        return

    click.echo("\n" + "=" * 70)
    click.echo(f"{'ID':<5} {'Name':<35} {'Email':<22} {'Stores'}")
    click.echo("=" * 70)
    for business in businesses:
        store_count = len(store_service.list_stores(business.id))
        click.echo(f"{business.id:<5} {business.name:<35} {business.email or '-':<22} {store_count}")
    click.echo("=" * 70 + "\n")


@businesses_group.command('create')
@click.option('--name', required=True, help='Business name')
@click.option('--email', help='Contact email')
@click.option('--phone', help='Contact phone')
@with_appcontext
def create_business_cli(name, email, phone):
    """Create a new business (tenant)."""
    payload = {"name": name}
    if email:
        payload["email"] = email
    if phone:
        payload["phone"] = phone
    try:
        business = business_service.create_business(payload)
    except ValidationError as exc:
        click.echo(f"FAIL {exc}")
        return
    click.echo(f"PASS Created business: {business.name} (ID: {business.id})")


@click.group('stores')
def stores_group():
    """Store management commands."""


@stores_group.command('list')
@click.option('--business-id', type=int, required=True, help='Business ID')
@with_appcontext
def list_stores(business_id):
    """List the stores of a business."""
    stores = store_service.list_stores(business_id)
    if not stores:
        click.echo("No stores found.")
        return

    click.echo("\n" + "=" * 90)
    click.echo(f"{'ID':<5} {'Name':<28} {'Code':<8} {'Active':<8} {'Customers':<10} {'Staff':<7} {'Items':<7} {'Next #'}")
    click.echo("=" * 90)
    for store in stores:
        customers = db.session.query(Customer).filter_by(store_id=store.id).count()
        staff = db.session.query(Staff).filter_by(store_id=store.id).count()
        items = db.session.query(InventoryItem).filter_by(store_id=store.id).count()
        active_str = "Yes" if store.is_active else "No"
        click.echo(
            f"{store.id:<5} {store.name:<28} {store.code:<8} {active_str:<8} "
            f"{customers:<10} {staff:<7} {items:<7} {peek_next_customer_number(store.id)}"
        )
    click.echo("=" * 90 + "\n")


@stores_group.command('create')
@click.option('--business-id', type=int, required=True, help='Business ID')
@click.option('--name', required=True, help='Store name')
@click.option('--code', required=True, help='Store code (unique within business)')
@with_appcontext
def create_store_cli(business_id, name, code):
    """Add a store to a business."""
    try:
        store = store_service.create_store(business_id, {"name": name, "code": code})
    except (ValidationError, ConflictError, NotFoundError) as exc:
        click.echo(f"FAIL {exc}")
        return
    click.echo(f"PASS Created store: {store.name} [{store.code}] (ID: {store.id})")


@click.group('reports')
def reports_group():
    """Reporting commands."""


@reports_group.command('profit-loss')
@click.option('--store-id', type=int, required=True, help='Store ID')
@with_appcontext
def profit_loss_report(store_id):
    """Print per-item profit/loss totals for a store."""
    rows = profit_loss_service.list_profit_loss(store_id)
    if not rows:
        click.echo("No sales recorded for this store.")
        return

    click.echo("\n" + "=" * 80)
    click.echo(f"{'Item':<30} {'Type':<8} {'Sold':>6} {'Left':>6} {'Revenue':>13} {'Profit':>13}")
    click.echo("=" * 80)
    for row in rows:
        item = row.inventory_item
        click.echo(
            f"{item.name:<30} {item.type:<8} {row.total_quantity_sold:>6} {row.quantity_remaining:>6} "
            f"{_money(row.total_revenue_cents):>13} {_money(row.total_net_profit_cents):>13}"
        )
    click.echo("=" * 80)

    totals = reporting_service.order_totals(store_id)
    click.echo(
        f"Orders: {totals['units_sold']} units, revenue {_money(totals['revenue_cents'])}, "
        f"profit {_money(totals['net_profit_cents'])}\n"
    )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(businesses_group)
    app.cli.add_command(stores_group)
    app.cli.add_command(reports_group)
