# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/jewelcase/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init [--with-sample-data]
#   Idempotent: creates missing tables, optionally seeds a small demo catalog.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Reports:
# - python -m flask reports stats
#   Print the dashboard numbers.
# - python -m flask reports field-stock
#   Quantity of each product currently out in the field.
#
# Commissions:
# - python -m flask commissions quote 650000
#   Tiered rate and payout for a total in cents.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Product
from .services import commission_service, products_service, reporting_service
from .services.messaging_service import format_money
from .validation import ValidationError

SAMPLE_PRODUCTS = [
    {"name": "Gold Hoop Earring", "category": "earring", "price_cents": 8990},
    {"name": "Solitaire Ring", "category": "ring", "price_cents": 15900},
    {"name": "Silver Link Bracelet", "category": "bracelet", "price_cents": 12500},
    {"name": "Pearl Necklace", "category": "necklace", "price_cents": 21000},
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--with-sample-data', is_flag=True, help='Seed a small demo catalog when it is empty')
@with_appcontext
def init_system(with_sample_data):
    """
    Initialize the consignment database.

    Creates any missing tables. With --with-sample-data, seeds a handful of
    catalog products if the catalog is empty. Safe to run repeatedly.
    """
    click.echo("START Initializing database...")
    db.create_all()
    click.echo("PASS Tables ready")

    if with_sample_data:
        if db.session.query(Product).count():
            click.echo("WARN  Catalog is not empty, skipping sample data...")
        else:
            for patch in SAMPLE_PRODUCTS:
                products_service.create_product(db.session, patch=patch)
            click.echo(f"PASS Seeded {len(SAMPLE_PRODUCTS)} sample products")

    click.echo("DONE Initialized")


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


@click.group('reports')
def reports_group():
    """Read-only reports."""


@reports_group.command('stats')
@with_appcontext
def stats_command():
    """Print the dashboard numbers."""
    stats = reporting_service.dashboard_stats(db.session)

    click.echo(f"VGV:            {format_money(stats['vgv_cents'])}")
    click.echo(f"Active cases:   {stats['active_cases']}")
    click.echo(f"Premium cases:  {stats['premium_cases']}")
    click.echo(f"Agents:         {stats['total_agents']}")

    if stats["sales_by_agent"]:
        click.echo("\nSales by agent:")
        for row in stats["sales_by_agent"]:
            click.echo(f"  {row['name']:<30} {format_money(row['value_cents'])}")


@reports_group.command('field-stock')
@with_appcontext
def field_stock_command():
    """Quantity of each product currently out in the field."""
    rows = reporting_service.field_stock(db.session)["rows"]
    if not rows:
        click.echo("No products in the field")
        return

    for row in rows:
        product = db.session.get(Product, row["product_id"])
        name = product.name if product else f"#{row['product_id']}"
        click.echo(f"  {name:<30} {row['in_field_quantity']}")


@click.group('commissions')
def commissions_group():
    """Commission calculator."""


@commissions_group.command('quote')
@click.argument('total_cents', type=int)
def quote_command(total_cents):
    """Tiered rate and payout for TOTAL_CENTS."""
    try:
        quote = commission_service.calculate_commission(total_cents)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint='TOTAL_CENTS')

    click.echo(f"Total:   {format_money(quote.total_cents)}")
    click.echo(f"Rate:    {quote.rate_percent:g}%")
    click.echo(f"Payout:  {format_money(quote.payout_cents)}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(reports_group)
    app.cli.add_command(commissions_group)
