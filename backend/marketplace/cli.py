# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/marketplace/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - python -m flask users list [--role producer]
#   List relational accounts with role and certificates.
# - python -m flask users create --email grower@example.com --name "Green Farm" --password secret1 --role producer
#   Create an account (prompts if options are omitted).
# - python -m flask users certify 3 globalGap GG-1234 2026-12-31
#   Create or replace a producer certificate.
# - python -m flask users delete 3 --yes
#   Delete an account with its certificates, grants and offers.
#
# Products:
# - python -m flask products create --name "Cherry Tomatoes" --category vegetables --unit kg --box-size "5kg"
#   Create a catalog product (id is the name slug).
# - python -m flask products grant 3 cherry-tomatoes
#   Authorize a producer to offer a product.
#
# Alerts:
# - python -m flask alerts check-certificates [--source relational] [--today 2026-10-01]
#   Create expiry alerts for every producer's certificates.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .models.users import CERTIFICATE_TYPES, ROLE_PRODUCER, VALID_ROLES
from .services import alerts_service, products_service, users_service
from .validation import ValidationError
from .time_utils import parse_iso_date


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


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
@click.option('--email', prompt=True, help='Email address')
@click.option('--name', prompt=True, help='Display name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(sorted(VALID_ROLES)), default=ROLE_PRODUCER, show_default=True)
@click.option('--company', 'company_name', default=None, help='Company name')
@with_appcontext
def create_user_cli(email, name, password, role, company_name):
    """Create a new account. Password must be at least 6 characters."""
    try:
        user = users_service.create_user(email, password, name, role=role, company_name=company_name)
    except ValueError as e:
        # ValidationError and ConflictError
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Created {user.role} {user.email} (ID: {user.id})")


@users_group.command('list')
@click.option('--role', type=click.Choice(sorted(VALID_ROLES)), default=None, help='Filter by role')
@with_appcontext
def list_users(role):
    """List all accounts with their certificates."""
    query = db.session.query(User)
    if role:
        query = query.filter_by(role=role)
    users = query.order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 100)
    click.echo(f"{'ID':<5} {'Role':<12} {'Email':<30} {'Company':<25} {'Certificates'}")
    click.echo("=" * 100)

    for user in users:
        certs = ", ".join(
            f"{c.type} until {c.valid_until.isoformat()}" for c in user.certifications
        ) or "none"
        click.echo(f"{user.id:<5} {user.role:<12} {user.email:<30} {(user.company_name or '-'):<25} {certs}")

    click.echo("=" * 100 + "\n")


@users_group.command('certify')
@click.argument('user_id', type=int)
@click.argument('cert_type', type=click.Choice(CERTIFICATE_TYPES))
@click.argument('number')
@click.argument('valid_until')
@with_appcontext
def certify_user(user_id, cert_type, number, valid_until):
    """Create or replace a certificate on an account."""
    if not db.session.get(User, user_id):
        click.echo(f"FAIL User ID {user_id} not found")
        return
    try:
        cert = users_service.set_certification(user_id, cert_type, number, valid_until)
    except ValidationError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS {cert_type} {cert.number} valid until {cert.valid_until.isoformat()}")


@users_group.command('delete')
@click.argument('user_id', type=int)
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def delete_user_cli(user_id, yes):
    """Delete an account along with its certificates, grants and offers."""
    if not yes:
        click.confirm(f"WARN This will DELETE user {user_id} and their offers. Are you sure?", abort=True)

    if not users_service.delete_user(user_id):
        click.echo(f"FAIL User ID {user_id} not found")
        return
    click.echo(f"PASS Deleted user {user_id}")


@click.group('products')
def products_group():
    """Product catalog commands."""


@products_group.command('create')
@click.option('--name', prompt=True, help='Product name')
@click.option('--category', prompt=True, help='Category (e.g. vegetables)')
@click.option('--unit', prompt=True, help='Unit (e.g. kg)')
@click.option('--box-size', default=None, help='Box size (e.g. 5kg)')
@click.option('--variety', 'varieties', multiple=True, help='Variety name (repeatable)')
@with_appcontext
def create_product_cli(name, category, unit, box_size, varieties):
    try:
        product = products_service.create_product(name, category, unit, box_size, list(varieties))
    except ValueError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Created product {product.id}")


@products_group.command('grant')
@click.argument('user_id', type=int)
@click.argument('product_id')
@with_appcontext
def grant_product_cli(user_id, product_id):
    """Authorize a producer account to offer a product."""
    if products_service.grant_product(user_id, product_id):
        click.echo(f"PASS Granted {product_id} to user {user_id}")
    else:
        click.echo(f"SKIP User {user_id} already has {product_id}")


@click.group('alerts')
def alerts_group():
    """Alert maintenance commands."""


@alerts_group.command('check-certificates')
@click.option('--source', type=click.Choice(['documents', 'relational']), default='documents', show_default=True)
@click.option('--today', default=None, help='Check as of this date (YYYY-MM-DD)')
@with_appcontext
def check_certificates_cli(source, today):
    """Create expiry alerts for every producer's certificates."""
    as_of = None
    if today:
        as_of = parse_iso_date(today)
        if as_of is None:
            raise click.BadParameter("must be YYYY-MM-DD", param_hint="--today")

    if source == 'relational':
        users = db.session.query(User).filter_by(role=ROLE_PRODUCER).all()
    else:
        users = users_service.list_user_profiles()

    result = alerts_service.check_all_certificates(users, today=as_of)
    status = "FAIL" if result.errors else "PASS"
    click.echo(f"{status} {result.message}")
    click.echo(f"Producers checked: {result.producers_checked}, alerts created: {result.total}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(products_group)
    app.cli.add_command(alerts_group)
