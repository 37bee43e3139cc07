# Overview: Flask CLI command groups for bootstrap and account administration.

# backend/garments_tracker/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init
#   Create all tables (idempotent). Use `flask db upgrade` for migrated deployments.
#
# Account administration:
# - python -m flask users list [--role manager]
#   List accounts with role and status.
# - python -m flask users set-role ayesha@example.com admin
#   Change an account's role (user, manager, admin).
# - python -m flask users suspend ayesha@example.com --reason "Chargebacks" --feedback "Contact support"
#   Suspend an account; the reason/feedback is shown to the user on denied writes.
# - python -m flask users reinstate ayesha@example.com
#   Reactivate a suspended account and clear its suspension details.

import click
from flask.cli import with_appcontext

from .errors import APIError
from .extensions import db
from .models.accounts import VALID_ROLES, STATUS_ACTIVE, STATUS_SUSPENDED
from .services import account_service


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create all tables that do not exist yet."""
    click.echo("START Initializing garments tracker database...")
    db.create_all()
    tables = ", ".join(sorted(db.metadata.tables))
    click.echo(f"PASS Tables ready: {tables}")


@click.group('users')
def users_group():
    """Account inspection and administration commands."""


@users_group.command('list')
@click.option('--role', type=click.Choice(VALID_ROLES), help='Filter by role')
@with_appcontext
def list_users(role):
    """List all accounts with role and status."""
    accounts = account_service.list_accounts(role=role)

    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo(f"\n{'ID':<6} {'Email':<36} {'Role':<10} {'Status':<10}")
    click.echo("-" * 64)
    for account in accounts:
        click.echo(f"{account.id:<6} {account.email:<36} {account.role:<10} {account.status:<10}")


def _update_by_email(email, **changes):
    account = account_service.get_account_by_email(email)
    if account is None:
        raise click.ClickException(f"No account with email '{email}'")
    try:
        return account_service.update_account_role(account.id, **changes)
    except APIError as e:
        raise click.ClickException(e.message)


@users_group.command('set-role')
@click.argument('email')
@click.argument('role', type=click.Choice(VALID_ROLES))
@with_appcontext
def set_role(email, role):
    """Change an account's role."""
    account = _update_by_email(email, role=role)
    click.echo(f"PASS {account.email} is now '{account.role}'")


@users_group.command('suspend')
@click.argument('email')
@click.option('--reason', required=True, help='Why the account is suspended')
@click.option('--feedback', default=None, help='Message shown to the user')
@with_appcontext
def suspend_user(email, reason, feedback):
    """Suspend an account."""
    account = _update_by_email(
        email, status=STATUS_SUSPENDED, suspend_reason=reason, suspend_feedback=feedback
    )
    click.echo(f"PASS Suspended {account.email}: {account.suspend_reason}")


@users_group.command('reinstate')
@click.argument('email')
@with_appcontext
def reinstate_user(email):
    """Reactivate a suspended account."""
    account = _update_by_email(email, status=STATUS_ACTIVE)
    click.echo(f"PASS Reinstated {account.email}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
