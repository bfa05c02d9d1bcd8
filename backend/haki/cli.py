# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/haki/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (use `flask db upgrade` for migrated deployments).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users create --name "Admin" --email admin@haki.local --password "secret1" --role Admin
#   Create a pre-verified back-office user (prompts if options are omitted).
# - python -m flask users list [--role Staff]
#   List back-office users with role, brand and approval status.
#
# Maintenance:
# - python -m flask maintenance purge-otps
#   Delete expired one-time codes.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .permissions import ALL_ROLES
from .services.auth_service import create_user
from .services import otp_service
from .validation import ValidationError, ConflictError


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

    click.echo("PASS Database reset complete. Run 'python -m flask users create' to add an admin.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(ALL_ROLES)), prompt=True, help='Role')
@with_appcontext
def create_user_cli(name, email, password, role):
    """Create a back-office user with a verified email (no OTP round trip)."""
    try:
        user = create_user(name=name, email=email, password=password, role=role)
    except (ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created user: {user.email} with role '{user.role}' (ID: {user.id})")
    click.echo("SECURITY Password securely hashed with bcrypt")


@users_group.command('list')
@click.option('--role', type=click.Choice(list(ALL_ROLES)), help='Filter by role')
@with_appcontext
def list_users(role):
    """List back-office users."""
    query = db.session.query(User).order_by(User.id)
    if role:
        query = query.filter(User.role == role)
    users = query.all()

    if not users:
        click.echo("No users found.")
        return

    click.echo(f"{'ID':<5} {'Email':<32} {'Role':<17} {'Brand':<6} {'Approval':<9} Verified")
    click.echo("-" * 80)
    for user in users:
        click.echo(
            f"{user.id:<5} {user.email:<32} {user.role:<17} "
            f"{str(user.brand_id or '-'):<6} {str(user.approval_status or '-'):<9} "
            f"{'yes' if user.is_email_verified else 'no'}"
        )


@click.group('maintenance')
def maintenance_group():
    """Housekeeping commands."""


@maintenance_group.command('purge-otps')
@with_appcontext
def purge_otps():
    """Delete expired one-time codes."""
    removed = otp_service.purge_expired()
    click.echo(f"PASS Removed {removed} expired OTP code(s).")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(maintenance_group)
