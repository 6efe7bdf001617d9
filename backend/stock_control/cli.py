# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/stock_control/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init [--password "Password123!"]
#   Idempotent bootstrap: creates tables (sql backend) and the demo users.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with role and active status.
# - python -m flask users create --email a@b.com --name "A B" --role dispatch --password "Password123!"
#   Create a user (prompts if options are omitted).
#
# Permission inspection:
# - python -m flask perms list
#   List every capability tag by category, with the roles that get it by default.
# - python -m flask perms check admin@fairfield.com reports
#   Check whether a user has a capability.

import click
from flask.cli import with_appcontext

from .errors import ConflictError, ValidationError
from .extensions import db, get_store
from .permissions import (
    DEFAULT_ROLE_PERMISSIONS,
    ROLES,
    PermissionCategory,
    capabilities_in,
    find_capability,
)
from .services import permission_service, user_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--password', default='Password123!', show_default=True, help='Password for seeded users')
@with_appcontext
def init_system(password):
    """
    Initialize the stock control system.

    Creates:
    - Database tables (sql backend)
    - Users: admin@, dispatch@, receiver@, viewer@fairfield.com
    - All passwords default to: "Password123!"

    SECURITY: Change passwords immediately in production!
    """
    click.echo("START Initializing stock control...")

    store = get_store()
    if store.backend == "sql":
        db.create_all()
        click.echo("PASS Database tables ready")

    try:
        created = user_service.ensure_demo_users(store, password)
    except ValidationError as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)

    for user in created:
        click.echo(f"PASS Created {user['role']:<10} {user['email']}")
    if not created:
        click.echo("SKIP Demo users already exist")

    click.echo("DONE System initialized")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with role and active status."""
    users = user_service.list_users(get_store())

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 90)
    click.echo(f"{'Email':<32} {'Name':<24} {'Role':<12} {'Active':<8} {'Permissions'}")
    click.echo("=" * 90)

    for user in users:
        perms = "ALL" if user["role"] == "admin" else ", ".join(user["permissions"])
        click.echo(
            f"{user['email']:<32} {user['name']:<24} {user['role']:<12} "
            f"{'yes' if user['active'] else 'no':<8} {perms}"
        )
    click.echo()


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--name', prompt=True, help='Display name')
@click.option('--role', type=click.Choice(ROLES), prompt=True, help='Role')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_user_cli(email, name, role, password):
    """
    Create a new user with the role's default permissions.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character
    """
    try:
        user = user_service.create_user(get_store(), {
            "email": email,
            "name": name,
            "role": role,
            "password": password,
        })
    except (ValidationError, ConflictError) as e:
        click.echo(f"FAIL Error: {e}")
        raise SystemExit(1)

    click.echo(f"PASS Created user {user['email']} ({user['role']})")


@click.group('perms')
def perms_group():
    """Capability inspection commands."""


@perms_group.command('list')
@with_appcontext
def list_permissions_cli():
    """List every capability tag and the roles that get it by default."""
    categories = (
        PermissionCategory.OVERVIEW,
        PermissionCategory.CATALOG,
        PermissionCategory.TRANSFERS,
        PermissionCategory.ADMINISTRATION,
    )
    for category in categories:
        click.echo(f"\n{category}")
        click.echo("-" * 80)
        for capability in capabilities_in(category):
            roles = [role for role in ROLES if capability.tag in DEFAULT_ROLE_PERMISSIONS.get(role, [])]
            click.echo(f"  {capability.tag:<16} {capability.name:<16} {', '.join(roles)}")
    click.echo()


@perms_group.command('check')
@click.argument('email')
@click.argument('tag')
@with_appcontext
def check_permission_cli(email, tag):
    """Check whether a user has a capability."""
    capability = find_capability(tag)
    if capability is None:
        click.echo(f"FAIL Unknown capability '{tag}'")
        raise SystemExit(1)

    user = get_store().users.get_by_email(email)
    if not user:
        click.echo(f"FAIL User '{email}' not found")
        raise SystemExit(1)

    if permission_service.has_capability(user, tag):
        click.echo(f"PASS {email} HAS '{tag}' ({capability.name})")
    else:
        click.echo(f"DENY {email} does NOT have '{tag}'")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
