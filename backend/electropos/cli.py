# Overview: Flask CLI command groups for backup, maintenance and user bootstrap.

# backend/electropos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - The REST data store must be reachable at DATA_STORE_URL.
# - Use: python -m flask <group> <command> [options]
#
# Shop data:
# - python -m flask shop export [--output backup.json]
#   Write a full backup document (stdout when --output is omitted).
# - python -m flask shop import backup.json --yes
#   Overwrite every collection with the backup document.
# - python -m flask shop reset --yes
#   Factory reset: delete every record of every collection.
# - python -m flask shop balances
#   Print what the shop owes each supplier.
#
# Users:
# - python -m flask users list
#   List users with role and screen permissions.
# - python -m flask users create --username cashier1 --password "Passw0rd!" --role CASHIER
#   Create a user (prompts if options are omitted).

import json

import click
from flask.cli import with_appcontext

from .data_store import DataStoreError
from .extensions import get_data_store
from .models.auth import ROLES
from .services import backup_service, supplier_service, user_service
from .services.backup_service import BackupError
from .services.user_service import PasswordValidationError
from .validation import ConflictError, ValidationError


@click.group('shop')
def shop_group():
    """Shop data backup and maintenance commands."""


@shop_group.command('export')
@click.option('--output', type=click.Path(dir_okay=False, writable=True), help='File to write')
@with_appcontext
def export_cmd(output):
    """Export every collection plus settings as one JSON document."""
    try:
        document = backup_service.export_backup(get_data_store())
    except DataStoreError as e:
        raise click.ClickException(f"Export failed: {e}")

    text = json.dumps(document, indent=2)
    if output:
        with open(output, 'w', encoding='utf-8') as fh:
            fh.write(text)
        counts = ", ".join(f"{name}={len(document[name])}" for name in backup_service.BACKUP_COLLECTIONS)
        click.echo(f"OK Backup written to {output} ({counts})")
    else:
        click.echo(text)


@shop_group.command('import')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--yes', is_flag=True, help='Confirm overwriting all data')
@with_appcontext
def import_cmd(path, yes):
    """Overwrite every collection with a backup document."""
    if not yes:
        raise click.ClickException("Refusing to overwrite data without --yes")
    try:
        with open(path, encoding='utf-8') as fh:
            document = json.load(fh)
        restored = backup_service.import_backup(get_data_store(), document)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path} is not valid JSON: {e}")
    except BackupError as e:
        raise click.ClickException(f"Invalid backup: {e}")
    except DataStoreError as e:
        raise click.ClickException(f"Import stopped part-way, data is partially restored: {e}")

    for name, count in restored.items():
        click.echo(f"  {name:<16} {count}")
    click.echo("OK Backup restored")


@shop_group.command('reset')
@click.option('--yes', is_flag=True, help='Confirm deleting all data')
@with_appcontext
def reset_cmd(yes):
    """Factory reset: delete every record of every collection."""
    if not yes:
        raise click.ClickException("Refusing to delete data without --yes")
    try:
        removed = backup_service.factory_reset(get_data_store())
    except DataStoreError as e:
        raise click.ClickException(f"Reset stopped part-way: {e}")
    click.echo(f"OK Removed {sum(removed.values())} records")


@shop_group.command('balances')
@with_appcontext
def balances_cmd():
    """Print the running balance owed to each supplier."""
    store = get_data_store()
    suppliers = supplier_service.list_suppliers(store)
    if not suppliers:
        click.echo("No suppliers found.")
        return

    click.echo("\n" + "="*60)
    click.echo(f"{'Supplier':<40} {'Balance':>18}")
    click.echo("="*60)
    balances = supplier_service.supplier_balances(store)
    for supplier in suppliers:
        balance = balances[supplier.id]
        click.echo(f"{supplier.name:<40} {balance:>18,.2f}")
    click.echo("="*60)
    click.echo(f"{'Total payable (open bills)':<40} {supplier_service.total_payable(store):>18,.2f}\n")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their role and screens."""
    users = user_service.list_users(get_data_store())
    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'Username':<20} {'Name':<25} {'Role':<12} {'Permissions'}")
    click.echo("="*90)
    for user in users:
        click.echo(f"{user.username:<20} {user.name:<25} {user.role:<12} {', '.join(user.permissions) or 'none'}")
    click.echo("="*90 + "\n")


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--name', default='', help='Display name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(sorted(ROLES)), prompt=True, help='Role')
@click.option('--permission', 'permissions', multiple=True, help='Screen path (repeatable)')
@with_appcontext
def create_user_cli(username, name, password, role, permissions):
    """
    Create a new user.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character
    """
    try:
        user = user_service.add_user(
            get_data_store(),
            username=username,
            password=password,
            name=name,
            role=role,
            permissions=list(permissions) or None,
        )
    except PasswordValidationError as e:
        raise click.ClickException(f"Password validation failed: {e}")
    except (ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))
    except DataStoreError as e:
        raise click.ClickException(f"User not stored: {e}")

    click.echo(f"OK Created user {user.username} ({user.role}) with screens: {', '.join(user.permissions)}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(shop_group)
    app.cli.add_command(users_group)
