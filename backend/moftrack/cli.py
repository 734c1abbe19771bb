# Overview: Flask CLI command groups for bootstrap, data entry, and MOF inspection.

# backend/moftrack/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables and the default admin, picker and requester users.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - python -m flask users list
# - python -m flask users create --username picker2 --email picker2@moftrack.local --full-name "Second Picker" --role Picking
#
# Items:
# - python -m flask items create --part-number PN-1 --supplier Acme --serial-number SN-0001
#
# MOFs:
# - python -m flask mofs list [--status Pending]
# - python -m flask mofs create --part-number PN-1 --quantity 2 --expected 2026-03-01 --requester "Jane" --department Ops --project P1 --created-by 1
# - python -m flask mofs progress MOF-20260301120000-ABC123
# - python -m flask mofs scan MOF-... SN-0001 --picked-by 2
# - python -m flask mofs verify MOF-... SN-0001 --verified-by 3

import click
from flask.cli import with_appcontext

from .errors import MofTrackError
from .extensions import db
from .models import User
from .services import lifecycle_service, progress_service, scan_service, verification_service
from .services.status_resolver import MOF_STATUSES
from .validation import ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the MOF tracker: schema plus one user per role.

    Creates:
    - All tables (if missing)
    - Users: admin (Admin), picker (Picking), requester (Requester)
    """
    click.echo("START Initializing MOF tracker...")

    db.create_all()
    click.echo("PASS Tables ready")

    click.echo("\nUSERS Creating default users...")

    default_users = [
        ("admin", "admin@moftrack.local", "Administrator", lifecycle_service.ROLE_ADMIN),
        ("picker", "picker@moftrack.local", "Default Picker", lifecycle_service.ROLE_PICKING),
        ("requester", "requester@moftrack.local", "Default Requester", lifecycle_service.ROLE_REQUESTER),
    ]

    for username, email, full_name, role in default_users:
        existing = db.session.query(User).filter_by(username=username).first()
        if existing:
            click.echo(f"WARN  User '{username}' already exists, skipping...")
            continue

        try:
            user = lifecycle_service.create_user(username, email, full_name, role)
        except MofTrackError as e:
            click.echo(f"FAIL Failed to create user '{username}': {e}")
            continue

        click.echo(f"PASS Created user: {username} (ID: {user.id}) with role '{role}'")

    click.echo("\n" + "="*60)
    click.echo("DONE MOF tracker initialized")
    click.echo("="*60 + "\n")


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
    """User management commands."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--email', prompt=True, help='Email address')
@click.option('--full-name', prompt=True, help='Full name')
@click.option('--role', type=click.Choice(list(lifecycle_service.VALID_ROLES)), prompt=True, help='Role')
@with_appcontext
def create_user_cli(username, email, full_name, role):
    """Create a user."""
    try:
        user = lifecycle_service.create_user(username, email, full_name, role)
    except (MofTrackError, ValidationError) as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created user: {user.username} (ID: {user.id}) with role '{user.role}'")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users."""
    users = lifecycle_service.get_all_users()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Username':<20} {'Email':<30} {'Role':<10} {'Name'}")
    click.echo("="*90)

    for user in users:
        click.echo(f"{user.id:<5} {user.username:<20} {user.email:<30} {user.role:<10} {user.full_name}")

    click.echo("="*90 + "\n")


@click.group('items')
def items_group():
    """Serialized item commands."""


@items_group.command('create')
@click.option('--part-number', required=True, help='Part number')
@click.option('--supplier', required=True, help='Supplier name')
@click.option('--serial-number', required=True, help='Unique item serial number')
@with_appcontext
def create_item_cli(part_number, supplier, serial_number):
    """Register a serialized item."""
    try:
        item = lifecycle_service.create_item(part_number, supplier, serial_number)
    except MofTrackError as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created item {item.serial_number} (ID: {item.id}, part {item.part_number})")


@click.group('mofs')
def mofs_group():
    """MOF commands."""


@mofs_group.command('create')
@click.option('--part-number', required=True, help='Part number requested')
@click.option('--quantity', type=int, required=True, help='Quantity requested')
@click.option('--expected', type=click.DateTime(formats=["%Y-%m-%d"]), required=True,
              help='Expected receiving date (YYYY-MM-DD)')
@click.option('--requester', required=True, help='Requester name')
@click.option('--department', required=True, help='Department')
@click.option('--project', required=True, help='Project')
@click.option('--created-by', type=int, required=True, help='User ID of the creator')
@with_appcontext
def create_mof_cli(part_number, quantity, expected, requester, department, project, created_by):
    """Create a MOF; the serial number is generated."""
    try:
        mof = lifecycle_service.create_mof(
            part_number, quantity, expected, requester, department, project, created_by,
        )
    except (MofTrackError, ValidationError) as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created MOF {mof.serial_number} (ID: {mof.id}) for {quantity} x {part_number}")


@mofs_group.command('list')
@click.option('--status', type=click.Choice(list(MOF_STATUSES)), help='Filter by status')
@with_appcontext
def list_mofs(status):
    """List MOFs, newest first."""
    mofs = lifecycle_service.get_all_mofs()
    if status:
        mofs = [m for m in mofs if m.status == status]

    if not mofs:
        click.echo("No MOFs found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<5} {'Serial':<32} {'Part':<16} {'Qty':<5} {'Status':<16} {'Requester'}")
    click.echo("="*100)

    for mof in mofs:
        click.echo(
            f"{mof.id:<5} {mof.serial_number:<32} {mof.part_number:<16} "
            f"{mof.quantity_requested:<5} {mof.status:<16} {mof.requester_name}"
        )

    click.echo("="*100 + "\n")

    summary = progress_service.get_status_summary()
    click.echo("  ".join(f"{k}: {v}" for k, v in summary.items()))


@mofs_group.command('progress')
@click.argument('serial_number')
@with_appcontext
def mof_progress(serial_number):
    """Show pick/verify progress of one MOF."""
    mof = lifecycle_service.get_mof_by_serial(serial_number)
    if mof is None:
        raise click.ClickException(f"MOF with serial number {serial_number} not found")

    progress = progress_service.get_mof_progress(mof.id)

    click.echo(f"\nMOF {mof.serial_number} [{mof.status}]")
    click.echo(f"  Requested: {progress.quantity_requested}")
    click.echo(f"  Picked:    {progress.quantity_picked}")
    click.echo(f"  Verified:  {progress.quantity_verified}")

    for item in progress.items_picked:
        mark = "verified" if item.verified_by_requester else "picked"
        click.echo(f"    - {item.serial_number} ({mark})")
    click.echo("")


@mofs_group.command('scan')
@click.argument('mof_serial_number')
@click.argument('item_serial_number')
@click.option('--picked-by', type=int, required=True, help='User ID of the picker')
@with_appcontext
def scan_cli(mof_serial_number, item_serial_number, picked_by):
    """Record a picker scan."""
    try:
        item = scan_service.scan_item(mof_serial_number, item_serial_number, picked_by)
    except MofTrackError as e:
        raise click.ClickException(str(e))

    mof = lifecycle_service.get_mof_by_serial(mof_serial_number)
    click.echo(f"PASS Item {item.serial_number} picked. MOF {mof.serial_number} is now '{mof.status}'")


@mofs_group.command('verify')
@click.argument('mof_serial_number')
@click.argument('item_serial_number')
@click.option('--verified-by', type=int, required=True, help='User ID of the requester')
@with_appcontext
def verify_cli(mof_serial_number, item_serial_number, verified_by):
    """Record a requester verification."""
    try:
        item = verification_service.verify_item(mof_serial_number, item_serial_number, verified_by)
    except MofTrackError as e:
        raise click.ClickException(str(e))

    mof = lifecycle_service.get_mof_by_serial(mof_serial_number)
    click.echo(f"PASS Item {item.serial_number} verified. MOF {mof.serial_number} is now '{mof.status}'")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(items_group)
    app.cli.add_command(mofs_group)
