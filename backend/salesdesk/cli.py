# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP (PowerShell: $env:FLASK_APP="salesdesk"; bash: export FLASK_APP=salesdesk).
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init
#   Idempotent: creates tables, grants, and the default permission sets.
#
# Users:
# - python -m flask users create --username rep1 --email rep1@example.com --name "Rep One" --password "Password123!" [--manager boss]
# - python -m flask users set-manager rep1 boss      (use --clear to remove the manager)
# - python -m flask users list
# - python -m flask users deactivate rep1      (also revokes all of rep1's sessions)
#
# Permission sets:
# - python -m flask perms assign rep1 sales_summary_access
# - python -m flask perms unassign rep1 sales_summary_access
# - python -m flask perms list rep1
# - python -m flask perms grants
#
# Accounts:
# - python -m flask accounts create --name "Acme Corp" --owner rep1
# - python -m flask accounts transfer 12 rep2
# - python -m flask accounts list rep1
#
# Sales:
# - python -m flask sales summary rep1 [--as-of 2024-02-15]
#   Print the trailing 12-month series for a sales rep.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .permissions import PermissionCategory, get_grants_by_category
from .services import account_service, aggregation_service, auth_service, permission_service, session_service
from .services.auth_service import PasswordValidationError
from .services.account_service import AccountError
from .time_utils import parse_iso_date


def _user_by_username(username: str) -> User:
    user = db.session.query(User).filter_by(username=username).first()
    if not user:
        raise click.ClickException(f"User '{username}' not found")
    return user


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create tables, grants, and default permission sets."""
    click.echo("START Initializing sales summary system...")

    db.create_all()

    grant_count = permission_service.initialize_grants()
    set_count = permission_service.install_default_permission_sets()

    click.echo(f"PASS Created {grant_count} grants, {set_count} permission sets")
    click.echo("DONE System initialized")


@click.group('users')
def users_group():
    """User management commands."""


@users_group.command('create')
@click.option('--username', prompt=True)
@click.option('--email', prompt=True)
@click.option('--name', prompt=True, help='Display name shown in the sales rep picker')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--manager', 'manager_username', default=None, help='Username of the manager')
@with_appcontext
def create_user_command(username, email, name, password, manager_username):
    """Create a user."""
    manager_id = _user_by_username(manager_username).id if manager_username else None
    try:
        user = auth_service.create_user(
            username=username,
            email=email,
            password=password,
            name=name,
            manager_id=manager_id,
        )
    except (PasswordValidationError, ValueError) as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created user: {user.username} (ID: {user.id})")


@users_group.command('set-manager')
@click.argument('username')
@click.argument('manager_username', required=False)
@click.option('--clear', is_flag=True, help='Remove the manager')
@with_appcontext
def set_manager_command(username, manager_username, clear):
    """Assign or clear a user's manager."""
    if not clear and not manager_username:
        raise click.UsageError("Provide MANAGER_USERNAME or --clear")

    user = _user_by_username(username)
    manager_id = None if clear else _user_by_username(manager_username).id
    try:
        auth_service.set_manager(user.id, manager_id)
    except ValueError as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS {username}: manager={'none' if manager_id is None else manager_username}")


@users_group.command('list')
@with_appcontext
def list_users_command():
    """List users with manager and permission sets."""
    users = db.session.query(User).order_by(User.username.asc()).all()
    for user in users:
        sets = ", ".join(permission_service.get_user_permission_set_names(user.id)) or "-"
        manager = user.manager.username if user.manager else "-"
        status = "active" if user.is_active else "inactive"
        click.echo(f"{user.id:>4}  {user.username:<20} manager={manager:<15} {status:<8} sets={sets}")


@users_group.command('deactivate')
@click.argument('username')
@with_appcontext
def deactivate_user_command(username):
    """Deactivate a user and revoke all of their sessions."""
    user = _user_by_username(username)
    if not user.is_active:
        raise click.ClickException(f"User '{username}' is already deactivated")

    user.is_active = False
    revoked_count = session_service.revoke_all_user_sessions(user.id, reason="Account deactivated")

    permission_service.log_security_event(
        user_id=None,
        event_type="USER_DEACTIVATED",
        success=True,
        resource="cli",
        action=f"Deactivated user: {user.username}",
        reason=f"Revoked {revoked_count} sessions",
    )
    click.echo(f"PASS Deactivated {username}, revoked {revoked_count} sessions")


@click.group('perms')
def perms_group():
    """Permission set commands."""


@perms_group.command('assign')
@click.argument('username')
@click.argument('set_name')
@with_appcontext
def assign_command(username, set_name):
    """Assign a permission set to a user."""
    user = _user_by_username(username)
    try:
        permission_service.assign_permission_set(user.id, set_name)
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Assigned {set_name} to {username}")


@perms_group.command('unassign')
@click.argument('username')
@click.argument('set_name')
@with_appcontext
def unassign_command(username, set_name):
    """Remove a permission set from a user."""
    user = _user_by_username(username)
    try:
        removed = permission_service.unassign_permission_set(user.id, set_name)
    except ValueError as e:
        raise click.ClickException(str(e))
    if removed:
        click.echo(f"PASS Removed {set_name} from {username}")
    else:
        click.echo(f"WARN {username} did not have {set_name}")


@perms_group.command('list')
@click.argument('username')
@with_appcontext
def list_perms_command(username):
    """Show a user's permission sets and effective grants."""
    user = _user_by_username(username)
    access = permission_service.load_user_access(user.id)
    click.echo(f"Permission sets: {', '.join(permission_service.get_user_permission_set_names(user.id)) or '-'}")
    click.echo(f"Grants: {', '.join(sorted(access.grants)) or '-'}")
    click.echo(f"Readable objects: {', '.join(sorted(access.readable_objects)) or '-'}")
    click.echo(f"Creatable objects: {', '.join(sorted(access.creatable_objects)) or '-'}")


@perms_group.command('grants')
def list_grants_command():
    """List every grant code by category."""
    for category in (PermissionCategory.SALES, PermissionCategory.ADMINISTRATION):
        click.echo(f"{category}:")
        for code, name, _description, _category in get_grants_by_category(category):
            click.echo(f"  {code:<28} {name}")


@click.group('accounts')
def accounts_group():
    """Account commands."""


@accounts_group.command('create')
@click.option('--name', required=True)
@click.option('--owner', 'owner_username', required=True)
@with_appcontext
def create_account_command(name, owner_username):
    """Create an account owned by a user."""
    owner = _user_by_username(owner_username)
    try:
        account = account_service.create_account(name, owner.id)
    except AccountError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created account: {account.name} (ID: {account.id}, owner: {owner.username})")


@accounts_group.command('transfer')
@click.argument('account_id', type=int)
@click.argument('new_owner_username')
@with_appcontext
def transfer_account_command(account_id, new_owner_username):
    """Transfer account ownership. Past sales follow the account."""
    new_owner = _user_by_username(new_owner_username)
    try:
        account = account_service.transfer_ownership(account_id, new_owner.id)
    except AccountError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Account {account.id} now owned by {new_owner.username}")


@accounts_group.command('list')
@click.argument('owner_username')
@with_appcontext
def list_accounts_command(owner_username):
    """List accounts currently owned by a user."""
    owner = _user_by_username(owner_username)
    accounts = account_service.list_accounts_for_owner(owner.id)
    if not accounts:
        click.echo(f"WARN {owner_username} owns no accounts")
    for account in accounts:
        click.echo(f"{account.id:>6}  {account.name}")


@click.group('sales')
def sales_group():
    """Sales reporting commands."""


@sales_group.command('summary')
@click.argument('username')
@click.option('--as-of', default=None, help='Reference date (YYYY-MM-DD); defaults to today (UTC)')
@with_appcontext
def summary_command(username, as_of):
    """Print the trailing 12-month totals for a sales rep."""
    user = _user_by_username(username)
    try:
        as_of_date = parse_iso_date(as_of)
    except ValueError:
        raise click.BadParameter("must be YYYY-MM-DD", param_hint="--as-of")

    points = aggregation_service.monthly_totals(user.id, today=as_of_date)
    for point in points:
        click.echo(f"{point.year}-{point.month:02d}  {point.total:>14.2f}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
    app.cli.add_command(accounts_group)
    app.cli.add_command(sales_group)
