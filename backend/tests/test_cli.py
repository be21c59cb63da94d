from datetime import date

from salesdesk.models import Account, SecurityEvent, User
from salesdesk.services import permission_service, session_service


def test_system_init_is_idempotent(app, db_session):
    runner = app.test_cli_runner()

    first = runner.invoke(args=["system", "init"])
    second = runner.invoke(args=["system", "init"])

    assert first.exit_code == 0
    assert "Created 2 grants, 2 permission sets" in first.output
    assert "Created 0 grants, 0 permission sets" in second.output


def test_user_and_account_commands(app, db_session, setup_permissions):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        "users", "create", "--username", "boss", "--email", "boss@example.com",
        "--name", "The Boss", "--password", "Password123!",
    ])
    assert result.exit_code == 0, result.output
    result = runner.invoke(args=[
        "users", "create", "--username", "rep1", "--email", "rep1@example.com",
        "--name", "Rep One", "--password", "Password123!", "--manager", "boss",
    ])
    assert result.exit_code == 0, result.output

    assert runner.invoke(args=["perms", "assign", "rep1", "sales_summary_access"]).exit_code == 0
    assert runner.invoke(args=["accounts", "create", "--name", "Acme", "--owner", "rep1"]).exit_code == 0

    rep1 = db_session.query(User).filter_by(username="rep1").one()
    assert rep1.manager.username == "boss"
    assert permission_service.get_user_permission_set_names(rep1.id) == ["sales_summary_access"]
    account = db_session.query(Account).filter_by(name="Acme").one()
    assert account.owner_id == rep1.id

    result = runner.invoke(args=["accounts", "transfer", str(account.id), "boss"])
    assert result.exit_code == 0, result.output


def test_unknown_user_fails(app, db_session):
    result = app.test_cli_runner().invoke(args=["perms", "list", "ghost"])

    assert result.exit_code != 0
    assert "User 'ghost' not found" in result.output


def test_sales_summary(app, rep_a, make_account, add_sale):
    add_sale(make_account(rep_a), date(2024, 1, 20), "50.00")

    result = app.test_cli_runner().invoke(args=["sales", "summary", "rep_a", "--as-of", "2024-02-15"])

    assert result.exit_code == 0, result.output
    lines = result.output.strip().splitlines()
    assert len(lines) == 12
    assert lines[0].startswith("2023-03")
    assert lines[-2].split() == ["2024-01", "50.00"]


def test_list_grants(app):
    result = app.test_cli_runner().invoke(args=["perms", "grants"])

    assert result.exit_code == 0
    assert "SALES:" in result.output
    assert "create-on-any-account" in result.output


def test_deactivate_user_revokes_sessions(app, db_session, rep_a):
    _, token = session_service.create_session(rep_a.id)
    runner = app.test_cli_runner()

    result = runner.invoke(args=["users", "deactivate", "rep_a"])

    assert result.exit_code == 0, result.output
    assert "revoked 1 sessions" in result.output
    assert session_service.validate_session(token) is None
    assert db_session.query(SecurityEvent).filter_by(event_type="USER_DEACTIVATED").count() == 1

    again = runner.invoke(args=["users", "deactivate", "rep_a"])
    assert again.exit_code != 0
    assert "already deactivated" in again.output


def test_accounts_list(app, rep_a, rep_b, make_account):
    make_account(rep_a, "Zeta")
    make_account(rep_a, "Alpha")
    runner = app.test_cli_runner()

    result = runner.invoke(args=["accounts", "list", "rep_a"])

    assert result.exit_code == 0
    assert [line.split(None, 1)[1] for line in result.output.strip().splitlines()] == ["Alpha", "Zeta"]
    assert "owns no accounts" in runner.invoke(args=["accounts", "list", "rep_b"]).output
