"""
CLI command tests (flask system / flask users).
"""

from garments_tracker.models import Account


def test_system_init(app, db_session):
    result = app.test_cli_runner().invoke(args=["system", "init"])
    assert result.exit_code == 0
    assert "orders" in result.output


def test_users_list(app, db_session, buyer, manager):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["users", "list"])
    assert "buyer@example.com" in result.output
    assert "manager@example.com" in result.output

    result = runner.invoke(args=["users", "list", "--role", "manager"])
    assert "buyer@example.com" not in result.output


def test_set_role(app, db_session, buyer):
    result = app.test_cli_runner().invoke(args=["users", "set-role", "BUYER@example.com", "admin"])
    assert result.exit_code == 0

    db_session.expire_all()
    assert db_session.get(Account, buyer.id).role == "admin"


def test_suspend_and_reinstate(app, db_session, buyer):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["users", "suspend", buyer.email, "--reason", "Chargebacks", "--feedback", "Call us"])
    assert result.exit_code == 0
    db_session.expire_all()
    account = db_session.get(Account, buyer.id)
    assert account.status == "suspended"
    assert account.suspend_feedback == "Call us"

    result = runner.invoke(args=["users", "reinstate", buyer.email])
    assert result.exit_code == 0
    db_session.expire_all()
    assert db_session.get(Account, buyer.id).suspend_reason is None


def test_unknown_email(app, db_session):
    result = app.test_cli_runner().invoke(args=["users", "set-role", "ghost@example.com", "admin"])
    assert result.exit_code != 0
    assert "No account" in result.output
