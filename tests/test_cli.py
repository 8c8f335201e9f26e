from app.extensions import db
from app.models import AdminUser, User


def test_users_create_with_admin(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["users", "create", "--email", "Boss@Example.com", "--password", "pw-12345678", "--admin"])
    assert result.exit_code == 0, result.output
    assert "admin=yes" in result.output
    with app.app_context():
        user = db.session.query(User).filter_by(email="boss@example.com").one()
        assert user.check_password("pw-12345678")
        assert db.session.get(AdminUser, user.id) is not None


def test_users_create_rejects_duplicate(app, make_user):
    make_user(email="dup@example.com")
    result = app.test_cli_runner().invoke(args=["users", "create", "--email", "DUP@example.com", "--password", "x"])
    assert result.exit_code != 0
    assert "already exists" in result.output


def test_admins_grant_list_revoke(app, make_user):
    user_id, _ = make_user(email="ops@example.com")
    runner = app.test_cli_runner()

    result = runner.invoke(args=["admins", "grant", "--email", "ops@example.com"])
    assert result.exit_code == 0, result.output
    with app.app_context():
        marker = db.session.get(AdminUser, user_id)
        assert marker is not None and marker.email == "ops@example.com"

    again = runner.invoke(args=["admins", "grant", "--email", "ops@example.com"])
    assert "already an admin" in again.output

    listed = runner.invoke(args=["admins", "list"])
    assert "ops@example.com" in listed.output

    result = runner.invoke(args=["admins", "revoke", "--email", "ops@example.com"])
    assert result.exit_code == 0, result.output
    with app.app_context():
        assert db.session.get(AdminUser, user_id) is None

    assert runner.invoke(args=["admins", "list"]).output.strip() == "No admins"


def test_admins_grant_unknown_user(app):
    result = app.test_cli_runner().invoke(args=["admins", "grant", "--email", "ghost@example.com"])
    assert result.exit_code != 0
    assert "User not found" in result.output
