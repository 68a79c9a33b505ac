# tests/test_cli.py
from brewtrack.db import db
from brewtrack.models import User


def test_create_user_command(runner):
    result = runner.invoke(args=["create-user", "maltster", "malt@example.com", "--password", "s3cret"])
    assert result.exit_code == 0, result.output
    assert "Created user maltster" in result.output

    user = db.session.query(User).filter_by(username="maltster").first()
    assert user is not None
    assert user.check_password("s3cret")


def test_create_user_command_rejects_duplicates(runner, user):
    result = runner.invoke(args=["create-user", user.username, "dup@example.com", "--password", "x"])
    assert result.exit_code != 0
    assert "already exists" in result.output
