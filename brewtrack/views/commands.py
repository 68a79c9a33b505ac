# brewtrack/views/commands.py
import click
from flask.cli import with_appcontext

from brewtrack.db import db
from brewtrack.models import User


@click.command("create-user")
@click.argument("username")
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--full-name", default="", help="Display name of the user.")
@with_appcontext
def create_user_command(username, email, password, full_name):
    """Creates a user that can own sensors and batches."""
    if db.session.query(User).filter_by(username=username).first() is not None:
        raise click.ClickException(f"User {username} already exists.")

    user = User(username=username, email=email, full_name=full_name)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    click.echo(f"Created user {user.username} ({user.uuid})")
