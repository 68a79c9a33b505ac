# tests/conftest.py
from datetime import datetime, timedelta, timezone

import pytest
from flask_login import FlaskLoginClient

from config import TestingConfig
from brewtrack.app import create_app
from brewtrack.db import db
from brewtrack.models import User, Sensor, Batch

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def at(minutes):
    """Instant ``minutes`` after T0; tests express timelines as t=0, t=100..."""
    return T0 + timedelta(minutes=minutes)


def make_user(username):
    user = User(username=username, email=f"{username}@example.com")
    user.set_password("testpassword")
    db.session.add(user)
    db.session.commit()
    return user


def make_sensor(user, name="Fermenter probe"):
    sensor = Sensor(name=name, user_id=user.id)
    db.session.add(sensor)
    db.session.commit()
    return sensor


def make_batch(user, name="Pale Ale"):
    batch = Batch(name=name, user_id=user.id)
    db.session.add(batch)
    db.session.commit()
    return batch


@pytest.fixture(scope="function")
def app():
    """Fresh app with an in-memory database for every test."""
    application = create_app(TestingConfig)
    application.test_client_class = FlaskLoginClient

    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def session(app):
    return db.session


@pytest.fixture(scope="function")
def user(app):
    return make_user("brewer")


@pytest.fixture(scope="function")
def other_user(app):
    return make_user("neighbour")


@pytest.fixture(scope="function")
def client(app, user):
    """Test client already logged in as ``user``."""
    return app.test_client(user=user)


@pytest.fixture(scope="function")
def anonymous_client(app):
    return app.test_client()


@pytest.fixture(scope="function")
def runner(app):
    return app.test_cli_runner()


@pytest.fixture(scope="function")
def sensor(user):
    return make_sensor(user)


@pytest.fixture(scope="function")
def batch(user):
    return make_batch(user, "Pale Ale")


@pytest.fixture(scope="function")
def second_batch(user):
    return make_batch(user, "Stout")
