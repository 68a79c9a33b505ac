import logging

from flask import Flask, jsonify
from flask_login import LoginManager
from flask_migrate import Migrate

from config import Config
from brewtrack.db import db
from brewtrack.models import User
from brewtrack.utils.log.log import setup_logger

login_manager = LoginManager()
migrate = Migrate()

logger = logging.getLogger(__name__)


@login_manager.user_loader
def load_user(user_id: str):
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"success": False, "message": "Authentication required."}), 401


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    setup_logger(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)

    with app.app_context():
        db.create_all()

    from brewtrack.views.routes.api_routes import api
    from brewtrack.views.commands import create_user_command
    app.register_blueprint(api)
    app.cli.add_command(create_user_command)

    logger.info("brewtrack app created with %s", config_class.__name__)
    return app
