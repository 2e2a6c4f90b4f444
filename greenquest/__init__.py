"""Flask application factory."""

import os

from flask import Flask
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from greenquest.config import config

db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application."""
    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # Initialize extensions
    from greenquest.extensions import cache, init_sentry, limiter
    from greenquest.logging_config import setup_logging

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    cache.init_app(app)
    limiter.init_app(app)
    setup_logging(app)
    init_sentry(app)

    # CORS
    CORS(app, origins=app.config["CORS_ORIGINS"], supports_credentials=True)

    # Register blueprints
    from greenquest.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api/v1")

    # Domain errors escaping a handler still get the standard envelope
    from greenquest.errors import GreenQuestError
    from greenquest.utils.response import domain_error

    @app.errorhandler(GreenQuestError)
    def handle_domain_error(error):
        return domain_error(error)

    # CLI commands
    from greenquest.cli import gamification

    app.cli.add_command(gamification)

    # Health check endpoint
    @app.route("/health")
    def health():
        return {"status": "ok"}

    # Shell context
    @app.shell_context_processor
    def make_shell_context():
        from greenquest.models import Badge, Report, Reward, Transaction, User

        return {
            "db": db,
            "User": User,
            "Report": Report,
            "Reward": Reward,
            "Transaction": Transaction,
            "Badge": Badge,
        }

    return app
