from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from config import Config
import logging

db = SQLAlchemy()
migrate = Migrate()

def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Setup logging
    logging.basicConfig(level=getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO))

    # Initialize Flask extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so the metadata is complete for create_all and migrations
    from classbook import models  # noqa: F401

    # Register error handlers for consistent error responses
    from classbook.services.error_service import register_error_handlers
    register_error_handlers(app)

    # Register Blueprints
    register_blueprints(app)

    # Register CLI commands
    register_commands(app)

    return app

def register_blueprints(app):
    """Register all application blueprints"""
    from classbook.routes.health import bp as health_bp
    app.register_blueprint(health_bp)

    from classbook.routes.attendance import bp as attendance_bp
    app.register_blueprint(attendance_bp, url_prefix='/api/v1')

    from classbook.routes.classes import bp as classes_bp
    app.register_blueprint(classes_bp, url_prefix='/api/v1/classes')

    from classbook.routes.payments import bp as payments_bp
    app.register_blueprint(payments_bp, url_prefix='/api/v1/payments')

    from classbook.routes.commissions import bp as commissions_bp
    app.register_blueprint(commissions_bp, url_prefix='/api/v1/teacher-commissions')

def register_commands(app):
    """Register maintenance commands on the flask CLI"""

    @app.cli.command('seed-demo')
    def seed_demo():
        """Recreate the schema and load demo data."""
        from classbook.seed import reset_and_seed
        summary = reset_and_seed()
        app.logger.info(f"Demo data loaded: {summary}")
        print(summary)
