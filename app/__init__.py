# app/__init__.py
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from config import config

db = SQLAlchemy()
migrate = Migrate()


def create_app(config_name='default'):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name])

    # Initialize app-specific configuration (logging, policy checks)
    config[config_name].init_app(app)

    db.init_app(app)
    migrate.init_app(app, db, directory=app.config.get('MIGRATION_DIR'))

    # Models must be imported so metadata and migrations see them
    from app.models import payroll  # noqa: F401

    # --- Register CLI Commands ---
    from app.payroll.commands import payroll_cli
    app.cli.add_command(payroll_cli)

    return app
