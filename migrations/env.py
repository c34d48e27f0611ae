# migrations/env.py

import logging
import os
import sys
from logging.config import fileConfig

# Make the project root importable when Alembic runs this file directly
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app import create_app, db
from app.models import payroll  # noqa: F401  registers the payroll tables

from alembic import context
from flask import current_app

config = context.config

if config.config_file_name is not None and os.path.exists(config.config_file_name):
    fileConfig(config.config_file_name)

logger = logging.getLogger('alembic.env')

target_metadata = db.metadata


def run_migrations_offline():
    """Run migrations in 'offline' mode, emitting SQL for the configured URL."""
    app = create_app(os.environ.get('FLASK_ENV', 'default'))

    context.configure(
        url=app.config['SQLALCHEMY_DATABASE_URI'],
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    """Run migrations in 'online' mode against the app's engine."""
    def process_revision_directives(context, revision, directives):
        # Don't write an empty revision when the payroll models are unchanged
        if getattr(config.cmd_opts, 'autogenerate', False):
            script = directives[0]
            if script.upgrade_ops.is_empty():
                directives[:] = []
                logger.info('No changes in payroll schema detected.')

    app = create_app(os.environ.get('FLASK_ENV', 'default'))

    with app.app_context():
        connectable = db.engine

        with connectable.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                process_revision_directives=process_revision_directives,
                **current_app.extensions['migrate'].configure_args
            )

            with context.begin_transaction():
                context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
