# migrations/env.py

from __future__ import annotations
import logging
from logging.config import fileConfig
from alembic import context
from flask import current_app, has_app_context
from sqlalchemy import engine_from_config, pool

from payroll_api.extensions import db, normalize_db_url

# `flask db ...` runs inside the app it was given; bare `alembic ...` builds one from env
if has_app_context():
    flask_app = current_app._get_current_object()
else:
    from payroll_api.wsgi import app as flask_app

config = context.config

# alembic.ini logging sections are optional in dev
if config.config_file_name is not None and config.file_config.has_section("loggers"):
    fileConfig(config.config_file_name, disable_existing_loggers=False)
log = logging.getLogger("alembic.env")

# the Flask config is the only source of the database URL
with flask_app.app_context():
    db_uri = normalize_db_url(flask_app.config["SQLALCHEMY_DATABASE_URI"])
config.set_main_option("sqlalchemy.url", db_uri.replace("%", "%%"))

target_metadata = db.metadata


def _skip_empty_autogenerate(context_, revision, directives):
    """`flask db migrate` with no model changes should not write an empty revision."""
    if getattr(config.cmd_opts, "autogenerate", False):
        script = directives[0]
        if script.upgrade_ops.is_empty():
            directives[:] = []
            log.info("No changes in schema detected.")


def _options() -> dict:
    # compare_type picks up new values on the record_type/record_status enums;
    # SQLite cannot ALTER most things in place, so it needs batch mode
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": db_uri.startswith("sqlite"),
        "process_revision_directives": _skip_empty_autogenerate,
    }


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of touching a database."""
    context.configure(url=db_uri, literal_binds=True, **_options())
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        future=True,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, **_options())
        with flask_app.app_context():
            with context.begin_transaction():
                context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
