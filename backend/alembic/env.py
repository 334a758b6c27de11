"""Alembic environment for the event log schema.

The URL comes from ``eventlog.config.settings`` unless the caller hands over
an open connection in ``config.attributes["connection"]`` (the migration
tests do). SQLite runs in batch mode and gets the same per-connection setup
as the application engine.
"""
from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context

from eventlog.config import settings
from eventlog.database import Base, configure_sqlite

# Every model must be imported for autogenerate to see its table.
from eventlog.models.user import User                          # noqa: F401
from eventlog.models.tag import Tag                            # noqa: F401
from eventlog.models.event import Event                        # noqa: F401
from eventlog.models.attachment import Attachment              # noqa: F401
from eventlog.models.event_edit_history import EventEditHistory  # noqa: F401

config = context.config
if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        # SQLite cannot ALTER most constraints in place
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    """Emit SQL for the configured URL without connecting."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=url.startswith("sqlite"),
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    shared = config.attributes.get("connection")
    if shared is not None:
        _configure(shared)
        return

    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    configure_sqlite(connectable)
    with connectable.connect() as connection:
        _configure(connection)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
