"""Alembic environment for the users and tokens tables.

The database URL always comes from app settings (DATABASE_URL); sqlalchemy.url
in alembic.ini is left empty on purpose.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

from app.core.config import settings
from app.models import Base, Token, User  # noqa: F401  (registers both tables on Base.metadata)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        **kwargs,
    )


def run_offline() -> None:
    """Write migration SQL to stdout for a DBA to apply."""
    _configure(
        url=settings.DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    """Apply migrations over a short-lived connection (no pooling)."""
    migration_engine = create_engine(settings.DATABASE_URL, poolclass=NullPool)
    with migration_engine.connect() as connection:
        # SQLite cannot ALTER most constraints in place.
        _configure(
            connection=connection,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()
    migration_engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
