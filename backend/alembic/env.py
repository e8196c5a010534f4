"""Alembic environment configuration."""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from daily_tracker.config import settings

# Import all models so Alembic can detect them
from daily_tracker.database.base import Base
from daily_tracker.auth.models import User  # noqa: F401
from daily_tracker.otp.models import OtpCode  # noqa: F401
from daily_tracker.jobs.models import Job  # noqa: F401
from daily_tracker.tasks.models import Task  # noqa: F401
from daily_tracker.notes.models import Note  # noqa: F401
from daily_tracker.drive.models import Folder, StoredFile  # noqa: F401

config = context.config
# The app passes its repaired URL; the CLI falls back to settings.
if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", settings.effective_database_url.replace("%", "%%"))

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(url=url, target_metadata=target_metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
