# alembic/env.py - Environment setup per migrations Metrocal
from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context

from metrocal.database.connection import get_database_url
from metrocal.models import BaseModel

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# Models registrati in metrocal.models: servono ad --autogenerate
target_metadata = BaseModel.metadata


def migration_url() -> str:
    """
    URL del database da migrare.

    `alembic -x url=sqlite:///local.db upgrade head` ha la precedenza
    su DATABASE_URL / DB_* (vedi metrocal.database.connection).
    """
    return context.get_x_argument(as_dictionary=True).get("url") or get_database_url()


def configure_options(url: str) -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "compare_server_default": True,
        # SQLite: ALTER TABLE emulato ricreando la tabella
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Genera SQL senza connessione (alembic upgrade --sql)"""
    url = migration_url()
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **configure_options(url),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = migration_url()
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = url

    connectable = engine_from_config(configuration, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, **configure_options(url))

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
