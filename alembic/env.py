from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool

# .env has to be loaded before settings is imported
load_dotenv()

from manufacturing_api.core.config import settings  # noqa: E402
from manufacturing_api.models.base import Base  # noqa: E402

# registers items / boms / bom_* / workstations on Base.metadata
from manufacturing_api import models  # noqa: F401, E402

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# shared by offline and online runs
MIGRATION_OPTIONS = {
    "target_metadata": target_metadata,
    "compare_type": True,
}


def run_migrations_offline() -> None:
    """Emit SQL for settings.DATABASE_URL without connecting."""
    context.configure(
        url=settings.sqlalchemy_database_url,
        literal_binds=True,
        **MIGRATION_OPTIONS,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section) or {}
    section["sqlalchemy.url"] = settings.sqlalchemy_database_url

    engine = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with engine.connect() as connection:
        context.configure(
            connection=connection,
            # SQLite cannot ALTER constraints in place
            render_as_batch=connection.dialect.name == "sqlite",
            **MIGRATION_OPTIONS,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
