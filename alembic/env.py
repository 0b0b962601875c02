"""Alembic environment for the offer tables."""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

from app.config import settings
from app.db.base import Base
from app.models import application, category, company, offer, user  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# asyncpg spells TLS as ssl=..., psycopg2 as sslmode=...
SSL_PARAMS = {
    "ssl=false": "sslmode=disable",
    "ssl=true": "sslmode=require",
    "ssl=require": "sslmode=require",
}


def sync_database_url(url: str) -> str:
    """Migrations run on the sync drivers (psycopg2, pysqlite)."""
    url = url.replace("+asyncpg", "").replace("+aiosqlite", "")
    for async_param, sync_param in SSL_PARAMS.items():
        url = url.replace(f"?{async_param}", f"?{sync_param}").replace(f"&{async_param}", f"&{sync_param}")
    return url


config.set_main_option("sqlalchemy.url", sync_database_url(str(settings.DATABASE_URL)))


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
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
