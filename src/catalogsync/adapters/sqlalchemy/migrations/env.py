"""Alembic environment for the catalog schema.

``upgrade_head`` hands over an open connection through ``config.attributes["connection"]``;
the command-line ``alembic`` tool falls back to ``sqlalchemy.url`` or the configured database.
"""

from __future__ import annotations

import logging
from logging.config import fileConfig
from pathlib import Path
from typing import Any

from alembic import context
from sqlalchemy import create_engine, pool

from catalogsync.adapters.sqlalchemy import mapper_registry, start_mappers
from catalogsync.config import get_database_config

config = context.config

if config.config_file_name is not None and Path(config.config_file_name).suffix == ".ini":
    fileConfig(config.config_file_name)

log = logging.getLogger("alembic.env")

start_mappers()
target_metadata = mapper_registry.metadata

# SQLite cannot ALTER most constraints in place, so always emit batch operations.
_CONFIGURE_OPTIONS: dict[str, Any] = {
    "target_metadata": target_metadata,
    "render_as_batch": True,
    "compare_type": True,
}


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_config().uri


def _migrate(**options: Any) -> None:
    context.configure(**_CONFIGURE_OPTIONS, **options)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    log.info("Rendering catalog migrations as SQL")
    _migrate(url=_database_url(), literal_binds=True)


def run_migrations_online() -> None:
    borrowed = config.attributes.get("connection")
    if borrowed is not None:
        _migrate(connection=borrowed)
        return

    engine = create_engine(_database_url(), poolclass=pool.NullPool, future=True)
    try:
        with engine.connect() as connection:
            _migrate(connection=connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
