"""Alembic wiring for the catalog schema.

Migrations ship inside the package, so ``script_location`` always points here. When running
from a source checkout, extra options from ``[tool.alembic]`` in ``pyproject.toml`` (for
example ``file_template``) are layered on top.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from catalogsync.config import get_database_config

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent
PYPROJECT_PATH: Final[Path] = MIGRATIONS_PATH.parents[4] / "pyproject.toml"

# Derived from the package location or the engine, never from pyproject.
_RESERVED_OPTIONS: Final = frozenset({"script_location", "sqlalchemy.url"})

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def _checkout_alembic_options() -> dict[str, str]:
    if not PYPROJECT_PATH.is_file():
        return {}
    with PYPROJECT_PATH.open("rb") as handle:
        section = tomllib.load(handle).get("tool", {}).get("alembic", {})
    return {str(key): str(value) for key, value in section.items()}


def build_alembic_config(*, database_uri: str | None = None) -> Config:
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    for key, value in _checkout_alembic_options().items():
        if key not in _RESERVED_OPTIONS:
            config.set_main_option(key, value)
    if database_uri is not None:
        config.set_main_option("sqlalchemy.url", database_uri)
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Migrate the catalog schema to the newest revision.

    With ``engine`` the upgrade runs inside one transaction on a connection from it (required
    for in-memory SQLite, where a fresh connection would see an empty database).
    """

    if engine is None:
        command.upgrade(
            build_alembic_config(database_uri=database_uri or get_database_config().uri), "head"
        )
        return

    config = build_alembic_config()
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
