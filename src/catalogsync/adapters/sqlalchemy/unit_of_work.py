"""SQLAlchemy unit of work over the catalog repositories.

The adapter keeps one process-wide engine. :func:`startup` binds it (creating it from
configuration when none is passed) and migrates the schema to head; every
:class:`SqlAlchemyCatalogUnitOfWork` then opens its own session from that engine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from catalogsync.adapters.sqlalchemy.mappings import start_mappers
from catalogsync.adapters.sqlalchemy.migrations import upgrade_head
from catalogsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyCanonicalEntityMappingRepository,
    SqlAlchemyNormalizationOverrideRepository,
    SqlAlchemyOfferRepository,
    SqlAlchemyPlantRepository,
    SqlAlchemyPriceHistoryRepository,
    SqlAlchemyProductRepository,
)
from catalogsync.config import get_database_config
from catalogsync.domain.ports import CatalogRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the adapter or a unit of work is used in the wrong lifecycle state."""


@dataclass(slots=True)
class _EngineBinding:
    engine: Engine | None = None
    _sessions: sessionmaker[Session] | None = field(default=None, repr=False)

    def bind(self, engine: Engine | None) -> None:
        self.engine = engine
        self._sessions = None

    def sessions(self) -> sessionmaker[Session]:
        if self.engine is None:
            raise StartupError(
                "Catalog storage is not started; call "
                "catalogsync.adapters.sqlalchemy.startup() first."
            )
        if self._sessions is None:
            self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._sessions


_BINDING = _EngineBinding()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the catalog engine and bring its schema up to date.

    ``engine`` wins over ``database_uri``, which wins over :func:`get_database_config`.
    Rebinding an already started adapter requires ``force=True``.
    """

    if _BINDING.engine is not None and not force:
        raise StartupError("Catalog storage already started; pass force=True to rebind it.")

    if engine is None:
        engine = create_engine(database_uri or get_database_config().uri, future=True)
    start_mappers()
    upgrade_head(engine=engine)
    _BINDING.bind(engine)
    log.debug("Catalog storage bound to %s", engine.url)


def configured_engine() -> Engine | None:
    return _BINDING.engine


def is_started() -> bool:
    return _BINDING.engine is not None


def shutdown() -> None:
    """Dispose the bound engine, if any, and forget it."""

    if _BINDING.engine is not None:
        _BINDING.engine.dispose()
    _BINDING.bind(None)


class SqlAlchemyCatalogUnitOfWork:
    """One session shared by every catalog repository for the duration of a ``with`` block.

    Leaving the block closes the session; an exception rolls it back first. Nothing is
    committed implicitly.
    """

    def __init__(self) -> None:
        self._sessions = _BINDING.sessions()
        self._session: Session | None = None
        self._repositories: CatalogRepositories | None = None

    def __enter__(self) -> SqlAlchemyCatalogUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        session = self._sessions()
        self._session = session
        self._repositories = CatalogRepositories(
            products=SqlAlchemyProductRepository(session),
            plants=SqlAlchemyPlantRepository(session),
            offers=SqlAlchemyOfferRepository(session),
            price_history=SqlAlchemyPriceHistoryRepository(session),
            overrides=SqlAlchemyNormalizationOverrideRepository(session),
            mappings=SqlAlchemyCanonicalEntityMappingRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def repositories(self) -> CatalogRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from catalogsync.domain.ports import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = SqlAlchemyCatalogUnitOfWork()
