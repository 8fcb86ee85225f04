"""SQLAlchemy adapter package for catalogsync."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCanonicalEntityMappingRepository,
    SqlAlchemyNormalizationOverrideRepository,
    SqlAlchemyOfferRepository,
    SqlAlchemyPlantRepository,
    SqlAlchemyPriceHistoryRepository,
    SqlAlchemyProductRepository,
)
from .unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCanonicalEntityMappingRepository",
    "SqlAlchemyCatalogUnitOfWork",
    "SqlAlchemyNormalizationOverrideRepository",
    "SqlAlchemyOfferRepository",
    "SqlAlchemyPlantRepository",
    "SqlAlchemyPriceHistoryRepository",
    "SqlAlchemyProductRepository",
    "StartupError",
    "configured_engine",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
