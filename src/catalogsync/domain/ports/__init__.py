"""Ports the domain expects adapters to provide."""

from __future__ import annotations

from .persistence import (
    CanonicalEntityMappingRepository,
    NormalizationOverrideRepository,
    OfferRepository,
    PlantRepository,
    PriceHistoryRepository,
    ProductRepository,
    Repository,
)
from .unit_of_work import CatalogRepositories, CatalogUnitOfWork

__all__ = [
    "CanonicalEntityMappingRepository",
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "NormalizationOverrideRepository",
    "OfferRepository",
    "PlantRepository",
    "PriceHistoryRepository",
    "ProductRepository",
    "Repository",
]
