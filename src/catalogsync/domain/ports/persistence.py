"""Ports for persisting catalog aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from catalogsync.domain.model import (
    CanonicalEntityMapping,
    CanonicalOffer,
    CanonicalPlant,
    CanonicalProduct,
    NormalizationOverride,
    PriceHistoryPoint,
)

if TYPE_CHECKING:
    from datetime import datetime

    from catalogsync.domain.model import CanonicalType


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class CanonicalRepository[TCanonical](Repository[TCanonical], Protocol):
    """Repository contract for canonical catalog rows."""

    def get(self, entity_id: str) -> TCanonical | None: ...

    def list_all(self) -> list[TCanonical]: ...


@runtime_checkable
class ProductRepository(CanonicalRepository[CanonicalProduct], Protocol):
    """Repository contract for canonical products."""


@runtime_checkable
class PlantRepository(CanonicalRepository[CanonicalPlant], Protocol):
    """Repository contract for canonical plants."""


@runtime_checkable
class OfferRepository(CanonicalRepository[CanonicalOffer], Protocol):
    """Repository contract for canonical offers."""

    def list_stale(self, *, cutoff: datetime, limit: int) -> list[CanonicalOffer]:
        """Offers last checked (or, never checked, last updated) before ``cutoff``."""
        ...


@runtime_checkable
class PriceHistoryRepository(Repository[PriceHistoryPoint], Protocol):
    """Append-only sink for price history points."""

    def list_for_offer(self, offer_id: str) -> list[PriceHistoryPoint]: ...


@runtime_checkable
class NormalizationOverrideRepository(Repository[NormalizationOverride], Protocol):
    """Persistence contract for admin-authored overrides."""

    def get(self, override_id: str) -> NormalizationOverride | None: ...

    def remove(self, override: NormalizationOverride) -> None: ...

    def list_for_entity(
        self,
        canonical_type: CanonicalType,
        canonical_id: str,
    ) -> list[NormalizationOverride]:
        """Overrides for one canonical entity, ordered by ``field_path`` ascending."""
        ...

    def find(
        self,
        canonical_type: CanonicalType,
        canonical_id: str,
        field_path: str,
    ) -> NormalizationOverride | None: ...

    def list_all(self) -> list[NormalizationOverride]: ...


@runtime_checkable
class CanonicalEntityMappingRepository(Repository[CanonicalEntityMapping], Protocol):
    """Links from source records to the canonical entities they resolved to."""

    def get(
        self,
        source: str,
        canonical_type: CanonicalType,
        source_entity_id: str,
    ) -> CanonicalEntityMapping | None: ...

    def list_for_source(
        self,
        source: str,
        canonical_type: CanonicalType,
    ) -> list[CanonicalEntityMapping]: ...
