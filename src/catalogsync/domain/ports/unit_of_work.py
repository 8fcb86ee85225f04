"""Transaction boundary shared by the domain services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from catalogsync.domain.ports.persistence import (
        CanonicalEntityMappingRepository,
        NormalizationOverrideRepository,
        OfferRepository,
        PlantRepository,
        PriceHistoryRepository,
        ProductRepository,
    )


@dataclass(slots=True)
class CatalogRepositories:
    """Every catalog repository, bound to the same transaction."""

    products: ProductRepository
    plants: PlantRepository
    offers: OfferRepository
    price_history: PriceHistoryRepository
    overrides: NormalizationOverrideRepository
    mappings: CanonicalEntityMappingRepository


@runtime_checkable
class CatalogUnitOfWork(Protocol):
    """Context manager owning one transaction over :class:`CatalogRepositories`.

    Changes persist only through :meth:`commit`; leaving the block with an exception rolls
    back whatever was pending.
    """

    @property
    def repositories(self) -> CatalogRepositories: ...

    def __enter__(self) -> CatalogUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
