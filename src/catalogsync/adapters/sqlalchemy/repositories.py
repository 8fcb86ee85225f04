"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select

from catalogsync.adapters.sqlalchemy.mappings import (
    canonical_entity_mapping_table,
    normalization_override_table,
    offer_table,
    price_history_table,
)
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

    from sqlalchemy.orm import Session

    from catalogsync.domain.model import CanonicalType, Entity


class SqlAlchemyCanonicalRepository[TEntity: Entity]:
    """Shared helpers for repositories managing canonical catalog rows."""

    def __init__(self, session: Session, entity_cls: type[TEntity]) -> None:
        self.session = session
        self._entity_cls = entity_cls

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)

    def get(self, entity_id: str) -> TEntity | None:
        return self.session.get(self._entity_cls, entity_id)

    def list_all(self) -> list[TEntity]:
        return list(self.session.scalars(select(self._entity_cls)))


class SqlAlchemyProductRepository(SqlAlchemyCanonicalRepository[CanonicalProduct]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, CanonicalProduct)


class SqlAlchemyPlantRepository(SqlAlchemyCanonicalRepository[CanonicalPlant]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, CanonicalPlant)


class SqlAlchemyOfferRepository(SqlAlchemyCanonicalRepository[CanonicalOffer]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, CanonicalOffer)

    def list_stale(self, *, cutoff: datetime, limit: int) -> list[CanonicalOffer]:
        last_seen = func.coalesce(offer_table.c.last_checked_at, offer_table.c.updated_at)
        stmt = (
            select(CanonicalOffer)
            .where(last_seen < cutoff)
            .order_by(last_seen.asc(), offer_table.c.id.asc())
            .limit(limit)
        )
        return list(self.session.scalars(stmt))


class SqlAlchemyPriceHistoryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: PriceHistoryPoint) -> None:
        self.session.add(entity)

    def list_for_offer(self, offer_id: str) -> list[PriceHistoryPoint]:
        stmt = (
            select(PriceHistoryPoint)
            .where(price_history_table.c.offer_id == offer_id)
            .order_by(price_history_table.c.recorded_at.asc())
        )
        return list(self.session.scalars(stmt))


class SqlAlchemyNormalizationOverrideRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: NormalizationOverride) -> None:
        self.session.add(entity)

    def get(self, override_id: str) -> NormalizationOverride | None:
        return self.session.get(NormalizationOverride, override_id)

    def remove(self, override: NormalizationOverride) -> None:
        self.session.delete(override)

    def list_for_entity(
        self,
        canonical_type: CanonicalType,
        canonical_id: str,
    ) -> list[NormalizationOverride]:
        stmt = (
            select(NormalizationOverride)
            .where(normalization_override_table.c.canonical_type == canonical_type)
            .where(normalization_override_table.c.canonical_id == canonical_id)
            .order_by(normalization_override_table.c.field_path.asc())
        )
        return list(self.session.scalars(stmt))

    def find(
        self,
        canonical_type: CanonicalType,
        canonical_id: str,
        field_path: str,
    ) -> NormalizationOverride | None:
        stmt = (
            select(NormalizationOverride)
            .where(normalization_override_table.c.canonical_type == canonical_type)
            .where(normalization_override_table.c.canonical_id == canonical_id)
            .where(normalization_override_table.c.field_path == field_path)
        )
        return self.session.scalars(stmt).one_or_none()

    def list_all(self) -> list[NormalizationOverride]:
        stmt = select(NormalizationOverride).order_by(
            normalization_override_table.c.canonical_type,
            normalization_override_table.c.canonical_id,
            normalization_override_table.c.field_path,
        )
        return list(self.session.scalars(stmt))


class SqlAlchemyCanonicalEntityMappingRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CanonicalEntityMapping) -> None:
        self.session.add(entity)

    def get(
        self,
        source: str,
        canonical_type: CanonicalType,
        source_entity_id: str,
    ) -> CanonicalEntityMapping | None:
        stmt = (
            select(CanonicalEntityMapping)
            .where(canonical_entity_mapping_table.c.source == source)
            .where(canonical_entity_mapping_table.c.canonical_type == canonical_type)
            .where(canonical_entity_mapping_table.c.source_entity_id == source_entity_id)
        )
        return self.session.scalars(stmt).one_or_none()

    def list_for_source(
        self,
        source: str,
        canonical_type: CanonicalType,
    ) -> list[CanonicalEntityMapping]:
        stmt = (
            select(CanonicalEntityMapping)
            .where(canonical_entity_mapping_table.c.source == source)
            .where(canonical_entity_mapping_table.c.canonical_type == canonical_type)
            .order_by(canonical_entity_mapping_table.c.source_entity_id.asc())
        )
        return list(self.session.scalars(stmt))
