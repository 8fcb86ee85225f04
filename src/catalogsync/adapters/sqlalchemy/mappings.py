"""SQLAlchemy mapping metadata for the catalog domain model."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache
from typing import Final

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    orm,
)

from catalogsync.domain.model import (
    CanonicalEntityMapping,
    CanonicalOffer,
    CanonicalPlant,
    CanonicalProduct,
    CanonicalType,
    NormalizationOverride,
    PriceHistoryPoint,
)

log = logging.getLogger(__name__)

ID_LENGTH: Final[int] = 36


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _id_column(name: str = "id", *args: object, **kwargs: object) -> Column[str]:
    return Column(name, String(ID_LENGTH), *args, **kwargs)  # type: ignore[arg-type]


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Canonical tables -------------------------------------------------------------

product_table = Table(
    "product",
    mapper_registry.metadata,
    _id_column(primary_key=True),
    Column("slug", String, nullable=False, index=True),
    Column("name", String, nullable=False),
    Column("brand_id", String, nullable=True),
    Column("description", Text, nullable=True),
    Column("image_url", String, nullable=True),
    Column("specs", JSON, nullable=False),
    Column("meta", JSON, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)

plant_table = Table(
    "plant",
    mapper_registry.metadata,
    _id_column(primary_key=True),
    Column("slug", String, nullable=False, index=True),
    Column("common_name", String, nullable=False),
    Column("scientific_name", String, nullable=True),
    Column("family", String, nullable=True),
    Column("description", Text, nullable=True),
    Column("care", JSON, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)

offer_table = Table(
    "offer",
    mapper_registry.metadata,
    _id_column(primary_key=True),
    _id_column("product_id", ForeignKey("product.id", ondelete="CASCADE"), nullable=False),
    Column("retailer_id", String, nullable=False),
    Column("url", String, nullable=False),
    Column("price_cents", Integer, nullable=True),
    Column("currency", String(3), nullable=False),
    Column("in_stock", Boolean, nullable=False),
    Column("last_checked_at", UTCDateTime(), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    Index("ix_offer_product_retailer", "product_id", "retailer_id"),
)

price_history_table = Table(
    "price_history",
    mapper_registry.metadata,
    _id_column(primary_key=True),
    _id_column("offer_id", ForeignKey("offer.id", ondelete="CASCADE"), nullable=False),
    Column("price_cents", Integer, nullable=False),
    Column("in_stock", Boolean, nullable=False),
    Column("recorded_at", UTCDateTime(), nullable=False),
    Index("ix_price_history_offer_recorded", "offer_id", "recorded_at"),
)

# Curation tables --------------------------------------------------------------

normalization_override_table = Table(
    "normalization_override",
    mapper_registry.metadata,
    _id_column(primary_key=True),
    Column("canonical_type", Enum(CanonicalType, native_enum=False), nullable=False),
    _id_column("canonical_id", nullable=False),
    Column("field_path", String(200), nullable=False),
    Column("value", JSON(none_as_null=False), nullable=True),
    Column("reason", String(500), nullable=True),
    Column("actor_user_id", String, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    UniqueConstraint(
        "canonical_type",
        "canonical_id",
        "field_path",
        name="uq_normalization_override_target",
    ),
)

canonical_entity_mapping_table = Table(
    "canonical_entity_mapping",
    mapper_registry.metadata,
    _id_column(primary_key=True),
    Column("source", String, nullable=False),
    Column("canonical_type", Enum(CanonicalType, native_enum=False), nullable=False),
    Column("source_entity_id", String, nullable=False),
    _id_column("canonical_id", nullable=False),
    Column("match_method", String, nullable=False),
    Column("confidence", Integer, nullable=False),
    Column("notes", Text, nullable=True),
    Column("updated_at", UTCDateTime(), nullable=False),
    UniqueConstraint(
        "source",
        "canonical_type",
        "source_entity_id",
        name="uq_canonical_entity_mapping_source_entity",
    ),
    Index("ix_canonical_entity_mapping_canonical", "canonical_type", "canonical_id"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(CanonicalProduct, product_table)
    mapper_registry.map_imperatively(CanonicalPlant, plant_table)
    mapper_registry.map_imperatively(CanonicalOffer, offer_table)
    mapper_registry.map_imperatively(PriceHistoryPoint, price_history_table)
    mapper_registry.map_imperatively(NormalizationOverride, normalization_override_table)
    mapper_registry.map_imperatively(CanonicalEntityMapping, canonical_entity_mapping_table)

    orm.configure_mappers()
    return mapper_registry

