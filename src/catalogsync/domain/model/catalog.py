"""Canonical catalog entities.

Plain dataclasses; the SQLAlchemy adapter maps them imperatively, so nothing here knows
about persistence. ``id`` is assigned on construction and never changes afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from catalogsync.domain.model.enums import CanonicalType  # noqa: TC001

type JsonValue = str | int | float | bool | None | list[JsonValue] | dict[str, JsonValue]
type JsonObject = dict[str, Any]

DEFAULT_CURRENCY = "USD"


def new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class Entity:
    """Internal identity exists immediately in the domain."""

    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class CanonicalProduct(Entity):
    """Deduplicated hardware product (lights, filters, tanks, ...)."""

    slug: str
    name: str
    brand_id: str | None = None
    description: str | None = None
    image_url: str | None = None
    specs: JsonObject = field(default_factory=dict)
    meta: JsonObject = field(default_factory=dict)


@dataclass(eq=False, kw_only=True)
class CanonicalPlant(Entity):
    """Deduplicated botanical record."""

    slug: str
    common_name: str
    scientific_name: str | None = None
    family: str | None = None
    description: str | None = None
    care: JsonObject = field(default_factory=dict)


@dataclass(eq=False, kw_only=True)
class CanonicalOffer(Entity):
    """A retailer listing for a product, with the last observed price and stock."""

    product_id: str
    retailer_id: str
    url: str
    price_cents: int | None = None
    currency: str = DEFAULT_CURRENCY
    in_stock: bool = True
    last_checked_at: datetime | None = None


@dataclass(eq=False, kw_only=True)
class PriceHistoryPoint:
    """Append-only record of a meaningful offer change."""

    offer_id: str
    price_cents: int
    in_stock: bool
    recorded_at: datetime
    id: str = field(default_factory=new_id)


@dataclass(eq=False, kw_only=True)
class NormalizationOverride:
    """Admin-authored correction of one field of a canonical entity.

    ``field_path`` is dot-separated (``specs.wattage``); ``value`` replaces whatever the
    normalizer produced at that path.
    """

    canonical_type: CanonicalType
    canonical_id: str
    field_path: str
    value: JsonValue
    reason: str | None = None
    actor_user_id: str | None = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class CanonicalEntityMapping:
    """Link from one source record to the canonical entity it resolved to."""

    source: str
    canonical_type: CanonicalType
    source_entity_id: str
    canonical_id: str
    match_method: str
    confidence: int
    notes: str | None = None
    id: str = field(default_factory=new_id)
    updated_at: datetime = field(default_factory=utcnow)
