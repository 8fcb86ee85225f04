from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from catalogsync.domain.model import (
    CanonicalOffer,
    CanonicalPlant,
    CanonicalProduct,
    CanonicalType,
    NormalizationOverride,
)

if TYPE_CHECKING:
    from catalogsync.domain.model import JsonValue

FIXED_TIME = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def make_product(
    slug: str = "fluval-plant-3-0",
    *,
    name: str = "Fluval Plant 3.0",
    brand_id: str | None = None,
    meta: dict[str, Any] | None = None,
    specs: dict[str, Any] | None = None,
    product_id: str | None = None,
) -> CanonicalProduct:
    product = CanonicalProduct(
        slug=slug,
        name=name,
        brand_id=brand_id,
        meta=meta or {},
        specs=specs or {},
    )
    if product_id is not None:
        product.id = product_id
    return product


def make_plant(
    slug: str = "anubias-nana",
    *,
    common_name: str = "Anubias Nana",
    scientific_name: str | None = None,
    plant_id: str | None = None,
) -> CanonicalPlant:
    plant = CanonicalPlant(slug=slug, common_name=common_name, scientific_name=scientific_name)
    if plant_id is not None:
        plant.id = plant_id
    return plant


def make_offer(
    product: CanonicalProduct,
    *,
    retailer_id: str = "retailer-1",
    url: str = "https://shop.example.com/p/1",
    price_cents: int | None = 1000,
    in_stock: bool = True,
    last_checked_at: datetime | None = None,
    updated_at: datetime = FIXED_TIME,
) -> CanonicalOffer:
    return CanonicalOffer(
        product_id=product.id,
        retailer_id=retailer_id,
        url=url,
        price_cents=price_cents,
        in_stock=in_stock,
        last_checked_at=last_checked_at,
        created_at=updated_at,
        updated_at=updated_at,
    )


def make_override(
    canonical_id: str,
    field_path: str,
    value: JsonValue,
    *,
    canonical_type: CanonicalType = CanonicalType.PRODUCT,
    reason: str | None = "manual correction",
    updated_at: datetime = FIXED_TIME,
) -> NormalizationOverride:
    return NormalizationOverride(
        canonical_type=canonical_type,
        canonical_id=canonical_id,
        field_path=field_path,
        value=value,
        reason=reason,
        actor_user_id="admin-1",
        created_at=updated_at,
        updated_at=updated_at,
    )
