"""Resolve incoming product observations to canonical products.

Ladder, first success wins:
1) prior link (the source row was already mapped to a canonical id that still exists)
2) exact normalized identifier (slug, source id, sku/upc/ean/gtin/mpn/asin, model number,
   open ``identifiers`` map)
3) brand + model fingerprint
4) new canonical
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from catalogsync.domain.normalization import normalize_free_text, normalize_identifier

from .contracts import (
    BrandModelFingerprintMatch,
    IdentifierExactMatch,
    NewCanonical,
    group_ids_by_key,
    prior_link_match,
    single_match_id,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from catalogsync.domain.model import CanonicalProduct

    from .contracts import ProductMatchResult

log = logging.getLogger(__name__)

NAMED_IDENTIFIER_FIELDS: tuple[str, ...] = ("sku", "upc", "ean", "gtin", "mpn", "asin")


@dataclass(slots=True, kw_only=True)
class ProductMatchParams:
    """Incoming product observation as seen by the matcher."""

    slug: str
    source_entity_id: str
    name: str
    brand_id: str | None = None
    existing_entity_canonical_id: str | None = None
    model: str | None = None
    model_number: str | None = None
    sku: str | None = None
    upc: str | None = None
    ean: str | None = None
    gtin: str | None = None
    mpn: str | None = None
    asin: str | None = None
    identifiers: Mapping[str, object] | None = None


@dataclass(slots=True)
class ProductMatchIndex:
    """Identifier and fingerprint lookups over a snapshot of canonical products.

    Building it is a full scan; callers matching many records against the same snapshot can
    build it once and pass it to :func:`match_canonical_product`.
    """

    known_ids: frozenset[str]
    ids_by_identifier: dict[str, list[str]] = field(default_factory=dict)
    ids_by_fingerprint: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_products(cls, products: Iterable[CanonicalProduct]) -> ProductMatchIndex:
        products = tuple(products)
        return cls(
            known_ids=frozenset(product.id for product in products),
            ids_by_identifier=group_ids_by_key(
                (identifier, product.id)
                for product in products
                for identifier in existing_product_identifiers(product)
            ),
            ids_by_fingerprint=group_ids_by_key(
                (fingerprint, product.id)
                for product in products
                if (fingerprint := existing_product_fingerprint(product)) is not None
            ),
        )


def match_canonical_product(
    params: ProductMatchParams,
    *,
    existing_products: Sequence[CanonicalProduct] = (),
    index: ProductMatchIndex | None = None,
) -> ProductMatchResult:
    """Return the canonical product ``params`` describes, or :class:`NewCanonical`."""

    lookup = index if index is not None else ProductMatchIndex.from_products(existing_products)

    prior = prior_link_match(params.existing_entity_canonical_id, lookup.known_ids)
    if prior is not None:
        return prior

    resolved_ids: list[str] = []
    for identifier in incoming_product_identifiers(params):
        canonical_id = single_match_id(lookup.ids_by_identifier.get(identifier, ()))
        if canonical_id is not None and canonical_id not in resolved_ids:
            resolved_ids.append(canonical_id)

    if len(resolved_ids) == 1:
        return IdentifierExactMatch(canonical_id=resolved_ids[0])
    if len(resolved_ids) > 1:
        log.warning(
            "Conflicting identifiers for product source_entity_id=%s point at %s",
            params.source_entity_id,
            resolved_ids,
        )
        return NewCanonical()

    fingerprint = build_brand_model_fingerprint(
        brand_id=params.brand_id,
        name=params.name,
        model=params.model,
        model_number=params.model_number,
    )
    if fingerprint is not None:
        canonical_id = single_match_id(lookup.ids_by_fingerprint.get(fingerprint, ()))
        if canonical_id is not None:
            return BrandModelFingerprintMatch(canonical_id=canonical_id)

    return NewCanonical()


def build_brand_model_fingerprint(
    *,
    brand_id: str | None,
    name: str,
    model: str | None,
    model_number: str | None,
) -> str | None:
    """Return ``"<brand_id>::<normalized model text>"`` or ``None`` when it cannot be formed."""

    if not brand_id:
        return None
    candidate = _first_non_blank(model_number, model, name)
    if candidate is None:
        return None
    normalized_model = normalize_free_text(candidate)
    if not normalized_model:
        return None
    return f"{brand_id}::{normalized_model}"


def incoming_product_identifiers(params: ProductMatchParams) -> tuple[str, ...]:
    values: list[str | None] = [
        params.slug,
        params.source_entity_id,
        params.sku,
        params.upc,
        params.ean,
        params.gtin,
        params.mpn,
        params.asin,
        params.model_number,
    ]
    if params.identifiers:
        values.extend(_sorted_identifier_values(params.identifiers))
    return _dedupe_normalized(values)


def existing_product_identifiers(product: CanonicalProduct) -> tuple[str, ...]:
    values: list[str | None] = [product.slug]
    meta = product.meta if isinstance(product.meta, Mapping) else None
    if meta is not None:
        values.extend(identifier_text(meta.get(name)) for name in NAMED_IDENTIFIER_FIELDS)
        values.append(identifier_text(meta.get("model_number")))
        nested = meta.get("identifiers")
        if isinstance(nested, Mapping):
            values.extend(_sorted_identifier_values(nested))
    return _dedupe_normalized(values)


def existing_product_fingerprint(product: CanonicalProduct) -> str | None:
    meta = product.meta if isinstance(product.meta, Mapping) else {}
    return build_brand_model_fingerprint(
        brand_id=product.brand_id,
        name=product.name,
        model=identifier_text(meta.get("model")),
        model_number=identifier_text(meta.get("model_number")),
    )


def identifier_text(value: object) -> str | None:
    """Render a loosely typed identifier value as text; unsupported values yield ``None``."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    return None


def _sorted_identifier_values(identifiers: Mapping[str, object]) -> list[str | None]:
    return [identifier_text(identifiers[key]) for key in sorted(identifiers, key=str)]


def _dedupe_normalized(values: Iterable[str | None]) -> tuple[str, ...]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if not value:
            continue
        normalized = normalize_identifier(value)
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        result.append(normalized)
    return tuple(result)


def _first_non_blank(*values: str | None) -> str | None:
    for value in values:
        if value and value.strip():
            return value.strip()
    return None
