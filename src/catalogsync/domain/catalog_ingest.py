"""Resolve a batch of source records into the canonical catalog.

Products are resolved first so offers can reference them by their source ids, then plants,
then offers. Each record goes through the same steps: look up its prior link, run the matcher
against the current snapshot, build normalized values, layer overrides on matched rows (a
brand-new row has none), and record the link with its match method and explainability.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from catalogsync.domain.matching import (
    OfferMatchParams,
    PlantMatchParams,
    ProductMatchParams,
    match_canonical_offer,
    match_canonical_plant,
    match_canonical_product,
)
from catalogsync.domain.matching.product import NAMED_IDENTIFIER_FIELDS
from catalogsync.domain.model import (
    DEFAULT_CURRENCY,
    CanonicalEntityMapping,
    CanonicalOffer,
    CanonicalPlant,
    CanonicalProduct,
    CanonicalType,
    utcnow,
)
from catalogsync.domain.normalization import InvalidUrlError
from catalogsync.domain.overrides import (
    apply_normalization_overrides,
    serialize_override_explainability,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime

    from catalogsync.domain.matching import MatchResult
    from catalogsync.domain.model import Entity, JsonObject
    from catalogsync.domain.ports import CatalogRepositories, CatalogUnitOfWork

log = logging.getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class ProductRecord:
    source_entity_id: str
    slug: str
    name: str
    brand_id: str | None = None
    description: str | None = None
    image_url: str | None = None
    specs: JsonObject = field(default_factory=dict)
    model: str | None = None
    model_number: str | None = None
    sku: str | None = None
    upc: str | None = None
    ean: str | None = None
    gtin: str | None = None
    mpn: str | None = None
    asin: str | None = None
    identifiers: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True, kw_only=True)
class PlantRecord:
    source_entity_id: str
    slug: str
    common_name: str
    scientific_name: str | None = None
    family: str | None = None
    description: str | None = None
    care: JsonObject = field(default_factory=dict)


@dataclass(slots=True, kw_only=True)
class OfferRecord:
    """A retailer listing; ``product_source_entity_id`` names a product of the same source."""

    source_entity_id: str
    product_source_entity_id: str
    retailer_id: str
    url: str
    price_cents: int | None = None
    currency: str = DEFAULT_CURRENCY
    in_stock: bool = True


@dataclass(slots=True)
class NormalizationStats:
    processed: int = 0
    inserted: int = 0
    updated: int = 0
    failed: int = 0


@dataclass(slots=True)
class IngestSummary:
    """Outcome of one batch, per canonical type."""

    products: NormalizationStats = field(default_factory=NormalizationStats)
    plants: NormalizationStats = field(default_factory=NormalizationStats)
    offers: NormalizationStats = field(default_factory=NormalizationStats)
    mappings_upserted: int = 0


def ingest_catalog_batch(
    source: str,
    *,
    products: Iterable[ProductRecord] = (),
    plants: Iterable[PlantRecord] = (),
    offers: Iterable[OfferRecord] = (),
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
    now_provider: Callable[[], datetime] = utcnow,
) -> IngestSummary:
    """Resolve and persist one source's records in a single unit of work.

    Records with a malformed offer URL or an unknown product reference are counted as failed
    and skipped; any other error rolls the whole batch back.
    """

    summary = IngestSummary()
    with unit_of_work_factory() as uow:
        batch = _CatalogBatch(source, uow.repositories, summary, now_provider)
        product_ids = {record.source_entity_id: batch.ingest_product(record) for record in products}
        for plant in plants:
            batch.ingest_plant(plant)
        for offer in offers:
            batch.ingest_offer(offer, product_ids)
        uow.commit()

    log.info(
        "Ingested %s: products=%s plants=%s offers=%s mappings=%d",
        source,
        summary.products,
        summary.plants,
        summary.offers,
        summary.mappings_upserted,
    )
    return summary


class _CatalogBatch:
    """Snapshot of canonical rows kept current as the batch creates and updates them."""

    def __init__(
        self,
        source: str,
        repositories: CatalogRepositories,
        summary: IngestSummary,
        now_provider: Callable[[], datetime],
    ) -> None:
        self.source = source
        self.repositories = repositories
        self.summary = summary
        self.now_provider = now_provider
        self.products = {row.id: row for row in repositories.products.list_all()}
        self.plants = {row.id: row for row in repositories.plants.list_all()}
        self.offers = {row.id: row for row in repositories.offers.list_all()}

    def ingest_product(self, record: ProductRecord) -> str:
        stats = self.summary.products
        stats.processed += 1
        prior_id = self._prior_canonical_id(CanonicalType.PRODUCT, record.source_entity_id)
        match = match_canonical_product(
            ProductMatchParams(
                slug=record.slug,
                source_entity_id=record.source_entity_id,
                name=record.name,
                brand_id=record.brand_id,
                existing_entity_canonical_id=prior_id,
                model=record.model,
                model_number=record.model_number,
                sku=record.sku,
                upc=record.upc,
                ean=record.ean,
                gtin=record.gtin,
                mpn=record.mpn,
                asin=record.asin,
                identifiers=record.identifiers,
            ),
            existing_products=tuple(self.products.values()),
        )

        existing = self.products.get(match.canonical_id) if match.canonical_id else None
        values: JsonObject = {
            "slug": record.slug,
            "name": record.name,
            "brand_id": record.brand_id,
            "description": record.description,
            "image_url": record.image_url,
            "specs": dict(record.specs),
            "meta": self._product_meta(record, existing),
        }
        if existing is None:
            product = CanonicalProduct(**values)
            self.repositories.products.add(product)
            self.products[product.id] = product
            stats.inserted += 1
            notes = None
        else:
            product = existing
            notes = self._update_with_overrides(CanonicalType.PRODUCT, product, values)
            stats.updated += 1

        self._upsert_mapping(
            CanonicalType.PRODUCT, record.source_entity_id, product.id, match, notes
        )
        return product.id

    def ingest_plant(self, record: PlantRecord) -> str:
        stats = self.summary.plants
        stats.processed += 1
        prior_id = self._prior_canonical_id(CanonicalType.PLANT, record.source_entity_id)
        match = match_canonical_plant(
            PlantMatchParams(
                slug=record.slug,
                scientific_name=record.scientific_name,
                existing_entity_canonical_id=prior_id,
            ),
            existing_plants=tuple(self.plants.values()),
        )

        values: JsonObject = {
            "slug": record.slug,
            "common_name": record.common_name,
            "scientific_name": record.scientific_name,
            "family": record.family,
            "description": record.description,
            "care": dict(record.care),
        }
        existing = self.plants.get(match.canonical_id) if match.canonical_id else None
        if existing is None:
            plant = CanonicalPlant(**values)
            self.repositories.plants.add(plant)
            self.plants[plant.id] = plant
            stats.inserted += 1
            notes = None
        else:
            plant = existing
            notes = self._update_with_overrides(CanonicalType.PLANT, plant, values)
            stats.updated += 1

        self._upsert_mapping(CanonicalType.PLANT, record.source_entity_id, plant.id, match, notes)
        return plant.id

    def ingest_offer(self, record: OfferRecord, product_ids: dict[str, str]) -> str | None:
        stats = self.summary.offers
        stats.processed += 1

        product_id = product_ids.get(record.product_source_entity_id)
        if product_id is None:
            product_id = self._prior_canonical_id(
                CanonicalType.PRODUCT, record.product_source_entity_id
            )
        if product_id is None or product_id not in self.products:
            log.warning(
                "Offer %s from %s references unknown product %s",
                record.source_entity_id,
                self.source,
                record.product_source_entity_id,
            )
            stats.failed += 1
            return None

        prior_id = self._prior_canonical_id(CanonicalType.OFFER, record.source_entity_id)
        try:
            match = match_canonical_offer(
                OfferMatchParams(
                    product_id=product_id,
                    retailer_id=record.retailer_id,
                    url=record.url,
                    existing_entity_canonical_id=prior_id,
                ),
                existing_offers=tuple(self.offers.values()),
            )
        except InvalidUrlError as exc:
            log.warning("Offer %s from %s skipped: %s", record.source_entity_id, self.source, exc)
            stats.failed += 1
            return None

        values: JsonObject = {
            "product_id": product_id,
            "retailer_id": record.retailer_id,
            "url": record.url.strip(),
            "price_cents": record.price_cents,
            "currency": record.currency,
            "in_stock": record.in_stock,
        }
        existing = self.offers.get(match.canonical_id) if match.canonical_id else None
        if existing is None:
            offer = CanonicalOffer(**values)
            self.repositories.offers.add(offer)
            self.offers[offer.id] = offer
            stats.inserted += 1
            notes = None
        else:
            offer = existing
            notes = self._update_with_overrides(CanonicalType.OFFER, offer, values)
            stats.updated += 1

        self._upsert_mapping(CanonicalType.OFFER, record.source_entity_id, offer.id, match, notes)
        return offer.id

    def _prior_canonical_id(
        self, canonical_type: CanonicalType, source_entity_id: str
    ) -> str | None:
        mapping = self.repositories.mappings.get(self.source, canonical_type, source_entity_id)
        return mapping.canonical_id if mapping is not None else None

    def _product_meta(self, record: ProductRecord, existing: CanonicalProduct | None) -> JsonObject:
        previous_sources = None
        if existing is not None and isinstance(existing.meta, dict):
            previous_sources = existing.meta.get("sources")
        sources = set(previous_sources) if isinstance(previous_sources, list) else set()
        sources.add(self.source)

        meta: JsonObject = {"sources": sorted(sources)}
        if record.model:
            meta["model"] = record.model
        if record.model_number:
            meta["model_number"] = record.model_number
        for name in NAMED_IDENTIFIER_FIELDS:
            value = getattr(record, name)
            if value:
                meta[name] = value
        if record.identifiers:
            meta["identifiers"] = dict(record.identifiers)
        return meta

    def _update_with_overrides(
        self,
        canonical_type: CanonicalType,
        entity: Entity,
        values: JsonObject,
    ) -> str | None:
        resolution = apply_normalization_overrides(
            canonical_type,
            entity.id,
            values,
            overrides=self.repositories.overrides,
        )
        for name, value in resolution.resolved_values.items():
            setattr(entity, name, value)
        entity.updated_at = self.now_provider()
        return serialize_override_explainability(resolution.explainability)

    def _upsert_mapping(
        self,
        canonical_type: CanonicalType,
        source_entity_id: str,
        canonical_id: str,
        match: MatchResult,
        notes: str | None,
    ) -> None:
        log.debug(
            "%s %s/%s -> %s via %s (%d)",
            canonical_type,
            self.source,
            source_entity_id,
            canonical_id,
            match.match_method,
            match.confidence,
        )
        mapping = self.repositories.mappings.get(self.source, canonical_type, source_entity_id)
        if mapping is None:
            self.repositories.mappings.add(
                CanonicalEntityMapping(
                    source=self.source,
                    canonical_type=canonical_type,
                    source_entity_id=source_entity_id,
                    canonical_id=canonical_id,
                    match_method=match.match_method,
                    confidence=match.confidence,
                    notes=notes,
                    updated_at=self.now_provider(),
                )
            )
        else:
            mapping.canonical_id = canonical_id
            mapping.match_method = match.match_method
            mapping.confidence = match.confidence
            mapping.notes = notes
            mapping.updated_at = self.now_provider()
        self.summary.mappings_upserted += 1
