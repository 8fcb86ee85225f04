"""Translate validated seed documents into catalog ingest records."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import ValidationError

from catalogsync.domain.catalog_ingest import OfferRecord, PlantRecord, ProductRecord

from .schema import SeedDocument

if TYPE_CHECKING:
    from pathlib import Path

    from .schema import SeedOffer, SeedPlant, SeedProduct

log = logging.getLogger(__name__)


class SeedFileError(ValueError):
    """Raised when a seed file cannot be read or does not match the schema."""

    def __init__(self, path: Path, detail: str) -> None:
        super().__init__(f"Invalid seed file {path}: {detail}")
        self.path = path


@dataclass(slots=True)
class SeedBatch:
    products: list[ProductRecord] = field(default_factory=list)
    plants: list[PlantRecord] = field(default_factory=list)
    offers: list[OfferRecord] = field(default_factory=list)


def load_seed_file(path: Path) -> SeedBatch:
    """Read and validate a JSON seed file, returning domain ingest records."""

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SeedFileError(path, str(exc)) from exc

    try:
        document = SeedDocument.model_validate_json(raw)
    except ValidationError as exc:
        raise SeedFileError(path, _describe_validation_error(exc)) from exc

    batch = translate_seed_document(document)
    log.info(
        "Loaded seed file %s: %d products, %d plants, %d offers",
        path,
        len(batch.products),
        len(batch.plants),
        len(batch.offers),
    )
    return batch


def translate_seed_document(document: SeedDocument) -> SeedBatch:
    return SeedBatch(
        products=[_translate_product(product) for product in document.products],
        plants=[_translate_plant(plant) for plant in document.plants],
        offers=[_translate_offer(offer) for offer in document.offers],
    )


def _translate_product(product: SeedProduct) -> ProductRecord:
    return ProductRecord(
        source_entity_id=product.id,
        slug=product.slug,
        name=product.name,
        brand_id=product.brand_id,
        description=product.description,
        image_url=product.image_url,
        specs=dict(product.specs),
        model=product.model,
        model_number=product.model_number,
        sku=product.sku,
        upc=product.upc,
        ean=product.ean,
        gtin=product.gtin,
        mpn=product.mpn,
        asin=product.asin,
        identifiers=dict(product.identifiers),
    )


def _translate_plant(plant: SeedPlant) -> PlantRecord:
    return PlantRecord(
        source_entity_id=plant.id,
        slug=plant.slug,
        common_name=plant.common_name,
        scientific_name=plant.scientific_name,
        family=plant.family,
        description=plant.description,
        care=dict(plant.care),
    )


def _translate_offer(offer: SeedOffer) -> OfferRecord:
    return OfferRecord(
        source_entity_id=offer.id,
        product_source_entity_id=offer.product_id,
        retailer_id=offer.retailer_id,
        url=offer.url,
        price_cents=offer.price_cents,
        currency=offer.currency,
        in_stock=offer.in_stock,
    )


def _describe_validation_error(exc: ValidationError) -> str:
    errors = [
        {"loc": ".".join(str(part) for part in error["loc"]), "msg": error["msg"]}
        for error in exc.errors()
    ]
    return json.dumps(errors)
