from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from catalogsync.domain.catalog_ingest import (
    OfferRecord,
    PlantRecord,
    ProductRecord,
    ingest_catalog_batch,
)
from catalogsync.domain.model import CanonicalType, MatchMethod
from tests.helpers.catalog import make_override, make_plant

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork

    UowFactory = Callable[[], SqlAlchemyCatalogUnitOfWork]

INGESTED_AT = datetime(2025, 4, 1, 8, 0, tzinfo=UTC)


def _product(source_entity_id: str = "prod-1", **overrides: object) -> ProductRecord:
    values: dict[str, object] = {
        "source_entity_id": source_entity_id,
        "slug": "fluval-plant-3",
        "name": "Fluval Plant 3.0",
        "brand_id": "fluval",
        "sku": "X1",
        "specs": {"wattage": 30},
    }
    values.update(overrides)
    return ProductRecord(**values)  # type: ignore[arg-type]


def _ingest(uow_factory: UowFactory, source: str = "seed", **records: object):  # noqa: ANN202
    return ingest_catalog_batch(
        source,
        unit_of_work_factory=uow_factory,
        now_provider=lambda: INGESTED_AT,
        **records,  # type: ignore[arg-type]
    )


def test_ingest_inserts_new_rows_and_mappings(sqlite_unit_of_work: UowFactory) -> None:
    summary = _ingest(
        sqlite_unit_of_work,
        products=[_product()],
        plants=[
            PlantRecord(source_entity_id="plant-1", slug="java-fern", common_name="Java Fern")
        ],
        offers=[
            OfferRecord(
                source_entity_id="offer-1",
                product_source_entity_id="prod-1",
                retailer_id="aqua-shop",
                url="https://shop.example.com/p/1",
                price_cents=12999,
            )
        ],
    )

    assert (summary.products.inserted, summary.plants.inserted, summary.offers.inserted) == (
        1,
        1,
        1,
    )
    assert summary.mappings_upserted == 3

    with sqlite_unit_of_work() as uow:
        (product,) = uow.repositories.products.list_all()
        (offer,) = uow.repositories.offers.list_all()
        mapping = uow.repositories.mappings.get("seed", CanonicalType.PRODUCT, "prod-1")

        assert product.meta == {"sources": ["seed"], "sku": "X1"}
        assert product.specs == {"wattage": 30}
        assert offer.product_id == product.id
        assert offer.price_cents == 12999
        assert mapping is not None
        assert mapping.canonical_id == product.id
        assert mapping.match_method == MatchMethod.NEW_CANONICAL
        assert mapping.confidence == 80
        assert mapping.notes is None


def test_reingest_is_idempotent(sqlite_unit_of_work: UowFactory) -> None:
    records = {
        "products": [_product()],
        "plants": [PlantRecord(source_entity_id="plant-1", slug="java-fern", common_name="Fern")],
    }
    _ingest(sqlite_unit_of_work, **records)

    summary = _ingest(sqlite_unit_of_work, **records)

    assert summary.products.inserted == 0
    assert summary.products.updated == 1
    assert summary.plants.updated == 1
    with sqlite_unit_of_work() as uow:
        assert len(uow.repositories.products.list_all()) == 1
        assert len(uow.repositories.plants.list_all()) == 1
        mapping = uow.repositories.mappings.get("seed", CanonicalType.PRODUCT, "prod-1")
        assert mapping is not None
        assert mapping.match_method == MatchMethod.IDENTIFIER_EXACT
        assert mapping.confidence == 100
        assert len(uow.repositories.mappings.list_for_source("seed", CanonicalType.PRODUCT)) == 1


def test_case_folded_sku_from_other_source_resolves_to_same_product(
    sqlite_unit_of_work: UowFactory,
) -> None:
    _ingest(sqlite_unit_of_work, source="retailer-a", products=[_product()])

    summary = _ingest(
        sqlite_unit_of_work,
        source="retailer-b",
        products=[_product("b-77", slug="plant-3-led", name="Plant 3.0 LED", sku="x1")],
    )

    assert summary.products.updated == 1
    with sqlite_unit_of_work() as uow:
        (product,) = uow.repositories.products.list_all()
        mapping = uow.repositories.mappings.get("retailer-b", CanonicalType.PRODUCT, "b-77")
        assert mapping is not None
        assert mapping.canonical_id == product.id
        assert mapping.match_method == MatchMethod.IDENTIFIER_EXACT
        assert product.meta["sources"] == ["retailer-a", "retailer-b"]


def test_ambiguous_scientific_name_creates_new_plant(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.plants.add(
            make_plant("anubias-nana", scientific_name="Anubias barteri var. nana")
        )
        uow.repositories.plants.add(
            make_plant("anubias-nana-petite", scientific_name="Anubias barteri var nana")
        )
        uow.commit()

    summary = _ingest(
        sqlite_unit_of_work,
        source="other",
        plants=[
            PlantRecord(
                source_entity_id="c",
                slug="dwarf-anubias",
                common_name="Dwarf Anubias",
                scientific_name="anubias barteri var nana",
            )
        ],
    )

    assert summary.plants.inserted == 1
    with sqlite_unit_of_work() as uow:
        assert len(uow.repositories.plants.list_all()) == 3


def test_overrides_survive_reingest_and_are_explained(sqlite_unit_of_work: UowFactory) -> None:
    _ingest(sqlite_unit_of_work, products=[_product()])
    with sqlite_unit_of_work() as uow:
        (product,) = uow.repositories.products.list_all()
        override = make_override(product.id, "specs.wattage", 45)
        uow.repositories.overrides.add(override)
        uow.repositories.overrides.add(make_override(product.id, "retired_field", "x"))
        uow.commit()

    _ingest(sqlite_unit_of_work, products=[_product(specs={"wattage": 32, "lumens": 2350})])

    with sqlite_unit_of_work() as uow:
        (product,) = uow.repositories.products.list_all()
        mapping = uow.repositories.mappings.get("seed", CanonicalType.PRODUCT, "prod-1")
        assert product.specs == {"wattage": 45, "lumens": 2350}
        assert product.updated_at == INGESTED_AT
        assert mapping is not None
        assert mapping.notes is not None
        notes = json.loads(mapping.notes)
        assert notes["source"] == "normalization_overrides"
        assert list(notes["winnerByField"]) == ["specs.wattage"]
        assert notes["winnerByField"]["specs.wattage"]["overrideId"] == override.id


@pytest.mark.parametrize("meta_value", ["x", []])
def test_reingest_survives_meta_replaced_by_override(
    sqlite_unit_of_work: UowFactory,
    meta_value: object,
) -> None:
    _ingest(sqlite_unit_of_work, products=[_product()])
    with sqlite_unit_of_work() as uow:
        (product,) = uow.repositories.products.list_all()
        uow.repositories.overrides.add(make_override(product.id, "meta", meta_value))
        uow.commit()

    _ingest(sqlite_unit_of_work, products=[_product()])
    summary = _ingest(sqlite_unit_of_work, products=[_product(name="Fluval Plant 3.0 Pro")])

    assert summary.products.updated == 1
    assert summary.products.failed == 0
    with sqlite_unit_of_work() as uow:
        (product,) = uow.repositories.products.list_all()
        assert product.name == "Fluval Plant 3.0 Pro"
        assert product.meta == meta_value


def test_bad_offers_are_counted_as_failed(sqlite_unit_of_work: UowFactory) -> None:
    summary = _ingest(
        sqlite_unit_of_work,
        products=[_product()],
        offers=[
            OfferRecord(
                source_entity_id="bad-url",
                product_source_entity_id="prod-1",
                retailer_id="shop",
                url="not a url",
            ),
            OfferRecord(
                source_entity_id="orphan",
                product_source_entity_id="missing",
                retailer_id="shop",
                url="https://shop.example.com/p/2",
            ),
            OfferRecord(
                source_entity_id="good",
                product_source_entity_id="prod-1",
                retailer_id="shop",
                url="https://shop.example.com/p/1",
            ),
        ],
    )

    assert summary.offers.processed == 3
    assert summary.offers.failed == 2
    assert summary.offers.inserted == 1
    assert summary.mappings_upserted == 2


def test_offer_can_reference_product_from_earlier_batch(sqlite_unit_of_work: UowFactory) -> None:
    _ingest(sqlite_unit_of_work, products=[_product()])

    summary = _ingest(
        sqlite_unit_of_work,
        offers=[
            OfferRecord(
                source_entity_id="offer-1",
                product_source_entity_id="prod-1",
                retailer_id="shop",
                url="https://shop.example.com/p/1?b=2&a=1",
            )
        ],
    )
    again = _ingest(
        sqlite_unit_of_work,
        offers=[
            OfferRecord(
                source_entity_id="offer-1-copy",
                product_source_entity_id="prod-1",
                retailer_id="shop",
                url="https://SHOP.example.com/p/1/?a=1&b=2",
            )
        ],
    )

    assert summary.offers.inserted == 1
    assert again.offers.updated == 1
    with sqlite_unit_of_work() as uow:
        assert len(uow.repositories.offers.list_all()) == 1
        mapping = uow.repositories.mappings.get("seed", CanonicalType.OFFER, "offer-1-copy")
        assert mapping is not None
        assert mapping.match_method == MatchMethod.PRODUCT_RETAILER_URL_FINGERPRINT
