from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from catalogsync.domain.model import CanonicalType
from catalogsync.domain.overrides import (
    DEFAULT_OVERRIDE_REASON,
    apply_normalization_overrides,
    apply_value_at_field_path,
    resolve_normalization_overrides,
    serialize_override_explainability,
)
from tests.helpers.catalog import FIXED_TIME, make_override

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork


def test_override_wins_and_unknown_root_is_skipped() -> None:
    price = make_override("p1", "price", 120)
    unknown = make_override("p1", "unknownField", 1)
    normalized = {"price": 100, "status": "active"}

    resolution = resolve_normalization_overrides(normalized, [unknown, price])

    assert resolution.resolved_values == {"price": 120, "status": "active"}
    assert resolution.explainability is not None
    assert set(resolution.explainability.winner_by_field) == {"price"}
    winner = resolution.explainability.winner_by_field["price"]
    assert winner.override_id == price.id
    assert winner.winner == "override"
    assert winner.reason == "manual correction"
    assert winner.updated_at == FIXED_TIME


def test_input_values_are_not_mutated() -> None:
    normalized = {"specs": {"wattage": 30, "tags": ["led"]}}

    resolution = resolve_normalization_overrides(
        normalized,
        [make_override("p1", "specs.wattage", 45), make_override("p1", "specs.tags", ["rgb"])],
    )

    assert normalized == {"specs": {"wattage": 30, "tags": ["led"]}}
    assert resolution.resolved_values == {"specs": {"wattage": 45, "tags": ["rgb"]}}


def test_no_overrides_yields_no_explainability() -> None:
    resolution = resolve_normalization_overrides({"name": "x"}, [])

    assert resolution.resolved_values == {"name": "x"}
    assert resolution.explainability is None


def test_only_inapplicable_overrides_yield_no_explainability() -> None:
    resolution = resolve_normalization_overrides(
        {"name": "x"},
        [make_override("p1", "missing", 1), make_override("p1", "other.nested", 2)],
    )

    assert resolution.resolved_values == {"name": "x"}
    assert resolution.explainability is None


def test_single_segment_replaces_structured_values() -> None:
    resolution = resolve_normalization_overrides(
        {"care": {"light": "low"}},
        [make_override("p1", "care", ["replaced"])],
    )

    assert resolution.resolved_values == {"care": ["replaced"]}


def test_nested_path_creates_missing_intermediates() -> None:
    resolution = resolve_normalization_overrides(
        {"specs": {"dimensions": 40}},
        [make_override("p1", "specs.dimensions.width", 60)],
    )

    assert resolution.resolved_values == {"specs": {"dimensions": {"width": 60}}}


def test_nested_path_under_scalar_root_is_skipped() -> None:
    resolution = resolve_normalization_overrides(
        {"name": "Plain"},
        [make_override("p1", "name.first", "x")],
    )

    assert resolution.resolved_values == {"name": "Plain"}
    assert resolution.explainability is None


def test_overrides_apply_in_field_path_order() -> None:
    whole = make_override("p1", "specs", {"wattage": 1, "lumens": 500})
    nested = make_override("p1", "specs.wattage", 2)

    resolution = resolve_normalization_overrides({"specs": {}}, [nested, whole])

    assert resolution.resolved_values == {"specs": {"wattage": 2, "lumens": 500}}
    assert resolution.explainability is not None
    assert list(resolution.explainability.winner_by_field) == ["specs", "specs.wattage"]


def test_blank_reason_uses_default() -> None:
    resolution = resolve_normalization_overrides(
        {"name": "x"},
        [make_override("p1", "name", "y", reason="  ")],
    )

    assert resolution.explainability is not None
    assert resolution.explainability.winner_by_field["name"].reason == DEFAULT_OVERRIDE_REASON


def test_apply_value_at_field_path_trims_segments() -> None:
    target = {"specs": {"a": 1}}

    assert apply_value_at_field_path(target, " specs . b ", 2) is True
    assert target == {"specs": {"a": 1, "b": 2}}
    assert apply_value_at_field_path(target, " . ", 3) is False


def test_serialize_explainability_document() -> None:
    override = make_override(
        "p1", "price", 120, updated_at=datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)
    )
    resolution = resolve_normalization_overrides({"price": 100}, [override])

    serialized = serialize_override_explainability(resolution.explainability)

    assert serialized is not None
    assert json.loads(serialized) == {
        "version": 1,
        "source": "normalization_overrides",
        "winnerByField": {
            "price": {
                "winner": "override",
                "reason": "manual correction",
                "overrideId": override.id,
                "updatedAt": "2025-01-02T03:04:05+00:00",
            }
        },
    }


def test_serialize_empty_explainability_is_none() -> None:
    assert serialize_override_explainability(None) is None


def test_apply_loads_entity_overrides_in_field_path_order(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
) -> None:
    nested = make_override("p1", "specs.wattage", 45)
    whole = make_override("p1", "specs", {"wattage": 10, "lumens": 900})
    elsewhere = make_override("p2", "name", "Other")
    with sqlite_unit_of_work() as uow:
        for override in (nested, elsewhere, whole):
            uow.repositories.overrides.add(override)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        resolution = apply_normalization_overrides(
            CanonicalType.PRODUCT,
            "p1",
            {"name": "Plant 3.0", "specs": {"wattage": 30}},
            overrides=uow.repositories.overrides,
        )

    assert resolution.resolved_values == {
        "name": "Plant 3.0",
        "specs": {"wattage": 45, "lumens": 900},
    }
    assert resolution.explainability is not None
    assert list(resolution.explainability.winner_by_field) == ["specs", "specs.wattage"]
    assert resolution.explainability.winner_by_field["specs.wattage"].override_id == nested.id
