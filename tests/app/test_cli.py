from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from catalogsync.domain.overrides import AdminOverrideError
from catalogsync.ui import cli as cli_module


def _stats() -> SimpleNamespace:
    return SimpleNamespace(processed=0, inserted=0, updated=0, failed=0)


def test_ingest_uses_default_source(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_ingest(path: Path, **kwargs: object) -> SimpleNamespace:
        captured["path"] = path
        captured.update(kwargs)
        return SimpleNamespace(products=_stats(), plants=_stats(), offers=_stats())

    monkeypatch.setattr(cli_module, "ingest_manual_seed", fake_ingest)

    cli_module.main(["ingest", "seed.json"])

    assert captured["path"] == Path("seed.json")
    assert captured["source"] == "manual_seed"


def test_override_create_parses_json_value(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_create(**kwargs: object) -> SimpleNamespace:
        captured.update(kwargs)
        return SimpleNamespace(id="override-1")

    monkeypatch.setattr(cli_module, "create_override", fake_create)

    cli_module.main(
        [
            "override",
            "create",
            "--canonical-type",
            "product",
            "--canonical-id",
            "p1",
            "--field-path",
            "specs.wattage",
            "--value",
            '{"watts": 45}',
            "--reason",
            "datasheet",
            "--actor",
            "admin-1",
        ]
    )

    assert captured == {
        "canonical_type": "product",
        "canonical_id": "p1",
        "field_path": "specs.wattage",
        "value": {"watts": 45},
        "reason": "datasheet",
        "actor_user_id": "admin-1",
    }


def test_override_create_rejects_invalid_json(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_create(**_: object) -> None:
        raise AssertionError("should not be called")

    monkeypatch.setattr(cli_module, "create_override", fake_create)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(
            [
                "override",
                "create",
                "--canonical-type",
                "product",
                "--canonical-id",
                "p1",
                "--field-path",
                "name",
                "--value",
                "not json",
                "--reason",
                "typo",
                "--actor",
                "admin-1",
            ]
        )

    assert excinfo.value.code == 2


def test_override_rejection_exits_with_validation_code(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_delete(**_: object) -> None:
        raise AdminOverrideError("Normalization override not found.")

    monkeypatch.setattr(cli_module, "delete_override", fake_delete)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["override", "delete", "--override-id", "missing", "--actor", "admin-1"])

    assert excinfo.value.code == 2


def test_unknown_canonical_type_is_rejected_by_argparse() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["override", "list", "--canonical-type", "fish", "--canonical-id", "x"])

    assert excinfo.value.code == 2


def test_offer_observe_out_of_stock(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_observe(offer_id: str, **kwargs: object) -> SimpleNamespace:
        captured["offer_id"] = offer_id
        captured.update(kwargs)
        return SimpleNamespace(
            meaningful_change=True, price_history_appended=True, product_image_hydrated=False
        )

    monkeypatch.setattr(cli_module, "observe_offer", fake_observe)

    cli_module.main(
        ["offer", "observe", "--offer-id", "o1", "--price-cents", "999", "--out-of-stock"]
    )

    assert captured == {
        "offer_id": "o1",
        "price_cents": 999,
        "currency": None,
        "in_stock": False,
        "product_image_url": None,
    }


def test_offer_observe_stock_defaults_to_unobserved(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_observe(offer_id: str, **kwargs: object) -> SimpleNamespace:
        captured.update(kwargs)
        return SimpleNamespace(
            meaningful_change=False, price_history_appended=False, product_image_hydrated=False
        )

    monkeypatch.setattr(cli_module, "observe_offer", fake_observe)

    cli_module.main(["offer", "observe", "--offer-id", "o1"])

    assert captured["in_stock"] is None
    assert captured["price_cents"] is None


def test_offer_observe_passes_product_image_url(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_observe(offer_id: str, **kwargs: object) -> SimpleNamespace:
        captured.update(kwargs)
        return SimpleNamespace(
            meaningful_change=False, price_history_appended=False, product_image_hydrated=True
        )

    monkeypatch.setattr(cli_module, "observe_offer", fake_observe)

    cli_module.main(
        ["offer", "observe", "--offer-id", "o1", "--product-image-url", "https://cdn.example/a.jpg"]
    )

    assert captured["product_image_url"] == "https://cdn.example/a.jpg"


def test_offer_observe_rejects_negative_price(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_observe(*_: object, **__: object) -> None:
        raise AssertionError("should not be called")

    monkeypatch.setattr(cli_module, "observe_offer", fake_observe)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["offer", "observe", "--offer-id", "o1", "--price-cents", "-1"])

    assert excinfo.value.code == 2


def test_offer_refresh_passes_offer_id(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_refresh(**kwargs: object) -> SimpleNamespace:
        captured.update(kwargs)
        return SimpleNamespace(scanned=1, checked=1, failed=0)

    monkeypatch.setattr(cli_module, "refresh_offer_heads_job", fake_refresh)

    cli_module.main(["offer", "refresh", "--offer-id", "o1"])

    assert captured == {"offer_id": "o1"}


def test_unexpected_error_exits_with_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_list(**_: object) -> None:
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(cli_module, "list_overrides", fake_list)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["override", "list"])

    assert excinfo.value.code == 1
