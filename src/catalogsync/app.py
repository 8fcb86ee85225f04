"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.adapters.http import HttpHeadProbe
from catalogsync.adapters.manual_seed import DEFAULT_SEED_SOURCE, load_seed_file
from catalogsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    is_started,
    startup,
)
from catalogsync.config import get_offer_refresh_config
from catalogsync.domain.catalog_ingest import IngestSummary, ingest_catalog_batch
from catalogsync.domain.model import utcnow
from catalogsync.domain.offers import (
    OfferObservationResult,
    OfferRefreshResult,
    apply_offer_detail_observation,
    refresh_offer_heads,
)
from catalogsync.domain.overrides import (
    create_normalization_override,
    delete_normalization_override,
    list_normalization_overrides,
    update_normalization_override,
)
from catalogsync.domain.ports import CatalogUnitOfWork

if TYPE_CHECKING:
    from datetime import datetime
    from pathlib import Path

    from catalogsync.config import OfferRefreshConfig
    from catalogsync.domain.model import CanonicalType, JsonValue, NormalizationOverride
    from catalogsync.domain.offers import OfferProbe

UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]


log = getLogger(__name__)


def _resolve_unit_of_work(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemyCatalogUnitOfWork


def ingest_manual_seed(
    path: Path,
    *,
    source: str = DEFAULT_SEED_SOURCE,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> IngestSummary:
    """Load a seed file and resolve its records into the catalog."""

    batch = load_seed_file(path)
    effective_uow = _resolve_unit_of_work(unit_of_work_factory)
    log.info("Starting catalog ingest: source=%s, path=%s", source, path)

    summary = ingest_catalog_batch(
        source,
        products=batch.products,
        plants=batch.plants,
        offers=batch.offers,
        unit_of_work_factory=effective_uow,
    )

    log.info(
        f"Finished catalog ingest: products={summary.products.processed}, "
        f"plants={summary.plants.processed}, offers={summary.offers.processed}, "
        f"mappings={summary.mappings_upserted}"
    )
    return summary


def create_override(
    *,
    canonical_type: CanonicalType | str,
    canonical_id: str,
    field_path: str,
    value: JsonValue,
    reason: str,
    actor_user_id: str,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> NormalizationOverride:
    return create_normalization_override(
        canonical_type=canonical_type,
        canonical_id=canonical_id,
        field_path=field_path,
        value=value,
        reason=reason,
        actor_user_id=actor_user_id,
        unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory),
    )


def update_override(
    *,
    override_id: str,
    canonical_type: CanonicalType | str,
    canonical_id: str,
    field_path: str,
    value: JsonValue,
    reason: str,
    actor_user_id: str,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> NormalizationOverride:
    return update_normalization_override(
        override_id=override_id,
        canonical_type=canonical_type,
        canonical_id=canonical_id,
        field_path=field_path,
        value=value,
        reason=reason,
        actor_user_id=actor_user_id,
        unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory),
    )


def delete_override(
    *,
    override_id: str,
    actor_user_id: str,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> None:
    delete_normalization_override(
        override_id=override_id,
        actor_user_id=actor_user_id,
        unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory),
    )


def list_overrides(
    *,
    canonical_type: CanonicalType | str | None = None,
    canonical_id: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[NormalizationOverride]:
    return list_normalization_overrides(
        canonical_type=canonical_type,
        canonical_id=canonical_id,
        unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory),
    )


def observe_offer(
    offer_id: str,
    *,
    price_cents: int | None = None,
    currency: str | None = None,
    in_stock: bool | None = None,
    product_image_url: str | None = None,
    checked_at: datetime | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> OfferObservationResult:
    """Record a manual price/stock observation for one offer."""

    return apply_offer_detail_observation(
        offer_id,
        checked_at or utcnow(),
        unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory),
        observed_price_cents=price_cents,
        observed_currency=currency,
        observed_in_stock=in_stock,
        observed_product_image_url=product_image_url,
    )


def refresh_offer_heads_job(
    probe: OfferProbe | None = None,
    *,
    config: OfferRefreshConfig | None = None,
    offer_id: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> OfferRefreshResult:
    """Re-probe stale offers using the configured refresh window.

    Without an explicit ``probe`` an :class:`HttpHeadProbe` is built from the config and closed
    when the run ends.
    """

    refresh_config = config or get_offer_refresh_config()
    if probe is None:
        with HttpHeadProbe(timeout_seconds=refresh_config.probe_timeout_seconds) as http_probe:
            return refresh_offer_heads_job(
                http_probe,
                config=refresh_config,
                offer_id=offer_id,
                unit_of_work_factory=unit_of_work_factory,
            )

    log.info(
        "Starting offer head refresh: older_than=%s, limit=%s, offer_id=%s",
        refresh_config.older_than,
        refresh_config.limit,
        offer_id,
    )
    return refresh_offer_heads(
        probe=probe,
        unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory),
        older_than=refresh_config.older_than,
        limit=refresh_config.limit,
        offer_id=offer_id,
    )
