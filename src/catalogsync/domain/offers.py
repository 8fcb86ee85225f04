"""Merge price and stock observations into canonical offers.

``last_checked_at`` moves on every observation; ``updated_at`` and price history only move
when something observed actually differs from what is stored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, Protocol

from catalogsync.domain.model import CanonicalType, PriceHistoryPoint, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime, timedelta

    from catalogsync.domain.model import CanonicalOffer
    from catalogsync.domain.ports import CatalogRepositories, CatalogUnitOfWork

log = logging.getLogger(__name__)

# An override on any of these owns the product image; observations never fill it in.
PRODUCT_IMAGE_OVERRIDE_PATHS: Final = ("image_url", "image_urls")


@dataclass(frozen=True, slots=True)
class OfferObservationResult:
    meaningful_change: bool
    price_history_appended: bool
    product_image_hydrated: bool = False


class OfferProbe(Protocol):
    """Reachability check for an offer URL.

    ``True`` means the listing answered, ``False`` that it is gone, ``None`` that the answer
    says nothing about stock.
    """

    def __call__(self, url: str) -> bool | None: ...


@dataclass(slots=True)
class OfferRefreshResult:
    scanned: int = 0
    checked: int = 0
    failed: int = 0


def apply_offer_detail_observation(
    offer_id: str,
    checked_at: datetime,
    *,
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
    observed_price_cents: int | None = None,
    observed_currency: str | None = None,
    observed_in_stock: bool | None = None,
    observed_product_image_url: str | None = None,
) -> OfferObservationResult:
    """Record one observation of an offer; ``None`` for a field means it was not observed.

    An observed product image is copied onto the offer's product only while that product has
    no image of its own and no image override.
    """

    with unit_of_work_factory() as uow:
        offer = uow.repositories.offers.get(offer_id)
        if offer is None:
            log.debug("Offer %s vanished before its observation was applied", offer_id)
            return OfferObservationResult(meaningful_change=False, price_history_appended=False)

        next_price = offer.price_cents if observed_price_cents is None else observed_price_cents
        next_currency = offer.currency if observed_currency is None else observed_currency
        next_in_stock = offer.in_stock if observed_in_stock is None else observed_in_stock

        meaningful_change = _observation_changes(
            offer,
            price_cents=observed_price_cents,
            currency=observed_currency,
            in_stock=observed_in_stock,
        )

        offer.last_checked_at = checked_at
        history_appended = False
        if meaningful_change:
            offer.price_cents = next_price
            offer.currency = next_currency
            offer.in_stock = next_in_stock
            offer.updated_at = checked_at
            if next_price is not None:
                uow.repositories.price_history.add(
                    PriceHistoryPoint(
                        offer_id=offer.id,
                        price_cents=next_price,
                        in_stock=next_in_stock,
                        recorded_at=checked_at,
                    )
                )
                history_appended = True
        image_hydrated = _hydrate_product_image(
            uow.repositories,
            offer.product_id,
            observed_product_image_url,
            checked_at,
        )
        uow.commit()

    if meaningful_change:
        log.info(
            "Offer %s changed: price_cents=%s currency=%s in_stock=%s",
            offer_id,
            next_price,
            next_currency,
            next_in_stock,
        )
    if image_hydrated:
        log.info("Product image for offer %s filled from observation", offer_id)
    return OfferObservationResult(
        meaningful_change=meaningful_change,
        price_history_appended=history_appended,
        product_image_hydrated=image_hydrated,
    )


def apply_offer_head_observation(
    offer_id: str,
    ok: bool | None,
    checked_at: datetime,
    *,
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
) -> None:
    apply_offer_detail_observation(
        offer_id,
        checked_at,
        unit_of_work_factory=unit_of_work_factory,
        observed_in_stock=ok,
    )


def refresh_offer_heads(
    *,
    probe: OfferProbe,
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
    older_than: timedelta,
    limit: int,
    offer_id: str | None = None,
    now_provider: Callable[[], datetime] = utcnow,
) -> OfferRefreshResult:
    """Probe stale offers (or the single ``offer_id``) and record what the probe saw.

    A probe that raises marks that offer as failed; the remaining offers are still checked.
    """

    with unit_of_work_factory() as uow:
        offers = uow.repositories.offers
        if offer_id is not None:
            found = offers.get(offer_id)
            targets = [(found.id, found.url)] if found is not None else []
        else:
            cutoff = now_provider() - older_than
            targets = [
                (offer.id, offer.url) for offer in offers.list_stale(cutoff=cutoff, limit=limit)
            ]

    result = OfferRefreshResult(scanned=len(targets))
    for target_id, url in targets:
        try:
            ok = probe(url)
        except Exception:
            log.exception("Reachability probe failed for offer %s (%s)", target_id, url)
            result.failed += 1
            continue
        apply_offer_head_observation(
            target_id,
            ok,
            now_provider(),
            unit_of_work_factory=unit_of_work_factory,
        )
        result.checked += 1

    log.info(
        "Offer head refresh: scanned=%d checked=%d failed=%d",
        result.scanned,
        result.checked,
        result.failed,
    )
    return result


def _hydrate_product_image(
    repositories: CatalogRepositories,
    product_id: str,
    image_url: str | None,
    checked_at: datetime,
) -> bool:
    candidate = (image_url or "").strip()
    if not candidate:
        return False
    for field_path in PRODUCT_IMAGE_OVERRIDE_PATHS:
        override = repositories.overrides.find(CanonicalType.PRODUCT, product_id, field_path)
        if override is not None:
            return False

    product = repositories.products.get(product_id)
    if product is None or (product.image_url or "").strip():
        return False
    product.image_url = candidate
    product.updated_at = checked_at
    return True


def _observation_changes(
    offer: CanonicalOffer,
    *,
    price_cents: int | None,
    currency: str | None,
    in_stock: bool | None,
) -> bool:
    return (
        (price_cents is not None and price_cents != offer.price_cents)
        or (currency is not None and currency != offer.currency)
        or (in_stock is not None and in_stock != offer.in_stock)
    )
