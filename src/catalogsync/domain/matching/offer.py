"""Resolve incoming offer listings to canonical offers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from catalogsync.domain.normalization import normalize_offer_url

from .contracts import (
    NewCanonical,
    ProductRetailerUrlFingerprintMatch,
    prior_link_match,
    single_match_id,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.model import CanonicalOffer

    from .contracts import OfferMatchResult


@dataclass(slots=True, kw_only=True)
class OfferMatchParams:
    product_id: str
    retailer_id: str
    url: str
    existing_entity_canonical_id: str | None = None


def build_offer_fingerprint(*, product_id: str, retailer_id: str, url: str) -> str:
    """Return ``"<product>::<retailer>::<normalized url>"``.

    Raises:
        InvalidUrlError: ``url`` does not parse.
    """

    return f"{product_id}::{retailer_id}::{normalize_offer_url(url)}"


def match_canonical_offer(
    params: OfferMatchParams,
    *,
    existing_offers: Sequence[CanonicalOffer] = (),
) -> OfferMatchResult:
    """Match on prior link, then on the (product, retailer, normalized URL) fingerprint.

    A malformed URL, incoming or on an existing offer, raises ``InvalidUrlError``; it is a data
    quality problem for the caller to surface, never a silent non-match.
    """

    prior = prior_link_match(
        params.existing_entity_canonical_id,
        (offer.id for offer in existing_offers),
    )
    if prior is not None:
        return prior

    fingerprint = build_offer_fingerprint(
        product_id=params.product_id,
        retailer_id=params.retailer_id,
        url=params.url,
    )
    canonical_id = single_match_id(
        offer.id
        for offer in existing_offers
        if build_offer_fingerprint(
            product_id=offer.product_id,
            retailer_id=offer.retailer_id,
            url=offer.url,
        )
        == fingerprint
    )
    if canonical_id is not None:
        return ProductRetailerUrlFingerprintMatch(canonical_id=canonical_id)

    return NewCanonical()
