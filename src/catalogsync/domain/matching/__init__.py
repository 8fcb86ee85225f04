"""Deterministic entity resolution for products, plants and offers."""

from __future__ import annotations

from .contracts import (
    BrandModelFingerprintMatch,
    IdentifierExactMatch,
    MatchResult,
    NewCanonical,
    OfferMatchResult,
    PlantMatchResult,
    ProductMatchResult,
    ProductRetailerUrlFingerprintMatch,
    ScientificNameExactMatch,
    SlugExactMatch,
)
from .offer import OfferMatchParams, build_offer_fingerprint, match_canonical_offer
from .plant import PlantMatchParams, match_canonical_plant
from .product import (
    ProductMatchIndex,
    ProductMatchParams,
    build_brand_model_fingerprint,
    match_canonical_product,
)

__all__ = [
    "BrandModelFingerprintMatch",
    "IdentifierExactMatch",
    "MatchResult",
    "NewCanonical",
    "OfferMatchParams",
    "OfferMatchResult",
    "PlantMatchParams",
    "PlantMatchResult",
    "ProductMatchIndex",
    "ProductMatchParams",
    "ProductMatchResult",
    "ProductRetailerUrlFingerprintMatch",
    "ScientificNameExactMatch",
    "SlugExactMatch",
    "build_brand_model_fingerprint",
    "build_offer_fingerprint",
    "match_canonical_offer",
    "match_canonical_plant",
    "match_canonical_product",
]
