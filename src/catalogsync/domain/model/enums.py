"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class CanonicalType(StrEnum):
    """Kinds of canonical catalog entities that sources resolve to."""

    PRODUCT = "product"
    PLANT = "plant"
    OFFER = "offer"


class MatchMethod(StrEnum):
    """Named strategy that produced a match decision."""

    IDENTIFIER_EXACT = "identifier_exact"
    BRAND_MODEL_FINGERPRINT = "brand_model_fingerprint"
    SCIENTIFIC_NAME_EXACT = "scientific_name_exact"
    SLUG_EXACT = "slug_exact"
    PRODUCT_RETAILER_URL_FINGERPRINT = "product_retailer_url_fingerprint"
    NEW_CANONICAL = "new_canonical"
