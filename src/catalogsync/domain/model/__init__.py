"""Catalog domain model."""

from __future__ import annotations

from .catalog import (
    DEFAULT_CURRENCY,
    CanonicalEntityMapping,
    CanonicalOffer,
    CanonicalPlant,
    CanonicalProduct,
    Entity,
    JsonObject,
    JsonValue,
    NormalizationOverride,
    PriceHistoryPoint,
    new_id,
    utcnow,
)
from .enums import CanonicalType, MatchMethod

__all__ = [
    "DEFAULT_CURRENCY",
    "CanonicalEntityMapping",
    "CanonicalOffer",
    "CanonicalPlant",
    "CanonicalProduct",
    "CanonicalType",
    "Entity",
    "JsonObject",
    "JsonValue",
    "MatchMethod",
    "NormalizationOverride",
    "PriceHistoryPoint",
    "new_id",
    "utcnow",
]
