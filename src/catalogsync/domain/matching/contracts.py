"""Match outcome variants shared by the product, plant and offer matchers.

Every matcher walks a ladder of strategies. Each rung either yields exactly one canonical id
or nothing; ambiguity (several candidate ids for one key) is "nothing", never a pick.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from typing import Final, Literal

from catalogsync.domain.model import MatchMethod

IDENTIFIER_EXACT_CONFIDENCE: Final = 100
BRAND_MODEL_FINGERPRINT_CONFIDENCE: Final = 92
SCIENTIFIC_NAME_EXACT_CONFIDENCE: Final = 97
SLUG_EXACT_CONFIDENCE: Final = 94
PRODUCT_RETAILER_URL_FINGERPRINT_CONFIDENCE: Final = 96
NEW_CANONICAL_CONFIDENCE: Final = 80


@dataclass(frozen=True, slots=True, kw_only=True)
class IdentifierExactMatch:
    """Matched through a prior link or a shared normalized identifier."""

    canonical_id: str
    confidence: int = IDENTIFIER_EXACT_CONFIDENCE
    match_method: Literal[MatchMethod.IDENTIFIER_EXACT] = MatchMethod.IDENTIFIER_EXACT


@dataclass(frozen=True, slots=True, kw_only=True)
class BrandModelFingerprintMatch:
    canonical_id: str
    confidence: int = BRAND_MODEL_FINGERPRINT_CONFIDENCE
    match_method: Literal[MatchMethod.BRAND_MODEL_FINGERPRINT] = (
        MatchMethod.BRAND_MODEL_FINGERPRINT
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class ScientificNameExactMatch:
    canonical_id: str
    confidence: int = SCIENTIFIC_NAME_EXACT_CONFIDENCE
    match_method: Literal[MatchMethod.SCIENTIFIC_NAME_EXACT] = MatchMethod.SCIENTIFIC_NAME_EXACT


@dataclass(frozen=True, slots=True, kw_only=True)
class SlugExactMatch:
    canonical_id: str
    confidence: int = SLUG_EXACT_CONFIDENCE
    match_method: Literal[MatchMethod.SLUG_EXACT] = MatchMethod.SLUG_EXACT


@dataclass(frozen=True, slots=True, kw_only=True)
class ProductRetailerUrlFingerprintMatch:
    canonical_id: str
    confidence: int = PRODUCT_RETAILER_URL_FINGERPRINT_CONFIDENCE
    match_method: Literal[MatchMethod.PRODUCT_RETAILER_URL_FINGERPRINT] = (
        MatchMethod.PRODUCT_RETAILER_URL_FINGERPRINT
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class NewCanonical:
    """No single canonical entity matched; the caller creates a new one.

    This is a final decision, not a retry signal.
    """

    canonical_id: None = None
    confidence: int = NEW_CANONICAL_CONFIDENCE
    match_method: Literal[MatchMethod.NEW_CANONICAL] = MatchMethod.NEW_CANONICAL


type ProductMatchResult = IdentifierExactMatch | BrandModelFingerprintMatch | NewCanonical
type PlantMatchResult = (
    IdentifierExactMatch | ScientificNameExactMatch | SlugExactMatch | NewCanonical
)
type OfferMatchResult = IdentifierExactMatch | ProductRetailerUrlFingerprintMatch | NewCanonical
type MatchResult = (
    IdentifierExactMatch
    | BrandModelFingerprintMatch
    | ScientificNameExactMatch
    | SlugExactMatch
    | ProductRetailerUrlFingerprintMatch
    | NewCanonical
)


def single_match_id(candidate_ids: Iterable[str]) -> str | None:
    """Return the only distinct id in ``candidate_ids``, or ``None`` when absent or ambiguous."""

    unique = set(candidate_ids)
    if len(unique) != 1:
        return None
    return next(iter(unique))


def group_ids_by_key[TKey: Hashable](pairs: Iterable[tuple[TKey, str]]) -> dict[TKey, list[str]]:
    grouped: dict[TKey, list[str]] = {}
    for key, canonical_id in pairs:
        grouped.setdefault(key, []).append(canonical_id)
    return grouped


def prior_link_match(
    existing_entity_canonical_id: str | None,
    existing_ids: Iterable[str],
) -> IdentifierExactMatch | None:
    """Reuse the canonical id a source record was linked to on a previous run, if still known."""

    if not existing_entity_canonical_id:
        return None
    if existing_entity_canonical_id not in set(existing_ids):
        return None
    return IdentifierExactMatch(canonical_id=existing_entity_canonical_id)
