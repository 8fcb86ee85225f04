"""Resolve incoming plant observations to canonical plants.

Scientific name outranks slug: slugs are presentation artifacts that get reused across
re-slugging, a correctly transcribed botanical name is not.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from catalogsync.domain.normalization import normalize_scientific_name, normalize_slug

from .contracts import (
    NewCanonical,
    ScientificNameExactMatch,
    SlugExactMatch,
    prior_link_match,
    single_match_id,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.model import CanonicalPlant

    from .contracts import PlantMatchResult

log = logging.getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class PlantMatchParams:
    slug: str
    scientific_name: str | None = None
    existing_entity_canonical_id: str | None = None


def match_canonical_plant(
    params: PlantMatchParams,
    *,
    existing_plants: Sequence[CanonicalPlant] = (),
) -> PlantMatchResult:
    prior = prior_link_match(
        params.existing_entity_canonical_id,
        (plant.id for plant in existing_plants),
    )
    if prior is not None:
        return prior

    scientific_name = normalize_scientific_name(params.scientific_name or "")
    if scientific_name:
        matches = [
            plant.id
            for plant in existing_plants
            if plant.scientific_name
            and normalize_scientific_name(plant.scientific_name) == scientific_name
        ]
        canonical_id = single_match_id(matches)
        if canonical_id is not None:
            return ScientificNameExactMatch(canonical_id=canonical_id)
        if matches:
            log.debug(
                "Scientific name %r is shared by %d canonical plants; not used as a key",
                scientific_name,
                len(set(matches)),
            )

    slug = normalize_slug(params.slug)
    if slug:
        canonical_id = single_match_id(
            plant.id for plant in existing_plants if normalize_slug(plant.slug) == slug
        )
        if canonical_id is not None:
            return SlugExactMatch(canonical_id=canonical_id)

    return NewCanonical()
