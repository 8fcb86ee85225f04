"""Layer admin-authored overrides on top of freshly normalized field values.

Overrides always win for the fields they target, but only for fields the normalizer still
produces: an override whose root field is unknown is skipped, so rows written against an
older output shape stay inert instead of reintroducing removed fields.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final, Literal

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from catalogsync.domain.model import (
        CanonicalType,
        JsonObject,
        JsonValue,
        NormalizationOverride,
    )
    from catalogsync.domain.ports import NormalizationOverrideRepository

log = logging.getLogger(__name__)

DEFAULT_OVERRIDE_REASON: Final = "normalization_override"
EXPLAINABILITY_VERSION: Final = 1
EXPLAINABILITY_SOURCE: Final = "normalization_overrides"


@dataclass(frozen=True, slots=True, kw_only=True)
class OverrideWinner:
    """Why one field ended up with its value."""

    reason: str
    override_id: str
    updated_at: datetime
    winner: Literal["override"] = "override"

    def to_document(self) -> dict[str, str]:
        return {
            "winner": self.winner,
            "reason": self.reason,
            "overrideId": self.override_id,
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass(slots=True)
class OverrideExplainability:
    winner_by_field: dict[str, OverrideWinner]


@dataclass(slots=True)
class OverrideResolution:
    """Final values plus explainability.

    ``explainability`` is ``None`` when no override affected the entity, whether none were on
    file or all of them targeted unknown fields.
    """

    resolved_values: JsonObject
    explainability: OverrideExplainability | None


def apply_normalization_overrides(
    canonical_type: CanonicalType,
    canonical_id: str,
    normalized_values: Mapping[str, Any],
    *,
    overrides: NormalizationOverrideRepository,
) -> OverrideResolution:
    """Load the overrides on file for one canonical entity and apply them."""

    rows = overrides.list_for_entity(canonical_type, canonical_id)
    resolution = resolve_normalization_overrides(normalized_values, rows)
    if rows:
        applied = len(resolution.explainability.winner_by_field) if resolution.explainability else 0
        log.debug(
            "Applied %d of %d overrides to %s %s",
            applied,
            len(rows),
            canonical_type,
            canonical_id,
        )
    return resolution


def resolve_normalization_overrides(
    normalized_values: Mapping[str, Any],
    overrides: Iterable[NormalizationOverride],
) -> OverrideResolution:
    """Apply ``overrides`` in ascending ``field_path`` order to a deep copy of the values.

    When two overrides overlap (``specs`` and ``specs.wattage``) the one sorting later wins for
    the overlapping part.
    """

    resolved: JsonObject = copy.deepcopy(dict(normalized_values))
    winner_by_field: dict[str, OverrideWinner] = {}

    for override in sorted(overrides, key=lambda row: row.field_path):
        field_path = override.field_path.strip()
        if not field_path:
            continue
        if not apply_value_at_field_path(resolved, field_path, override.value):
            log.debug(
                "Skipping override %s: field path %r not produced by the normalizer",
                override.id,
                field_path,
            )
            continue
        winner_by_field[field_path] = OverrideWinner(
            reason=(override.reason or "").strip() or DEFAULT_OVERRIDE_REASON,
            override_id=override.id,
            updated_at=override.updated_at,
        )

    explainability = OverrideExplainability(winner_by_field) if winner_by_field else None
    return OverrideResolution(resolved_values=resolved, explainability=explainability)


def apply_value_at_field_path(target: JsonObject, field_path: str, value: JsonValue) -> bool:
    """Set ``value`` at a dotted path inside ``target``; return whether it was applied.

    The root segment must already be a key of ``target``. Below the root, missing or
    non-mapping intermediates are replaced with empty mappings.
    """

    segments = [segment.strip() for segment in field_path.split(".")]
    segments = [segment for segment in segments if segment]
    if not segments:
        return False

    root, *rest = segments
    if root not in target:
        return False
    if not rest:
        target[root] = copy.deepcopy(value)
        return True

    cursor = target[root]
    if not isinstance(cursor, dict):
        return False
    for segment in rest[:-1]:
        if not isinstance(cursor.get(segment), dict):
            cursor[segment] = {}
        cursor = cursor[segment]
    cursor[rest[-1]] = copy.deepcopy(value)
    return True


def serialize_override_explainability(
    explainability: OverrideExplainability | None,
) -> str | None:
    """Render explainability as a versioned JSON document, or ``None`` when there is nothing."""

    if explainability is None or not explainability.winner_by_field:
        return None
    return json.dumps(
        {
            "version": EXPLAINABILITY_VERSION,
            "source": EXPLAINABILITY_SOURCE,
            "winnerByField": {
                field_path: winner.to_document()
                for field_path, winner in explainability.winner_by_field.items()
            },
        }
    )
