"""Administrator maintenance of normalization overrides."""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Final

from catalogsync.domain.model import CanonicalType, NormalizationOverride, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from catalogsync.domain.model import JsonValue
    from catalogsync.domain.ports import CatalogRepositories, CatalogUnitOfWork

log = logging.getLogger(__name__)
audit_log = logging.getLogger("catalogsync.audit")

FIELD_PATH_RE: Final = re.compile(r"^[A-Za-z0-9_]+(?:\.[A-Za-z0-9_]+)*$")
MAX_FIELD_PATH_LENGTH: Final = 200
MAX_REASON_LENGTH: Final = 500
VALUE_PREVIEW_LENGTH: Final = 400


class AdminOverrideError(RuntimeError):
    """Raised when an override maintenance request is invalid."""


def create_normalization_override(
    *,
    canonical_type: CanonicalType | str,
    canonical_id: str,
    field_path: str,
    value: JsonValue,
    reason: str,
    actor_user_id: str,
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
    now: datetime | None = None,
) -> NormalizationOverride:
    """Validate and store a new override; one per (type, id, field path)."""

    entity_type = _parse_canonical_type(canonical_type)
    normalized_path = normalize_field_path(field_path)
    normalized_reason = _normalize_reason(reason)
    actor = _normalize_actor(actor_user_id)
    timestamp = now or utcnow()

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        _ensure_canonical_record_exists(repositories, entity_type, canonical_id)
        if repositories.overrides.find(entity_type, canonical_id, normalized_path) is not None:
            raise AdminOverrideError(
                "An override already exists for this canonical entity and field path."
            )

        override = NormalizationOverride(
            canonical_type=entity_type,
            canonical_id=canonical_id,
            field_path=normalized_path,
            value=value,
            reason=normalized_reason,
            actor_user_id=actor,
            created_at=timestamp,
            updated_at=timestamp,
        )
        repositories.overrides.add(override)
        uow.commit()

    _audit(
        "normalization.override.create",
        actor=actor,
        override_id=override.id,
        details=_describe(override),
    )
    return override


def update_normalization_override(
    *,
    override_id: str,
    canonical_type: CanonicalType | str,
    canonical_id: str,
    field_path: str,
    value: JsonValue,
    reason: str,
    actor_user_id: str,
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
    now: datetime | None = None,
) -> NormalizationOverride:
    entity_type = _parse_canonical_type(canonical_type)
    normalized_path = normalize_field_path(field_path)
    normalized_reason = _normalize_reason(reason)
    actor = _normalize_actor(actor_user_id)

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        override = repositories.overrides.get(override_id)
        if override is None:
            raise AdminOverrideError("Normalization override not found.")
        previous = _describe(override)

        _ensure_canonical_record_exists(repositories, entity_type, canonical_id)
        duplicate = repositories.overrides.find(entity_type, canonical_id, normalized_path)
        if duplicate is not None and duplicate.id != override_id:
            raise AdminOverrideError(
                "Another override already exists for this canonical entity and field path."
            )

        override.canonical_type = entity_type
        override.canonical_id = canonical_id
        override.field_path = normalized_path
        override.value = value
        override.reason = normalized_reason
        override.actor_user_id = actor
        override.updated_at = now or utcnow()
        uow.commit()

    _audit(
        "normalization.override.update",
        actor=actor,
        override_id=override_id,
        details={**_describe(override), "previous": previous},
    )
    return override


def delete_normalization_override(
    *,
    override_id: str,
    actor_user_id: str,
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
) -> None:
    actor = _normalize_actor(actor_user_id)

    with unit_of_work_factory() as uow:
        override = uow.repositories.overrides.get(override_id)
        if override is None:
            raise AdminOverrideError("Normalization override not found.")
        previous = _describe(override)
        uow.repositories.overrides.remove(override)
        uow.commit()

    _audit(
        "normalization.override.delete",
        actor=actor,
        override_id=override_id,
        details={"previous": previous},
    )


def list_normalization_overrides(
    *,
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
    canonical_type: CanonicalType | str | None = None,
    canonical_id: str | None = None,
) -> list[NormalizationOverride]:
    """Return overrides for one entity (ordered by field path), or all of them."""

    with unit_of_work_factory() as uow:
        if canonical_type is not None and canonical_id is not None:
            return uow.repositories.overrides.list_for_entity(
                _parse_canonical_type(canonical_type), canonical_id
            )
        if canonical_type is not None or canonical_id is not None:
            raise AdminOverrideError("Filter by both canonical type and id, or by neither.")
        return uow.repositories.overrides.list_all()


def normalize_field_path(field_path: str) -> str:
    normalized = field_path.strip()
    if not normalized:
        raise AdminOverrideError("Field path is required.")
    if len(normalized) > MAX_FIELD_PATH_LENGTH:
        raise AdminOverrideError(
            f"Field path must be at most {MAX_FIELD_PATH_LENGTH} characters."
        )
    if not FIELD_PATH_RE.fullmatch(normalized):
        raise AdminOverrideError(
            "Field path must use dot notation with letters, numbers, or underscore."
        )
    return normalized


def value_preview(value: object) -> str:
    try:
        rendered = json.dumps(value)
    except (TypeError, ValueError):
        return "[unserializable]"
    if len(rendered) <= VALUE_PREVIEW_LENGTH:
        return rendered
    return f"{rendered[:VALUE_PREVIEW_LENGTH]}…"


def _normalize_reason(reason: str) -> str:
    normalized = reason.strip()
    if not normalized:
        raise AdminOverrideError("Reason is required.")
    if len(normalized) > MAX_REASON_LENGTH:
        raise AdminOverrideError(f"Reason must be at most {MAX_REASON_LENGTH} characters.")
    return normalized


def _normalize_actor(actor_user_id: str) -> str:
    normalized = actor_user_id.strip()
    if not normalized:
        raise AdminOverrideError("Actor user id is required.")
    return normalized


def _parse_canonical_type(value: CanonicalType | str) -> CanonicalType:
    try:
        return CanonicalType(value)
    except ValueError as exc:
        raise AdminOverrideError("Unsupported canonical type.") from exc


def _ensure_canonical_record_exists(
    repositories: CatalogRepositories,
    canonical_type: CanonicalType,
    canonical_id: str,
) -> None:
    match canonical_type:
        case CanonicalType.PRODUCT:
            found = repositories.products.get(canonical_id) is not None
        case CanonicalType.PLANT:
            found = repositories.plants.get(canonical_id) is not None
        case CanonicalType.OFFER:
            found = repositories.offers.get(canonical_id) is not None
    if not found:
        raise AdminOverrideError(f"Canonical {canonical_type} not found.")


def _describe(override: NormalizationOverride) -> dict[str, object]:
    return {
        "canonical_type": str(override.canonical_type),
        "canonical_id": override.canonical_id,
        "field_path": override.field_path,
        "reason": override.reason,
        "value_preview": value_preview(override.value),
    }


def _audit(action: str, *, actor: str, override_id: str, details: dict[str, object]) -> None:
    audit_log.info(
        "%s actor=%s target=normalization_override:%s details=%s",
        action,
        actor,
        override_id,
        json.dumps(details, default=str),
    )
