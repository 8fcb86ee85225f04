"""Admin-authored normalization overrides: application and maintenance."""

from __future__ import annotations

from .admin import (
    AdminOverrideError,
    create_normalization_override,
    delete_normalization_override,
    list_normalization_overrides,
    update_normalization_override,
)
from .apply import (
    DEFAULT_OVERRIDE_REASON,
    OverrideExplainability,
    OverrideResolution,
    OverrideWinner,
    apply_normalization_overrides,
    apply_value_at_field_path,
    resolve_normalization_overrides,
    serialize_override_explainability,
)

__all__ = [
    "DEFAULT_OVERRIDE_REASON",
    "AdminOverrideError",
    "OverrideExplainability",
    "OverrideResolution",
    "OverrideWinner",
    "apply_normalization_overrides",
    "apply_value_at_field_path",
    "create_normalization_override",
    "delete_normalization_override",
    "list_normalization_overrides",
    "resolve_normalization_overrides",
    "serialize_override_explainability",
    "update_normalization_override",
]
