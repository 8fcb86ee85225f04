"""Pure catalog domain: model, normalization, matching, overrides and offer observations."""
