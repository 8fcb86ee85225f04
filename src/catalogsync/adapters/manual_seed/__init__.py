"""Manually curated JSON seed files as a catalog source."""

from __future__ import annotations

from .schema import SeedDocument, SeedOffer, SeedPlant, SeedProduct
from .translator import SeedBatch, SeedFileError, load_seed_file, translate_seed_document

DEFAULT_SEED_SOURCE = "manual_seed"

__all__ = [
    "DEFAULT_SEED_SOURCE",
    "SeedBatch",
    "SeedDocument",
    "SeedFileError",
    "SeedOffer",
    "SeedPlant",
    "SeedProduct",
    "load_seed_file",
    "translate_seed_document",
]
