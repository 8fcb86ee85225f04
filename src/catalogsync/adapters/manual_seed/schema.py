"""Pydantic schema for manually curated seed files."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator


class SeedBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class SeedProduct(SeedBaseModel):
    id: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    name: str = Field(min_length=1)
    brand_id: str | None = None
    description: str | None = None
    image_url: str | None = None
    specs: dict[str, Any] = Field(default_factory=dict)
    model: str | None = None
    model_number: str | None = None
    sku: str | None = None
    upc: str | None = None
    ean: str | None = None
    gtin: str | None = None
    mpn: str | None = None
    asin: str | None = None
    identifiers: dict[str, str | int | float | bool] = Field(default_factory=dict)


class SeedPlant(SeedBaseModel):
    id: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    common_name: str = Field(min_length=1)
    scientific_name: str | None = None
    family: str | None = None
    description: str | None = None
    care: dict[str, Any] = Field(default_factory=dict)


class SeedOffer(SeedBaseModel):
    id: str = Field(min_length=1)
    product_id: str = Field(min_length=1)
    retailer_id: str = Field(min_length=1)
    url: str = Field(min_length=1)
    price_cents: NonNegativeInt | None = None
    currency: str = "USD"
    in_stock: bool = True

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        if len(value) != 3 or not value.isalpha():
            raise ValueError("currency must be a three-letter code")
        return value.upper()


class SeedDocument(SeedBaseModel):
    products: list[SeedProduct] = Field(default_factory=list)
    plants: list[SeedPlant] = Field(default_factory=list)
    offers: list[SeedOffer] = Field(default_factory=list)
