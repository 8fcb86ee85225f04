"""Initial catalog schema.

Revision ID: 0001_initial_catalog
Revises:
Create Date: 2026-10-18 00:00:00
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial_catalog"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ID = sa.String(length=36)


def _canonical_type() -> sa.Enum:
    return sa.Enum("PRODUCT", "PLANT", "OFFER", name="canonicaltype", native_enum=False)


def upgrade() -> None:
    op.create_table(
        "product",
        sa.Column("id", ID, nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("brand_id", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("specs", sa.JSON(), nullable=False),
        sa.Column("meta", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_product")),
    )
    op.create_index(op.f("ix_product_slug"), "product", ["slug"])

    op.create_table(
        "plant",
        sa.Column("id", ID, nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("common_name", sa.String(), nullable=False),
        sa.Column("scientific_name", sa.String(), nullable=True),
        sa.Column("family", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("care", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_plant")),
    )
    op.create_index(op.f("ix_plant_slug"), "plant", ["slug"])

    op.create_table(
        "offer",
        sa.Column("id", ID, nullable=False),
        sa.Column("product_id", ID, nullable=False),
        sa.Column("retailer_id", sa.String(), nullable=False),
        sa.Column("url", sa.String(), nullable=False),
        sa.Column("price_cents", sa.Integer(), nullable=True),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("in_stock", sa.Boolean(), nullable=False),
        sa.Column("last_checked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["product_id"],
            ["product.id"],
            name=op.f("fk_offer_product_id_product"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_offer")),
    )
    op.create_index("ix_offer_product_retailer", "offer", ["product_id", "retailer_id"])

    op.create_table(
        "price_history",
        sa.Column("id", ID, nullable=False),
        sa.Column("offer_id", ID, nullable=False),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("in_stock", sa.Boolean(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["offer_id"],
            ["offer.id"],
            name=op.f("fk_price_history_offer_id_offer"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_price_history")),
    )
    op.create_index(
        "ix_price_history_offer_recorded", "price_history", ["offer_id", "recorded_at"]
    )

    op.create_table(
        "normalization_override",
        sa.Column("id", ID, nullable=False),
        sa.Column("canonical_type", _canonical_type(), nullable=False),
        sa.Column("canonical_id", ID, nullable=False),
        sa.Column("field_path", sa.String(length=200), nullable=False),
        sa.Column("value", sa.JSON(none_as_null=False), nullable=True),
        sa.Column("reason", sa.String(length=500), nullable=True),
        sa.Column("actor_user_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_normalization_override")),
        sa.UniqueConstraint(
            "canonical_type",
            "canonical_id",
            "field_path",
            name="uq_normalization_override_target",
        ),
    )

    op.create_table(
        "canonical_entity_mapping",
        sa.Column("id", ID, nullable=False),
        sa.Column("source", sa.String(), nullable=False),
        sa.Column("canonical_type", _canonical_type(), nullable=False),
        sa.Column("source_entity_id", sa.String(), nullable=False),
        sa.Column("canonical_id", ID, nullable=False),
        sa.Column("match_method", sa.String(), nullable=False),
        sa.Column("confidence", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_canonical_entity_mapping")),
        sa.UniqueConstraint(
            "source",
            "canonical_type",
            "source_entity_id",
            name="uq_canonical_entity_mapping_source_entity",
        ),
    )
    op.create_index(
        "ix_canonical_entity_mapping_canonical",
        "canonical_entity_mapping",
        ["canonical_type", "canonical_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_canonical_entity_mapping_canonical", table_name="canonical_entity_mapping")
    op.drop_table("canonical_entity_mapping")
    op.drop_table("normalization_override")
    op.drop_index("ix_price_history_offer_recorded", table_name="price_history")
    op.drop_table("price_history")
    op.drop_index("ix_offer_product_retailer", table_name="offer")
    op.drop_table("offer")
    op.drop_index(op.f("ix_plant_slug"), table_name="plant")
    op.drop_table("plant")
    op.drop_index(op.f("ix_product_slug"), table_name="product")
    op.drop_table("product")
