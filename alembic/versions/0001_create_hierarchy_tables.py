"""create campaign hierarchy tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

import sqlalchemy as sa

from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

_STATUS = sa.Enum("Active", "Paused", "Deleted", name="status", native_enum=False, length=16)
_CREATIVE_TYPE = sa.Enum(
    "Image", "Video", "Carousel", name="creative_type", native_enum=False, length=16
)


def _delivery_columns() -> list[sa.Column]:
    return [
        sa.Column("impressions", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("clicks", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("spend", sa.Numeric(10, 2), nullable=False, server_default="0.00"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "campaigns",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("status", _STATUS, nullable=False, server_default="Active"),
        sa.Column("objective", sa.Text(), nullable=False),
        sa.Column("total_budget", sa.Numeric(10, 2), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        *_delivery_columns(),
    )

    op.create_table(
        "ad_sets",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("campaign_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("status", _STATUS, nullable=False, server_default="Active"),
        sa.Column("daily_budget", sa.Numeric(10, 2), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("targeting_description", sa.Text(), nullable=False),
        *_delivery_columns(),
        sa.ForeignKeyConstraint(["campaign_id"], ["campaigns.id"]),
    )
    op.create_index("ix_ad_sets_campaign_id", "ad_sets", ["campaign_id"])

    op.create_table(
        "ads",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("ad_set_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("status", _STATUS, nullable=False, server_default="Active"),
        sa.Column("creative_type", _CREATIVE_TYPE, nullable=False),
        sa.Column("media_url", sa.Text(), nullable=False),
        sa.Column("headline", sa.Text(), nullable=False),
        sa.Column("body_text", sa.Text(), nullable=False),
        sa.Column("call_to_action", sa.Text(), nullable=False),
        sa.Column("destination_url", sa.Text(), nullable=False),
        *_delivery_columns(),
        sa.ForeignKeyConstraint(["ad_set_id"], ["ad_sets.id"]),
    )
    op.create_index("ix_ads_ad_set_id", "ads", ["ad_set_id"])


def downgrade() -> None:
    op.drop_index("ix_ads_ad_set_id", table_name="ads")
    op.drop_table("ads")
    op.drop_index("ix_ad_sets_campaign_id", table_name="ad_sets")
    op.drop_table("ad_sets")
    op.drop_table("campaigns")
