"""market_assets: one row per tradable instrument at the latest refresh.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "market_assets",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("symbol", sa.String(length=32), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("asset_type", sa.String(length=20), nullable=False),
        sa.Column("price", sa.DECIMAL(precision=24, scale=10), nullable=False),
        # % changes, nullable when the source does not report them
        sa.Column("change_1h", sa.DECIMAL(precision=12, scale=4), nullable=True),
        sa.Column("change_24h", sa.DECIMAL(precision=12, scale=4), nullable=True),
        sa.Column("change_7d", sa.DECIMAL(precision=12, scale=4), nullable=True),
        sa.Column("volume_24h", sa.DECIMAL(precision=30, scale=4), nullable=True),
        sa.Column("market_cap", sa.DECIMAL(precision=30, scale=2), nullable=True),
        sa.Column("volatility_14d", sa.DECIMAL(precision=12, scale=4), nullable=True),
        sa.Column("rsi_14d", sa.DECIMAL(precision=6, scale=2), nullable=True),
        sa.Column("trend_50_200", sa.String(length=20), nullable=True),
        # precomputed by the refresh job
        sa.Column("is_liquid", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("is_trending", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("is_volatile", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column(
            "last_updated",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "asset_type IN ('crypto', 'stock', 'etf', 'commodity')",
            name="ck_market_assets_type",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("symbol"),
    )
    op.create_index(
        "idx_market_assets_type_updated", "market_assets", ["asset_type", "last_updated"]
    )


def downgrade() -> None:
    op.drop_index("idx_market_assets_type_updated", table_name="market_assets")
    op.drop_table("market_assets")
