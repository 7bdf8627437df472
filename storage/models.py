"""SQLAlchemy ORM model for the market_assets table."""
from sqlalchemy import (
    Boolean, CheckConstraint, Column, Index, Integer, String, DECIMAL, TIMESTAMP,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    pass


class MarketAssetDB(Base):
    __tablename__ = "market_assets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    symbol = Column(String(32), unique=True, nullable=False)
    name = Column(String(100))
    asset_type = Column(
        String(20),
        CheckConstraint(
            "asset_type IN ('crypto', 'stock', 'etf', 'commodity')",
            name="ck_market_assets_type",
        ),
        nullable=False,
    )
    price = Column(DECIMAL(24, 10), nullable=False)

    change_1h = Column(DECIMAL(12, 4))
    change_24h = Column(DECIMAL(12, 4))
    change_7d = Column(DECIMAL(12, 4))
    volume_24h = Column(DECIMAL(30, 4))
    market_cap = Column(DECIMAL(30, 2))
    volatility_14d = Column(DECIMAL(12, 4))
    rsi_14d = Column(DECIMAL(6, 2))
    trend_50_200 = Column(String(20))

    is_liquid = Column(Boolean, nullable=False, server_default="false")
    is_trending = Column(Boolean, nullable=False, server_default="false")
    is_volatile = Column(Boolean, nullable=False, server_default="false")

    last_updated = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("idx_market_assets_type_updated", "asset_type", "last_updated"),
    )
