"""Core Pydantic models for the market snapshot curation engine."""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class AssetType(str, Enum):
    CRYPTO = "crypto"
    STOCK = "stock"
    ETF = "etf"
    COMMODITY = "commodity"


class TradingStyle(str, Enum):
    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    AGGRESSIVE = "aggressive"


class AssetPreference(str, Enum):
    CRYPTO = "crypto"
    STOCKS = "stocks"
    BOTH = "both"


class TrendState(str, Enum):
    GOLDEN_CROSS = "golden_cross"
    DEATH_CROSS = "death_cross"
    NEUTRAL = "neutral"


class AssetRecord(BaseModel):
    """One row of the market_assets table at the latest refresh."""

    symbol: str
    name: str
    asset_type: AssetType
    price: float = Field(gt=0)
    change_1h: Optional[float] = None
    change_24h: Optional[float] = None
    change_7d: Optional[float] = None
    volume_24h: Optional[float] = Field(default=None, ge=0)
    market_cap: Optional[float] = Field(default=None, ge=0)
    volatility_14d: Optional[float] = Field(default=None, ge=0)
    rsi_14d: Optional[float] = Field(default=None, ge=0, le=100)
    trend_50_200: Optional[TrendState] = None
    is_liquid: bool = False
    is_trending: bool = False
    is_volatile: bool = False
    last_updated: datetime
    category: Optional[str] = None  # set by the category that selected it

    @field_validator("is_liquid", "is_trending", "is_volatile", mode="before")
    @classmethod
    def _null_flag_is_false(cls, v):
        return False if v is None else v

    @field_validator("trend_50_200", mode="before")
    @classmethod
    def _normalize_trend(cls, v):
        if v is None or v == "":
            return None
        return str(v).strip().lower().replace("-", "_").replace(" ", "_")

    @field_validator("last_updated")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class AssetFilter(BaseModel):
    asset_types: frozenset[AssetType]
    max_age_minutes: int = Field(default=120, gt=0)


class Snapshot(BaseModel):
    """Result of one curation call. Never persisted by the engine."""

    strategy: str
    trading_style: Optional[TradingStyle] = None
    asset_preference: Optional[AssetPreference] = None
    assets: list[AssetRecord] = []
    text: str

    @property
    def symbols(self) -> list[str]:
        return [a.symbol for a in self.assets]
