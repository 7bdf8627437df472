"""Refresh-side flag derivation for market_assets rows.

The price fetchers only deliver quotes; the liquidity/trending/volatility flags
the curation categories rely on are computed here before the upsert.
"""
from datetime import datetime, timezone
from typing import Optional

from common.models import AssetRecord, AssetType
from config.settings import FLAG_THRESHOLDS


def derive_flags(
    asset_type: AssetType,
    change_24h: Optional[float] = None,
    change_7d: Optional[float] = None,
    volume_24h: Optional[float] = None,
) -> dict:
    """Return volatility_14d, is_liquid, is_trending and is_volatile for one quote.

    Crypto volatility is approximated by |7d change|, stock/ETF volatility by
    |24h change|. Commodities get no flags.
    """
    asset_type = AssetType(asset_type)
    thresholds = FLAG_THRESHOLDS.get(asset_type.value)
    if thresholds is None:
        return {"volatility_14d": None, "is_liquid": False,
                "is_trending": False, "is_volatile": False}

    basis = change_7d if asset_type == AssetType.CRYPTO else change_24h
    volatility = abs(basis) if basis else None
    return {
        "volatility_14d": volatility,
        "is_liquid": bool(volume_24h and volume_24h > thresholds["liquid_volume"]),
        "is_trending": bool(change_7d and abs(change_7d) > thresholds["trending_7d"]),
        "is_volatile": bool(volatility and volatility > thresholds["volatile"]),
    }


def build_record(quote: dict, asset_type: AssetType, now: Optional[datetime] = None) -> AssetRecord:
    """Turn a raw fetcher quote into an AssetRecord with derived flags."""
    flags = derive_flags(
        asset_type,
        change_24h=quote.get("change_24h"),
        change_7d=quote.get("change_7d"),
        volume_24h=quote.get("volume_24h"),
    )
    symbol = str(quote["symbol"]).upper()
    return AssetRecord(
        symbol=symbol,
        name=quote.get("name") or symbol,
        asset_type=asset_type,
        price=quote["price"],
        change_1h=quote.get("change_1h"),
        change_24h=quote.get("change_24h"),
        change_7d=quote.get("change_7d"),
        volume_24h=quote.get("volume_24h"),
        market_cap=quote.get("market_cap"),
        rsi_14d=quote.get("rsi_14d"),
        trend_50_200=quote.get("trend_50_200"),
        last_updated=now or datetime.now(timezone.utc),
        **flags,
    )
