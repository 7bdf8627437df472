"""Mock market universe for local runs when no refresh process is feeding the table."""
from datetime import datetime, timezone
from typing import Optional

import numpy as np

from common.models import AssetRecord, AssetType
from storage.flags import build_record

MOCK_UNIVERSE = [
    ("BTC",  "Bitcoin",        AssetType.CRYPTO, 64000.0),
    ("ETH",  "Ethereum",       AssetType.CRYPTO, 3200.0),
    ("SOL",  "Solana",         AssetType.CRYPTO, 150.0),
    ("XRP",  "XRP",            AssetType.CRYPTO, 0.55),
    ("DOGE", "Dogecoin",       AssetType.CRYPTO, 0.12),
    ("ADA",  "Cardano",        AssetType.CRYPTO, 0.45),
    ("AAPL", "Apple Inc.",     AssetType.STOCK,  190.0),
    ("MSFT", "Microsoft",      AssetType.STOCK,  410.0),
    ("NVDA", "NVIDIA",         AssetType.STOCK,  880.0),
    ("TSLA", "Tesla",          AssetType.STOCK,  175.0),
    ("AMD",  "AMD",            AssetType.STOCK,  160.0),
    ("JPM",  "JPMorgan Chase", AssetType.STOCK,  195.0),
    ("SPY",  "SPDR S&P 500",   AssetType.ETF,    510.0),
    ("QQQ",  "Invesco QQQ",    AssetType.ETF,    440.0),
    ("GLD",  "SPDR Gold",      AssetType.ETF,    215.0),
]


def mock_assets(seed: int = 42, now: Optional[datetime] = None) -> list[AssetRecord]:
    rng = np.random.default_rng(seed)
    now = now or datetime.now(timezone.utc)
    records = []
    for symbol, name, asset_type, base in MOCK_UNIVERSE:
        scale = 3.0 if asset_type == AssetType.CRYPTO else 1.0
        change_7d = float(rng.normal(0, 6 * scale))
        quote = {
            "symbol": symbol,
            "name": name,
            "price": base * (1 + change_7d / 100),
            "change_1h": float(rng.normal(0, 0.5 * scale)),
            "change_24h": float(rng.normal(0, 2 * scale)),
            "change_7d": change_7d,
            "volume_24h": float(rng.uniform(2e5, 5e9)),
            "rsi_14d": float(np.clip(50 + change_7d * 2, 0, 100)),
            "trend_50_200": "golden_cross" if change_7d > 0 else "death_cross",
        }
        records.append(build_record(quote, asset_type, now=now))
    return records
