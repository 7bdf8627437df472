"""Render a curated asset list as a compact text block for the prompt builder.

Output depends only on the records: no clock, no locale, no reordering.
"""
from typing import Optional, Sequence

import pandas as pd

from common.models import AssetRecord

HEADER = "CURATED MARKET SNAPSHOT"
EMPTY_SNAPSHOT = "No market data available. Please use general market knowledge."
NA = "n/a"

FRAME_COLUMNS = [
    "symbol", "asset_type", "category", "price", "change_1h", "change_24h",
    "change_7d", "volume_24h", "rsi_14d", "trend_50_200", "is_trending", "is_volatile",
]


def format_pct(value: Optional[float]) -> str:
    if value is None:
        return NA
    if round(value, 2) == 0:
        return "+0.00%"
    return f"{value:+.2f}%"


def format_price(value: float) -> str:
    if value >= 1:
        return f"{value:.2f}"
    text = f"{value:.8f}".rstrip("0")
    return text + "0" if text.endswith(".") else text


def format_volume(value: Optional[float]) -> str:
    if value is None:
        return NA
    for threshold, suffix in ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")):
        if value >= threshold:
            return f"{value / threshold:.2f}{suffix}"
    return f"{value:.0f}"


def format_flags(record: AssetRecord) -> str:
    flags = [name for name, on in (("trending", record.is_trending),
                                   ("volatile", record.is_volatile)) if on]
    return ",".join(flags) if flags else "-"


def format_line(record: AssetRecord) -> str:
    rsi = f"{record.rsi_14d:.1f}" if record.rsi_14d is not None else NA
    trend = record.trend_50_200.value if record.trend_50_200 is not None else NA
    return " | ".join([
        record.symbol,
        record.asset_type.value,
        f"price {format_price(record.price)}",
        f"1h {format_pct(record.change_1h)}",
        f"24h {format_pct(record.change_24h)}",
        f"7d {format_pct(record.change_7d)}",
        f"vol {format_volume(record.volume_24h)}",
        f"rsi {rsi}",
        f"trend {trend}",
        format_flags(record),
    ])


def format_snapshot(records: Sequence[AssetRecord]) -> str:
    if not records:
        return EMPTY_SNAPSHOT
    lines = [f"{HEADER} ({len(records)} assets)"]
    lines.extend(format_line(r) for r in records)
    return "\n".join(lines)


def snapshot_frame(records: Sequence[AssetRecord]) -> pd.DataFrame:
    """Tabular view of a snapshot, category tag included, for debug logging."""
    rows = [r.model_dump(mode="json", include=set(FRAME_COLUMNS)) for r in records]
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)
