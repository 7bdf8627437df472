"""Category definitions and the trading-style → strategy mapping.

A strategy is plain data: an ordered tuple of CategoryQuota values, each one a
predicate, a sort key and an optional explicit limit. Order matters, it decides
which duplicate survives the merge and which category is truncated first.
"""
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from common.errors import InvalidArgument
from common.models import AssetPreference, AssetRecord, AssetType, TradingStyle, TrendState


@dataclass(frozen=True)
class UniverseStats:
    """Aggregates over the fetched records that some predicates compare against."""
    avg_volume_24h: Optional[float] = None

    @classmethod
    def from_records(cls, records: Iterable[AssetRecord]) -> "UniverseStats":
        volumes = [r.volume_24h for r in records if r.volume_24h is not None]
        return cls(avg_volume_24h=sum(volumes) / len(volumes) if volumes else None)


Predicate = Callable[[AssetRecord, UniverseStats], bool]


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool = False

    def __call__(self, record: AssetRecord) -> tuple:
        value = getattr(record, self.field)
        if value is None:
            return (1, 0.0, record.symbol)
        return (0, -value if self.descending else value, record.symbol)


@dataclass(frozen=True)
class CategoryQuota:
    name: str
    predicate: Predicate
    sort_key: SortKey
    limit: Optional[int] = None  # None: share of the overall limit


@dataclass(frozen=True)
class Strategy:
    name: str
    categories: tuple[CategoryQuota, ...]
    asset_types: frozenset[AssetType]


# ── Category predicates ───────────────────────────────────────────────────────

def _gainer(r: AssetRecord, _: UniverseStats) -> bool:
    return r.is_liquid and r.change_7d is not None and r.change_7d > 3.0


def _loser(r: AssetRecord, _: UniverseStats) -> bool:
    return r.is_liquid and r.change_7d is not None and r.change_7d < -3.0


def _reversion(r: AssetRecord, _: UniverseStats) -> bool:
    return r.is_liquid and r.change_7d is not None and r.change_7d < -2.0


def _trending(r: AssetRecord, _: UniverseStats) -> bool:
    return r.is_liquid and r.is_trending


def _high_volatility(r: AssetRecord, _: UniverseStats) -> bool:
    return r.is_liquid and r.is_volatile


def _breakout(r: AssetRecord, stats: UniverseStats) -> bool:
    # consolidating (small 7d move) on above-average volume
    if not r.is_liquid or r.change_7d is None or r.volume_24h is None:
        return False
    if stats.avg_volume_24h is None:
        return False
    return abs(r.change_7d) < 5.0 and r.volume_24h > stats.avg_volume_24h * 1.2


def _steady_uptrend(r: AssetRecord, _: UniverseStats) -> bool:
    return (
        r.is_liquid
        and not r.is_volatile
        and r.change_7d is not None
        and r.change_7d > 0
        and r.trend_50_200 != TrendState.DEATH_CROSS
    )


CATEGORIES: dict[str, CategoryQuota] = {
    q.name: q for q in (
        CategoryQuota("gainer",          _gainer,          SortKey("change_7d", descending=True)),
        CategoryQuota("loser",           _loser,           SortKey("change_7d")),
        CategoryQuota("reversion",       _reversion,       SortKey("change_7d")),
        CategoryQuota("trending",        _trending,        SortKey("volume_24h", descending=True)),
        CategoryQuota("high_volatility", _high_volatility, SortKey("volatility_14d", descending=True)),
        CategoryQuota("breakout",        _breakout,        SortKey("volume_24h", descending=True)),
        CategoryQuota("steady_uptrend",  _steady_uptrend,  SortKey("volatility_14d")),
    )
}

STRATEGY_CATEGORIES: dict[str, tuple[str, ...]] = {
    "top_gainers":         ("gainer",),
    "top_losers":          ("loser",),
    "high_volatility":     ("high_volatility",),
    "trending":            ("trending",),
    "mean_reversion":      ("reversion",),
    "breakout_candidates": ("breakout",),
    "conservative_mix":    ("steady_uptrend", "reversion"),
    "balanced_mix":        ("gainer", "reversion", "trending"),
    "aggressive_mix":      ("high_volatility", "breakout", "gainer"),
}

STYLE_STRATEGIES = {
    TradingStyle.CONSERVATIVE: "conservative_mix",
    TradingStyle.BALANCED:     "balanced_mix",
    TradingStyle.AGGRESSIVE:   "aggressive_mix",
}

PREFERENCE_ASSET_TYPES = {
    AssetPreference.CRYPTO: frozenset({AssetType.CRYPTO}),
    AssetPreference.STOCKS: frozenset({AssetType.STOCK, AssetType.ETF}),
    AssetPreference.BOTH:   frozenset({AssetType.CRYPTO, AssetType.STOCK, AssetType.ETF}),
}


# ── Parsing ───────────────────────────────────────────────────────────────────

def _parse_enum(enum_cls, value, label: str):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            pass
    allowed = ", ".join(m.value for m in enum_cls)
    raise InvalidArgument(f"Unsupported {label} {value!r} (expected one of: {allowed})")


def parse_trading_style(value) -> TradingStyle:
    return _parse_enum(TradingStyle, value, "trading style")


def parse_asset_preference(value) -> AssetPreference:
    return _parse_enum(AssetPreference, value, "asset preference")


def parse_asset_type(value) -> AssetType:
    return _parse_enum(AssetType, value, "asset type")


# ── Public API ────────────────────────────────────────────────────────────────

def get_strategy(name: str, asset_types: Iterable[AssetType]) -> Strategy:
    """Build a named strategy over the given asset types."""
    try:
        category_names = STRATEGY_CATEGORIES[name]
    except (KeyError, TypeError):
        allowed = ", ".join(STRATEGY_CATEGORIES)
        raise InvalidArgument(f"Unknown strategy {name!r} (expected one of: {allowed})") from None
    types = frozenset(parse_asset_type(t) for t in asset_types)
    if not types:
        raise InvalidArgument("Strategy needs at least one asset type")
    return Strategy(
        name=name,
        categories=tuple(CATEGORIES[c] for c in category_names),
        asset_types=types,
    )


def resolve_strategy(trading_style, asset_preference) -> Strategy:
    """Map a (trading style, asset preference) pair to its strategy.

    Total over the valid pairs; anything else raises InvalidArgument instead of
    falling back to a default.
    """
    style = parse_trading_style(trading_style)
    preference = parse_asset_preference(asset_preference)
    return get_strategy(STYLE_STRATEGIES[style], PREFERENCE_ASSET_TYPES[preference])
