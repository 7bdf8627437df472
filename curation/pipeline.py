"""Curation pipeline: accessor → strategy → categories → merge → formatter.

Each call is independent. The only I/O is one read of the asset table; the
same fetched records are reused by every category of the strategy.
"""
from datetime import datetime
from typing import Optional, Sequence

from common.errors import InvalidArgument
from common.logger import get_logger
from common.models import AssetFilter, AssetRecord, Snapshot
from config.settings import FRESHNESS_WINDOW_MINUTES, SNAPSHOT_LIMIT
from curation.formatter import format_snapshot, snapshot_frame
from curation.selection import run_strategy
from curation.strategies import (
    Strategy,
    get_strategy,
    parse_asset_preference,
    parse_asset_type,
    parse_trading_style,
    resolve_strategy,
)
from storage import database

logger = get_logger("curation")


def _check_positive(value, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidArgument(f"{label} must be a positive integer, got {value!r}")
    return value


def curate_records(
    records: Sequence[AssetRecord],
    strategy: Strategy,
    overall_limit: int = SNAPSHOT_LIMIT,
) -> list[AssetRecord]:
    """Pure selection over already fetched records."""
    _check_positive(overall_limit, "limit")
    return run_strategy(strategy, records, overall_limit)


async def curate(
    trading_style,
    asset_preference,
    limit: int = SNAPSHOT_LIMIT,
    freshness_window_minutes: int = FRESHNESS_WINDOW_MINUTES,
    now: Optional[datetime] = None,
    strategy_name: Optional[str] = None,
) -> Snapshot:
    """Build the market snapshot for one (style, preference) pair.

    Every argument is validated before the table is read, so a bad style or
    preference never yields a partial result. SourceUnavailable from the
    accessor propagates unchanged.
    """
    style = parse_trading_style(trading_style)
    preference = parse_asset_preference(asset_preference)
    _check_positive(limit, "limit")
    _check_positive(freshness_window_minutes, "freshness_window_minutes")

    strategy = resolve_strategy(style, preference)
    if strategy_name is not None:
        strategy = get_strategy(strategy_name, strategy.asset_types)

    asset_filter = AssetFilter(
        asset_types=strategy.asset_types,
        max_age_minutes=freshness_window_minutes,
    )
    records = await database.fetch_assets(asset_filter, now=now)
    selected = curate_records(records, strategy, limit)

    logger.info(
        f"{style.value}/{preference.value} → {strategy.name}: "
        f"{len(selected)}/{limit} assets from {len(records)} candidates"
    )
    if selected:
        logger.debug("\n%s", snapshot_frame(selected).to_string(index=False))

    return Snapshot(
        strategy=strategy.name,
        trading_style=style,
        asset_preference=preference,
        assets=selected,
        text=format_snapshot(selected),
    )


async def top_assets_by_volume(
    asset_type,
    limit: int = 20,
    freshness_window_minutes: int = FRESHNESS_WINDOW_MINUTES,
    now: Optional[datetime] = None,
) -> list[str]:
    """Most traded liquid symbols of one asset type (symbol-analyzer suggestions)."""
    _check_positive(limit, "limit")
    _check_positive(freshness_window_minutes, "freshness_window_minutes")
    asset_filter = AssetFilter(
        asset_types=frozenset({parse_asset_type(asset_type)}),
        max_age_minutes=freshness_window_minutes,
    )
    records = await database.fetch_assets(asset_filter, now=now)
    liquid = sorted(
        (r for r in records if r.is_liquid),
        key=lambda r: (r.volume_24h is None, -(r.volume_24h or 0.0), r.symbol),
    )
    return [r.symbol for r in liquid[:limit]]
