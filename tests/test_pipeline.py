"""End-to-end tests for curate() over the CSV backend."""
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from common.errors import InvalidArgument, SourceUnavailable
from common.models import AssetRecord, AssetType, Snapshot, TradingStyle
from curation import pipeline
from curation.formatter import EMPTY_SNAPSHOT
from curation.pipeline import curate, top_assets_by_volume
from storage import database
from storage.database import save_assets
from storage.mock_data import mock_assets

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_asset(symbol: str, asset_type: str = "crypto", age_minutes: float = 10, **kw) -> AssetRecord:
    fields = dict(
        symbol=symbol,
        name=symbol,
        asset_type=asset_type,
        price=50.0,
        is_liquid=True,
        last_updated=NOW - timedelta(minutes=age_minutes),
    )
    fields.update(kw)
    return AssetRecord(**fields)


UNIVERSE = [
    make_asset("BTC", change_7d=12.0, is_trending=True, volume_24h=9e9),
    make_asset("ETH", change_7d=6.0, volume_24h=5e9),
    make_asset("SOL", change_7d=-8.0, volume_24h=2e9, is_volatile=True, volatility_14d=25.0),
    make_asset("DOGE", change_7d=-3.5, volume_24h=1e9),
    make_asset("AAPL", "stock", change_7d=4.0, volume_24h=6e7),
    make_asset("TSLA", "stock", change_7d=-6.0, volume_24h=9e7, is_volatile=True, volatility_14d=4.5),
    make_asset("SPY", "etf", change_7d=1.0, is_trending=True, volume_24h=8e7),
    make_asset("MOON", change_7d=80.0, volume_24h=1e10, age_minutes=180),
]


@pytest.mark.asyncio
class TestCurate:
    async def test_balanced_snapshot(self, csv_backend: Path) -> None:
        await save_assets(UNIVERSE)
        snap = await curate("balanced", "both", now=NOW)
        assert isinstance(snap, Snapshot)
        assert snap.strategy == "balanced_mix"
        assert snap.trading_style == TradingStyle.BALANCED
        assert snap.symbols == ["BTC", "ETH", "AAPL", "SOL", "TSLA", "DOGE", "SPY"]
        assert snap.assets[0].category == "gainer"
        assert snap.assets[-1].category == "trending"
        assert snap.text.splitlines()[1].startswith("BTC | crypto |")

    async def test_stale_top_candidate_never_appears(self, csv_backend: Path) -> None:
        await save_assets(UNIVERSE)
        for style in TradingStyle:
            snap = await curate(style, "both", now=NOW)
            assert "MOON" not in snap.symbols

    async def test_wider_window_lets_it_in(self, csv_backend: Path) -> None:
        await save_assets(UNIVERSE)
        snap = await curate("balanced", "crypto", freshness_window_minutes=240, now=NOW)
        assert snap.symbols[0] == "MOON"

    async def test_preference_filters_types(self, csv_backend: Path) -> None:
        await save_assets(UNIVERSE)
        crypto = await curate("balanced", "crypto", now=NOW)
        stocks = await curate("balanced", "stocks", now=NOW)
        assert {a.asset_type for a in crypto.assets} == {AssetType.CRYPTO}
        assert {a.asset_type for a in stocks.assets} <= {AssetType.STOCK, AssetType.ETF}

    async def test_limit_bound(self, csv_backend: Path) -> None:
        await save_assets(UNIVERSE)
        snap = await curate("balanced", "both", limit=2, now=NOW)
        assert len(snap.assets) <= 2

    async def test_deterministic_text(self, csv_backend: Path) -> None:
        await save_assets(mock_assets(now=NOW - timedelta(minutes=1)))
        first = await curate("aggressive", "both", now=NOW)
        second = await curate("aggressive", "both", now=NOW)
        assert first.text == second.text
        assert first.symbols == second.symbols

    async def test_thin_market_is_not_an_error(self, csv_backend: Path) -> None:
        await database.init_db()
        snap = await curate("conservative", "both", now=NOW)
        assert snap.assets == []
        assert snap.text == EMPTY_SNAPSHOT

    async def test_strategy_override(self, csv_backend: Path) -> None:
        await save_assets(UNIVERSE)
        snap = await curate("balanced", "both", now=NOW, strategy_name="top_losers")
        assert snap.strategy == "top_losers"
        assert snap.symbols == ["SOL", "TSLA", "DOGE"]

    async def test_unavailable_source_propagates(self, csv_backend: Path) -> None:
        with pytest.raises(SourceUnavailable):
            await curate("balanced", "both", now=NOW)


@pytest.mark.asyncio
class TestCurateValidation:
    @pytest.mark.parametrize("kwargs", [
        {"trading_style": "scalping", "asset_preference": "both"},
        {"trading_style": "balanced", "asset_preference": "forex"},
        {"trading_style": "balanced", "asset_preference": "both", "limit": 0},
        {"trading_style": "balanced", "asset_preference": "both", "freshness_window_minutes": -5},
        {"trading_style": "balanced", "asset_preference": "both", "strategy_name": "yolo"},
    ])
    async def test_fails_before_reading(self, monkeypatch, kwargs) -> None:
        fetch = AsyncMock(return_value=[])
        monkeypatch.setattr(pipeline.database, "fetch_assets", fetch)
        with pytest.raises(InvalidArgument):
            await curate(**kwargs)
        fetch.assert_not_awaited()


@pytest.mark.asyncio
class TestTopAssetsByVolume:
    async def test_orders_liquid_by_volume(self, csv_backend: Path) -> None:
        await save_assets(UNIVERSE + [make_asset("THIN", volume_24h=9e12, is_liquid=False)])
        top = await top_assets_by_volume("crypto", limit=3, now=NOW)
        assert top == ["BTC", "ETH", "SOL"]

    async def test_unknown_type(self, csv_backend: Path) -> None:
        with pytest.raises(InvalidArgument):
            await top_assets_by_volume("bonds")
