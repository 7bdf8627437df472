"""Tests for the REST API routes."""
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

import api.main as api_main
from common.errors import SourceUnavailable
from common.models import AssetRecord, Snapshot
from storage.database import _csv_save_assets


def make_asset(symbol: str, asset_type: str = "crypto", **kw) -> AssetRecord:
    fields = dict(
        symbol=symbol, name=symbol, asset_type=asset_type, price=10.0, is_liquid=True,
        last_updated=datetime.now(timezone.utc) - timedelta(minutes=5),
    )
    fields.update(kw)
    return AssetRecord(**fields)


@pytest.fixture
def client():
    return TestClient(api_main.app)


class TestSnapshotRoute:
    def test_returns_snapshot(self, client, monkeypatch):
        snap = Snapshot(strategy="balanced_mix", assets=[make_asset("BTC", category="gainer")],
                        text="CURATED MARKET SNAPSHOT (1 assets)\nBTC | crypto")
        mock = AsyncMock(return_value=snap)
        monkeypatch.setattr(api_main, "curate", mock)
        resp = client.get("/snapshot", params={"trading_style": "balanced", "asset_preference": "crypto"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["strategy"] == "balanced_mix"
        assert body["assets"][0]["symbol"] == "BTC"
        assert body["assets"][0]["category"] == "gainer"
        assert mock.await_args.args == ("balanced", "crypto")

    def test_api_prefix(self, client, monkeypatch):
        monkeypatch.setattr(api_main, "curate", AsyncMock(return_value=Snapshot(strategy="x", text="")))
        assert client.get("/api/snapshot", params={"trading_style": "balanced"}).status_code == 200

    def test_unsupported_style_is_400(self, client):
        resp = client.get("/snapshot", params={"trading_style": "scalping"})
        assert resp.status_code == 400
        assert "scalping" in resp.json()["detail"]

    def test_source_unavailable_is_503(self, client, monkeypatch):
        monkeypatch.setattr(api_main, "curate", AsyncMock(side_effect=SourceUnavailable("db down")))
        resp = client.get("/snapshot", params={"trading_style": "balanced"})
        assert resp.status_code == 503

    def test_style_is_required(self, client):
        assert client.get("/snapshot").status_code == 422


class TestAssetRoutes:
    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_assets_sorted_by_type_and_symbol(self, client, csv_backend):
        _csv_save_assets([make_asset("SPY", "etf"), make_asset("ETH"), make_asset("BTC")], csv_backend)
        resp = client.get("/assets")
        assert resp.status_code == 200
        assert [a["symbol"] for a in resp.json()] == ["BTC", "ETH", "SPY"]

    def test_assets_by_type(self, client, csv_backend):
        _csv_save_assets([make_asset("SPY", "etf"), make_asset("BTC")], csv_backend)
        resp = client.get("/assets", params={"asset_type": "etf"})
        assert [a["symbol"] for a in resp.json()] == ["SPY"]

    def test_assets_unknown_type_is_400(self, client, csv_backend):
        assert client.get("/assets", params={"asset_type": "bonds"}).status_code == 400

    def test_assets_missing_table_is_503(self, client, csv_backend):
        assert client.get("/assets").status_code == 503

    def test_top_volume(self, client, csv_backend):
        _csv_save_assets([
            make_asset("BTC", volume_24h=9e9),
            make_asset("ETH", volume_24h=5e9),
            make_asset("THIN", volume_24h=1e12, is_liquid=False),
        ], csv_backend)
        resp = client.get("/api/assets/top-volume/crypto", params={"limit": 5})
        assert resp.status_code == 200
        assert resp.json() == {"asset_type": "crypto", "symbols": ["BTC", "ETH"], "count": 2}
