"""Asset store accessor.

Backend is selected at startup via the DATABASE_URL environment variable:
  - DATABASE_URL=none (or unset) → CSV file data/market_assets.csv (default / fallback)
  - DATABASE_URL=postgresql://... → PostgreSQL via SQLAlchemy async + asyncpg

The curation engine only reads. save_assets() exists for the refresh side
(price fetchers, seeding, tests). All public functions are async so they
integrate with FastAPI.
"""
import asyncio
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Optional, Sequence

import pandas as pd
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from common.errors import SourceUnavailable
from common.logger import get_logger
from common.models import AssetFilter, AssetRecord
from config.settings import DATABASE_URL, asyncpg_url
from storage.models import MarketAssetDB

logger = get_logger("database")

DATA_DIR = Path(__file__).parent.parent / "data"
DATA_DIR.mkdir(exist_ok=True)
CSV_NAME = "market_assets.csv"

ASSET_COLUMNS = [
    "symbol", "name", "asset_type", "price",
    "change_1h", "change_24h", "change_7d",
    "volume_24h", "market_cap", "volatility_14d", "rsi_14d", "trend_50_200",
    "is_liquid", "is_trending", "is_volatile", "last_updated",
]

# ── Backend detection ──────────────────────────────────────────────────────────
_raw_url: str = DATABASE_URL.strip()
USE_POSTGRES: bool = _raw_url.lower() not in ("none", "", "null")

# PostgreSQL objects, populated only when USE_POSTGRES is True
_engine = None
_SessionFactory = None

if USE_POSTGRES:
    from sqlalchemy.dialects.postgresql import insert as pg_insert
    from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
    from storage.models import Base

    _db_url = asyncpg_url(_raw_url)
    _engine = create_async_engine(
        _db_url,
        echo=False,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )
    _SessionFactory = async_sessionmaker(_engine, expire_on_commit=False)
    logger.info(f"[PG] Backend: {_db_url.split('@')[-1]}")
else:
    logger.info("[CSV] Backend: %s/%s", DATA_DIR, CSV_NAME)


def _utc(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def _cutoff(asset_filter: AssetFilter, now: Optional[datetime]) -> datetime:
    return _utc(now) - timedelta(minutes=asset_filter.max_age_minutes)


def filter_records(
    records: Iterable[AssetRecord],
    asset_filter: AssetFilter,
    now: Optional[datetime] = None,
) -> list[AssetRecord]:
    """In-memory equivalent of fetch_assets: type + freshness filter, one row per symbol."""
    cutoff = _cutoff(asset_filter, now)
    by_symbol: dict[str, AssetRecord] = {}
    for r in records:
        if r.asset_type in asset_filter.asset_types and r.last_updated > cutoff:
            by_symbol[r.symbol] = r
    return list(by_symbol.values())


def _build_records(rows: Iterable[dict], backend: str) -> list[AssetRecord]:
    """Validate raw rows; a row that fails validation is logged and skipped."""
    records = []
    for row in rows:
        try:
            records.append(AssetRecord(**row))
        except ValidationError as e:
            logger.warning(f"[{backend}] Skipping invalid row {row.get('symbol')}: {e.error_count()} errors")
    return records


# ── CSV helpers (sync; run via asyncio.to_thread) ─────────────────────────────

def _csv_read(data_dir: Path) -> pd.DataFrame:
    path = data_dir / CSV_NAME
    if not path.exists():
        raise SourceUnavailable(f"Asset table not found: {path}")
    try:
        if path.stat().st_size == 0:
            return pd.DataFrame(columns=ASSET_COLUMNS)
        df = pd.read_csv(
            path,
            dtype={"symbol": str, "name": str, "asset_type": str, "trend_50_200": str},
            keep_default_na=False,
            na_values=[""],
        )
        missing = {"symbol", "asset_type", "price", "last_updated"} - set(df.columns)
        if missing:
            raise SourceUnavailable(f"Asset table {path} lacks columns: {sorted(missing)}")
        df["last_updated"] = pd.to_datetime(df["last_updated"], utc=True, format="ISO8601")
    except (OSError, ValueError) as e:
        raise SourceUnavailable(f"Cannot read asset table {path}: {e}") from e
    return df


def _frame_to_records(df: pd.DataFrame) -> list[AssetRecord]:
    if df.empty:
        return []
    df = df.copy()
    if "name" in df.columns:
        df["name"] = df["name"].fillna(df["symbol"])
    else:
        df["name"] = df["symbol"]
    df = df.astype(object).where(pd.notna(df), None)
    rows = df.to_dict(orient="records")
    for row in rows:
        if isinstance(row.get("last_updated"), pd.Timestamp):
            row["last_updated"] = row["last_updated"].to_pydatetime()
    return _build_records(rows, "CSV")


def _csv_fetch_assets(asset_filter: AssetFilter, now: Optional[datetime], data_dir: Path) -> list[AssetRecord]:
    df = _csv_read(data_dir)
    if df.empty:
        return []
    cutoff = pd.Timestamp(_cutoff(asset_filter, now))
    types = [t.value for t in asset_filter.asset_types]
    df = df[df["asset_type"].isin(types) & (df["last_updated"] > cutoff)]
    df = df.drop_duplicates(subset="symbol", keep="last")
    return _frame_to_records(df)


def _csv_save_assets(records: Sequence[AssetRecord], data_dir: Path) -> None:
    rows = [r.model_dump(mode="json", include=set(ASSET_COLUMNS)) for r in records]
    df = pd.DataFrame(rows, columns=ASSET_COLUMNS)
    path = data_dir / CSV_NAME
    if path.exists() and path.stat().st_size > 0:
        existing = pd.read_csv(path, dtype={"symbol": str}, keep_default_na=False, na_values=[""])
        df = pd.concat([existing, df], ignore_index=True)
    df = df.drop_duplicates(subset="symbol", keep="last")
    df.to_csv(path, index=False)
    logger.info("[CSV] Upserted %d assets → %s", len(rows), path)


def _csv_init(data_dir: Path) -> None:
    path = data_dir / CSV_NAME
    if not path.exists():
        pd.DataFrame(columns=ASSET_COLUMNS).to_csv(path, index=False)
        logger.info("[CSV] Created empty asset table %s", path)


# ── PostgreSQL helpers (async) ─────────────────────────────────────────────────

def _to_float(val) -> Optional[float]:
    return float(val) if val is not None else None


def _pg_row_to_dict(r: MarketAssetDB) -> dict:
    return dict(
        symbol=r.symbol,
        name=r.name or r.symbol,
        asset_type=r.asset_type,
        price=_to_float(r.price),
        change_1h=_to_float(r.change_1h),
        change_24h=_to_float(r.change_24h),
        change_7d=_to_float(r.change_7d),
        volume_24h=_to_float(r.volume_24h),
        market_cap=_to_float(r.market_cap),
        volatility_14d=_to_float(r.volatility_14d),
        rsi_14d=_to_float(r.rsi_14d),
        trend_50_200=r.trend_50_200,
        is_liquid=r.is_liquid,
        is_trending=r.is_trending,
        is_volatile=r.is_volatile,
        last_updated=r.last_updated,
    )


async def _pg_fetch_assets(asset_filter: AssetFilter, now: Optional[datetime]) -> list[AssetRecord]:
    cutoff = _cutoff(asset_filter, now)
    types = [t.value for t in asset_filter.asset_types]
    try:
        async with _SessionFactory() as session:
            stmt = (
                select(MarketAssetDB)
                .where(MarketAssetDB.asset_type.in_(types))
                .where(MarketAssetDB.last_updated > cutoff)
            )
            rows = (await session.execute(stmt)).scalars().all()
    except (SQLAlchemyError, OSError) as e:
        raise SourceUnavailable(f"Cannot read market_assets: {e}") from e
    return _build_records((_pg_row_to_dict(r) for r in rows), "PG")


async def _pg_save_assets(records: Sequence[AssetRecord]) -> None:
    async with _SessionFactory() as session:
        async with session.begin():
            for r in records:
                values = r.model_dump(include=set(ASSET_COLUMNS))
                values["asset_type"] = r.asset_type.value
                values["trend_50_200"] = r.trend_50_200.value if r.trend_50_200 else None
                stmt = (
                    pg_insert(MarketAssetDB)
                    .values(**values)
                    .on_conflict_do_update(
                        index_elements=["symbol"],
                        set_={k: v for k, v in values.items() if k != "symbol"},
                    )
                )
                await session.execute(stmt)
    logger.info("[PG] Upserted %d assets", len(records))


# ── Public async API ───────────────────────────────────────────────────────────

async def fetch_assets(asset_filter: AssetFilter, now: Optional[datetime] = None) -> list[AssetRecord]:
    """Return fresh records of the requested asset types, in no particular order.

    Stale rows are dropped silently. Raises SourceUnavailable when the table
    cannot be read.
    """
    if USE_POSTGRES:
        records = await _pg_fetch_assets(asset_filter, now)
    else:
        records = await asyncio.to_thread(_csv_fetch_assets, asset_filter, now, DATA_DIR)
    logger.info(
        f"Fetched {len(records)} fresh assets "
        f"(types={sorted(t.value for t in asset_filter.asset_types)}, "
        f"max_age={asset_filter.max_age_minutes}m)"
    )
    return records


async def save_assets(records: Sequence[AssetRecord]) -> None:
    """Upsert records by symbol into PostgreSQL or CSV (based on DATABASE_URL)."""
    if not records:
        return
    if USE_POSTGRES:
        await _pg_save_assets(records)
    else:
        await asyncio.to_thread(_csv_save_assets, records, DATA_DIR)


async def init_db() -> None:
    """Create the asset table (idempotent). Prefer Alembic for production migrations."""
    if not USE_POSTGRES:
        await asyncio.to_thread(_csv_init, DATA_DIR)
        return
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("[PG] Tables ensured")
