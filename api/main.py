"""Market snapshot curation: FastAPI REST API."""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from common.errors import InvalidArgument, SourceUnavailable
from common.logger import get_logger, new_request_id
from common.models import AssetFilter, AssetPreference, AssetRecord, Snapshot
from config.settings import FRESHNESS_WINDOW_MINUTES, SNAPSHOT_LIMIT
from curation.pipeline import curate, top_assets_by_volume
from curation.strategies import PREFERENCE_ASSET_TYPES, parse_asset_type
from storage import database

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await database.init_db()
    yield


app = FastAPI(title="Market Snapshot Curation API", version="0.1.0", lifespan=lifespan)

app.add_middleware(CORSMiddleware,
    allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, InvalidArgument):
        return HTTPException(400, str(e))
    logger.error(f"Asset table unavailable: {e}")
    return HTTPException(503, str(e))


# ── API routes (on a shared router, mounted at both "/" and "/api") ───────────

router = APIRouter()

@router.get("/health")
def health():
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

@router.get("/snapshot", response_model=Snapshot)
async def get_snapshot(
    trading_style: str,
    asset_preference: str = "both",
    limit: int = SNAPSHOT_LIMIT,
    freshness_window_minutes: int = FRESHNESS_WINDOW_MINUTES,
    strategy: Optional[str] = None,
):
    """Curated snapshot (records + prompt text) for one trading style."""
    new_request_id()
    try:
        return await curate(
            trading_style,
            asset_preference,
            limit=limit,
            freshness_window_minutes=freshness_window_minutes,
            strategy_name=strategy,
        )
    except (InvalidArgument, SourceUnavailable) as e:
        raise _http_error(e)

@router.get("/assets", response_model=list[AssetRecord])
async def get_assets(asset_type: Optional[str] = None,
                     freshness_window_minutes: int = FRESHNESS_WINDOW_MINUTES):
    """All fresh assets, optionally of one type."""
    new_request_id()
    try:
        if asset_type is None:
            types = PREFERENCE_ASSET_TYPES[AssetPreference.BOTH]
        else:
            types = frozenset({parse_asset_type(asset_type)})
        if freshness_window_minutes < 1:
            raise InvalidArgument("freshness_window_minutes must be a positive integer")
        asset_filter = AssetFilter(asset_types=types, max_age_minutes=freshness_window_minutes)
        records = await database.fetch_assets(asset_filter)
    except (InvalidArgument, SourceUnavailable) as e:
        raise _http_error(e)
    return sorted(records, key=lambda r: (r.asset_type.value, r.symbol))

@router.get("/assets/top-volume/{asset_type}")
async def get_top_volume(asset_type: str, limit: int = 20):
    new_request_id()
    try:
        symbols = await top_assets_by_volume(asset_type, limit=limit)
    except (InvalidArgument, SourceUnavailable) as e:
        raise _http_error(e)
    return {"asset_type": asset_type.lower(), "symbols": symbols, "count": len(symbols)}

# Mount routes at root (for nginx) and at /api (for direct browser access)
app.include_router(router)
app.include_router(router, prefix="/api")
