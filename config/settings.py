"""Configuration loader."""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv(Path(__file__).parent.parent / ".env")

DATABASE_URL = os.getenv("DATABASE_URL", "none")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def asyncpg_url(url: str) -> str:
    """Normalise a postgres:// or postgresql:// URL for the asyncpg driver."""
    url = url.strip()
    if url.startswith("postgres://"):
        return "postgresql+asyncpg://" + url[len("postgres://"):]
    if url.startswith("postgresql://") and "+asyncpg" not in url:
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


# Curation defaults
SNAPSHOT_LIMIT = int(os.getenv("SNAPSHOT_LIMIT", "25"))
FRESHNESS_WINDOW_MINUTES = int(os.getenv("FRESHNESS_WINDOW_MINUTES", "120"))

# Caller-side scheduling
SCHEDULER_MIN_INTERVAL_MINUTES = int(os.getenv("SCHEDULER_MIN_INTERVAL_MINUTES", "30"))
SCHEDULER_ASSET_PREFERENCE = os.getenv("SCHEDULER_ASSET_PREFERENCE", "both")

# Refresh-side thresholds used by storage.flags
FLAG_THRESHOLDS = {
    "crypto": {"liquid_volume": 1_000_000, "trending_7d": 10.0, "volatile": 20.0},
    "stock":  {"liquid_volume": 500_000,   "trending_7d": 5.0,  "volatile": 3.0},
    "etf":    {"liquid_volume": 500_000,   "trending_7d": 5.0,  "volatile": 3.0},
}
