#!/usr/bin/env python3
"""
Standalone scheduler: curate a snapshot for every trading style.
Run: python scheduler.py
Or add to cron: */30 * * * * cd /srv/snapshot-curation && ./venv/bin/python scheduler.py

The throttle lives here, on the caller side; the curation engine itself keeps
no state between calls.
"""
import asyncio
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from common.errors import SourceUnavailable
from common.logger import get_logger, new_request_id
from common.models import Snapshot, TradingStyle
from config.settings import SCHEDULER_ASSET_PREFERENCE, SCHEDULER_MIN_INTERVAL_MINUTES
from curation.pipeline import curate

logger = get_logger("scheduler")

STATE_FILE = Path(__file__).parent / "data" / "scheduler_state.json"


def _utc(ts: Optional[datetime]) -> datetime:
    if ts is None:
        return datetime.now(timezone.utc)
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


class RunThrottle:
    """Allow at most one run per min_interval, remembered in a small JSON file."""

    def __init__(self, min_interval: timedelta, state_file: Optional[Path] = None):
        self.min_interval = min_interval
        self.state_file = state_file or STATE_FILE

    def last_run(self) -> Optional[datetime]:
        if not self.state_file.exists():
            return None
        try:
            raw = json.loads(self.state_file.read_text())
            return _utc(datetime.fromisoformat(raw["last_run"]))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable scheduler state {self.state_file}: {e}")
            return None

    def allow(self, now: Optional[datetime] = None) -> bool:
        now = _utc(now)
        last = self.last_run()
        return last is None or now - last >= self.min_interval

    def mark(self, now: Optional[datetime] = None) -> None:
        now = _utc(now)
        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        self.state_file.write_text(json.dumps({"last_run": now.isoformat()}))


async def run_all_styles(asset_preference: str = SCHEDULER_ASSET_PREFERENCE) -> dict[str, Snapshot]:
    """Curate one snapshot per trading style; styles run independently."""
    snapshots = {}
    for style in TradingStyle:
        snapshot = await curate(style, asset_preference)
        snapshots[style.value] = snapshot
        logger.info(f"✅ {style.value}: {len(snapshot.assets)} assets via {snapshot.strategy}")
    return snapshots


def main(now: Optional[datetime] = None) -> int:
    new_request_id()
    throttle = RunThrottle(timedelta(minutes=SCHEDULER_MIN_INTERVAL_MINUTES))
    if not throttle.allow(now):
        logger.info(f"⏭ Skipping: last run {throttle.last_run().isoformat()} "
                    f"is within {SCHEDULER_MIN_INTERVAL_MINUTES} minutes")
        return 0
    logger.info("🚀 Curation cycle started")
    try:
        snapshots = asyncio.run(run_all_styles())
    except SourceUnavailable as e:
        logger.error(f"❌ Asset table unavailable: {e}")
        return 1
    throttle.mark(now)
    for style, snapshot in snapshots.items():
        print(f"\n=== {style} ({snapshot.strategy}) ===")
        print(snapshot.text)
    logger.info(f"🏁 Done: {len(snapshots)} styles curated")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
