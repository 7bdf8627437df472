"""
Market snapshot curation: entry point
Prints the curated snapshot for each trading style.
Run: python run.py [crypto|stocks|both] [--seed]

--seed fills the local asset table with a mock universe first.
"""
import asyncio
import sys

from common.errors import CurationError
from common.logger import get_logger, new_request_id
from common.models import TradingStyle
from curation.formatter import snapshot_frame
from curation.pipeline import curate
from storage import database
from storage.mock_data import mock_assets

logger = get_logger("run")


async def _run(asset_preference: str, seed: bool) -> None:
    if seed:
        await database.init_db()
        await database.save_assets(mock_assets())
    for style in TradingStyle:
        snapshot = await curate(style, asset_preference)
        print("\n" + "=" * 90)
        print(f"  {style.value.upper()}  —  {snapshot.strategy}  ({len(snapshot.assets)} assets)")
        print("=" * 90)
        if snapshot.assets:
            print(snapshot_frame(snapshot.assets).to_string(index=False))
            print("-" * 90)
        print(snapshot.text)


def main(argv: list[str]) -> int:
    new_request_id()
    args = [a for a in argv if not a.startswith("--")]
    asset_preference = args[0] if args else "both"
    try:
        asyncio.run(_run(asset_preference, seed="--seed" in argv))
    except CurationError as e:
        logger.error(f"❌ {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
