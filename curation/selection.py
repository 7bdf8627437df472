"""Category query builder and dedup/merge."""
from typing import Iterable, Optional, Sequence

from common.errors import InvalidArgument
from common.logger import get_logger
from common.models import AssetRecord
from curation.strategies import CategoryQuota, Strategy, UniverseStats

logger = get_logger("selection")


def allocate_limits(categories: Sequence[CategoryQuota], overall_limit: int) -> list[int]:
    """Per-category limits for one strategy.

    Categories without an explicit limit get floor(overall / n); the remainder
    goes to the first category (25 over 3 → 9, 8, 8).
    """
    if not categories:
        return []
    share, remainder = divmod(overall_limit, len(categories))
    limits = [q.limit if q.limit is not None else share for q in categories]
    if categories[0].limit is None:
        limits[0] += remainder
    return limits


def select_category(
    quota: CategoryQuota,
    records: Iterable[AssetRecord],
    limit: Optional[int] = None,
    stats: Optional[UniverseStats] = None,
) -> list[AssetRecord]:
    """Filter, sort and cut one category; each result is tagged with the category name."""
    records = list(records)
    if limit is None:
        limit = quota.limit
    if limit is None:
        raise InvalidArgument(f"No limit given for category {quota.name!r}")
    if limit <= 0:
        return []
    if stats is None:
        stats = UniverseStats.from_records(records)
    matched = [r for r in records if quota.predicate(r, stats)]
    matched.sort(key=quota.sort_key)
    return [r.model_copy(update={"category": quota.name}) for r in matched[:limit]]


def merge(category_results: Iterable[Sequence[AssetRecord]], overall_limit: int) -> list[AssetRecord]:
    """Concatenate in category order, keep the first occurrence of each symbol, then truncate.

    A category that comes up short is not backfilled from the others.
    """
    seen: set[str] = set()
    merged: list[AssetRecord] = []
    for results in category_results:
        for record in results:
            if record.symbol in seen:
                continue
            seen.add(record.symbol)
            merged.append(record)
    return merged[:max(overall_limit, 0)]


def run_strategy(strategy: Strategy, records: Sequence[AssetRecord], overall_limit: int) -> list[AssetRecord]:
    stats = UniverseStats.from_records(records)
    limits = allocate_limits(strategy.categories, overall_limit)
    results = []
    for quota, limit in zip(strategy.categories, limits):
        picked = select_category(quota, records, limit, stats)
        logger.debug(f"{strategy.name}/{quota.name}: {len(picked)}/{limit}")
        results.append(picked)
    return merge(results, overall_limit)
