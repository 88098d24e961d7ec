"""Partition a ranked competitor list into six draft tiers.

Two policies, chosen by the data the source provided:

- ``probability``: every record has an implied win probability (odds
  feed). Sorted favourite-first and cut into six contiguous buckets of
  ``ceil(n / 6)``.
- ``percentile``: only display odds are available (scraped page). The
  odds-bearing field is cut 5/10/15/20/25/25 percent favourite-first, each
  tier at least one player; rounding leftovers and every player without
  odds go to tier 6.

Both sorts are stable, so ties keep extraction order.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from golf_tiers.config import TIER_COUNT, TIER_PERCENTAGES
from golf_tiers.records import CompetitorRecord

LOGGER = logging.getLogger(__name__)

PROBABILITY_POLICY = "probability"
PERCENTILE_POLICY = "percentile"


def choose_policy(records: list[CompetitorRecord]) -> str:
    """Probability policy when every record carries a probability."""
    if records and all(r.probability is not None for r in records):
        return PROBABILITY_POLICY
    return PERCENTILE_POLICY


def assign_probability_tiers(records: list[CompetitorRecord]) -> list[CompetitorRecord]:
    """Tier records by descending probability into equal contiguous buckets."""
    ordered = sorted(records, key=lambda r: -(r.probability or 0.0))
    if not ordered:
        return ordered

    tier_size = math.ceil(len(ordered) / TIER_COUNT)
    for rank, record in enumerate(ordered):
        record.tier = min(rank // tier_size + 1, TIER_COUNT)
    return ordered


def percentile_tier_sizes(total: int) -> list[int]:
    """Tier sizes for ``total`` odds-bearing players, before leftovers.

    Examples
    --------
    >>> percentile_tier_sizes(100)
    [5, 10, 15, 20, 25, 25]
    """
    sizes: list[int] = []
    remaining = total
    for percentage in TIER_PERCENTAGES:
        size = min(max(1, total * percentage // 100), remaining)
        sizes.append(size)
        remaining -= size
    return sizes


def assign_percentile_tiers(records: list[CompetitorRecord]) -> list[CompetitorRecord]:
    """Tier records by ascending odds rank using fixed field percentages."""
    with_odds = sorted((r for r in records if r.has_odds), key=lambda r: r.odds_rank)
    without_odds = [r for r in records if not r.has_odds]

    index = 0
    for tier_number, size in enumerate(percentile_tier_sizes(len(with_odds)), start=1):
        for record in with_odds[index:index + size]:
            record.tier = tier_number
        index += size

    for record in with_odds[index:]:
        record.tier = TIER_COUNT
    for record in without_odds:
        record.tier = TIER_COUNT

    return with_odds + without_odds


def assign_tiers(
    records: list[CompetitorRecord],
    policy: Optional[str] = None,
) -> list[CompetitorRecord]:
    """Populate ``tier`` on every record.

    Parameters
    ----------
    records : list[CompetitorRecord]
        Extracted records; updated in place.
    policy : str, optional
        ``"probability"`` or ``"percentile"``. Chosen from the data when
        omitted.

    Returns
    -------
    list[CompetitorRecord]
        The same records ordered favourite-first, tier 1 to tier 6.
    """
    if policy is None:
        policy = choose_policy(records)

    if policy == PROBABILITY_POLICY:
        tiered = assign_probability_tiers(records)
    elif policy == PERCENTILE_POLICY:
        tiered = assign_percentile_tiers(records)
    else:
        raise ValueError(f"Unknown tier policy: {policy!r}")

    LOGGER.info(
        "Assigned %d records to tiers (%s policy): sizes %s",
        len(tiered), policy, [len(t) for t in group_by_tier(tiered)],
    )
    return tiered


def group_by_tier(records: list[CompetitorRecord]) -> list[list[CompetitorRecord]]:
    """Split tiered records into ``TIER_COUNT`` lists, tier 1 first."""
    groups: list[list[CompetitorRecord]] = [[] for _ in range(TIER_COUNT)]
    for record in records:
        if record.tier is None:
            raise ValueError(f"Record {record.name!r} has not been assigned a tier")
        groups[record.tier - 1].append(record)
    return groups
