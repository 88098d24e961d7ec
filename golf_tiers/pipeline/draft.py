"""Draft team helpers: one player from each tier, scored by total to par."""

from __future__ import annotations

import logging
from typing import Mapping

from golf_tiers.config import TIER_COUNT
from golf_tiers.pipeline.scoring import parse_score_to_par
from golf_tiers.records import CompetitorRecord

LOGGER = logging.getLogger(__name__)


def _by_name(records: list[CompetitorRecord]) -> dict[str, CompetitorRecord]:
    return {record.name.lower(): record for record in records}


def validate_team_selection(
    picks: Mapping[int, str],
    records: list[CompetitorRecord],
) -> dict[int, CompetitorRecord]:
    """Check that ``picks`` holds exactly one player from each tier.

    Parameters
    ----------
    picks : Mapping[int, str]
        Tier number (1-6) -> player name.
    records : list[CompetitorRecord]
        Tiered records the picks were made from.

    Returns
    -------
    dict[int, CompetitorRecord]
        Tier number -> picked record.

    Raises
    ------
    ValueError
        If a tier is missing, unknown, or its pick belongs to another tier.
    """
    expected = set(range(1, TIER_COUNT + 1))
    missing = sorted(expected - set(picks))
    extra = sorted(set(picks) - expected)
    if missing:
        raise ValueError(f"No pick for tier(s) {missing}")
    if extra:
        raise ValueError(f"Unknown tier(s) {extra}")

    lookup = _by_name(records)
    team: dict[int, CompetitorRecord] = {}
    for tier in sorted(picks):
        record = lookup.get(picks[tier].lower())
        if record is None:
            raise ValueError(f"Tier {tier}: {picks[tier]!r} is not in the field")
        if record.tier != tier:
            raise ValueError(
                f"Tier {tier}: {record.name!r} is in tier {record.tier}, not tier {tier}"
            )
        team[tier] = record
    return team


def team_total_score(
    picks: Mapping[int, str],
    records: list[CompetitorRecord],
) -> int:
    """Sum the to-par scores of the picked players.

    Players missing from ``records`` or without a numeric score count as 0.
    """
    lookup = _by_name(records)
    total = 0
    for name in picks.values():
        record = lookup.get(name.lower())
        if record is None:
            LOGGER.warning("Picked player %r not found in current field", name)
            continue
        total += parse_score_to_par(record.score)
    return total
