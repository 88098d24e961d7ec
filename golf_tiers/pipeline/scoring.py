"""Inject live tournament scores into tiered records.

Scores come from a separate leaderboard source and are matched by
case-insensitive name. ``score`` is the only field updated after tiering.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping, Union

from golf_tiers.odds.parsing import clean_text
from golf_tiers.records import CompetitorRecord

LOGGER = logging.getLogger(__name__)

_TO_PAR_RE = re.compile(r"^[+-]?\d+$")

ScoreSource = Union[CompetitorRecord, Mapping[str, Any]]


def _name_and_score(entry: ScoreSource) -> tuple[str, str]:
    if isinstance(entry, CompetitorRecord):
        return entry.name, entry.score
    return str(entry.get("name", "")), str(entry.get("score") or "")


def merge_scores(
    records: list[CompetitorRecord],
    leaderboard: Iterable[ScoreSource],
) -> int:
    """Copy scores from ``leaderboard`` onto matching records.

    Parameters
    ----------
    records : list[CompetitorRecord]
        Tiered records; updated in place.
    leaderboard : iterable of CompetitorRecord or dict
        Entries exposing ``name`` and ``score``. Blank and ``-`` scores
        are ignored.

    Returns
    -------
    int
        Number of records whose score changed.
    """
    scores: dict[str, str] = {}
    for entry in leaderboard:
        name, score = _name_and_score(entry)
        score = clean_text(score)
        if name and score and score != "-":
            scores.setdefault(name.lower(), score)

    n_updated = 0
    for record in records:
        score = scores.get(record.name.lower())
        if score is not None and score != record.score:
            record.score = score
            n_updated += 1

    LOGGER.info("Merged scores for %d of %d records", n_updated, len(records))
    return n_updated


def parse_score_to_par(score: str | None) -> int:
    """``"-10"`` -> -10, ``"+3"`` -> 3, ``"E"`` -> 0; anything else counts as 0."""
    text = clean_text(score).upper()
    if text in ("E", "EVEN"):
        return 0
    if _TO_PAR_RE.match(text):
        return int(text)
    return 0
