"""Competitor records and the leaderboard payload handed to consumers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional

import pandas as pd

from golf_tiers.config import NOT_AVAILABLE


@dataclass
class CompetitorRecord:
    """One competitor extracted from a single source document.

    ``odds_rank`` is only used for ordering (lower = more favoured);
    unknown odds sort last as ``inf``. ``probability`` is present only when
    the source was a probability-bearing odds feed.
    """

    position: str
    name: str
    odds: str = NOT_AVAILABLE
    odds_rank: float = math.inf
    probability: Optional[float] = None
    score: str = "-"
    tier: Optional[int] = None

    @property
    def has_odds(self) -> bool:
        return self.odds != NOT_AVAILABLE and math.isfinite(self.odds_rank)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "position": self.position,
            "name": self.name,
            "odds": self.odds,
            "oddsRank": self.odds_rank if math.isfinite(self.odds_rank) else None,
            "score": self.score,
            "tier": self.tier,
        }
        if self.probability is not None:
            payload["probability"] = self.probability
        return payload

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompetitorRecord":
        odds_rank = data.get("oddsRank")
        return cls(
            position=str(data.get("position", "")),
            name=data["name"],
            odds=data.get("odds") or NOT_AVAILABLE,
            odds_rank=math.inf if odds_rank is None else float(odds_rank),
            probability=data.get("probability"),
            score=data.get("score") or "-",
            tier=data.get("tier"),
        )


@dataclass
class LeaderboardResult:
    """Pipeline output: ``{tournament, players, lastUpdated}``."""

    tournament: str
    players: list[CompetitorRecord] = field(default_factory=list)
    last_updated: str = ""
    source_strategy: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.players

    def to_dict(self) -> dict[str, Any]:
        return {
            "tournament": self.tournament,
            "players": [player.to_dict() for player in self.players],
            "lastUpdated": self.last_updated,
        }


def records_to_frame(records: list[CompetitorRecord]) -> pd.DataFrame:
    """Tabulate records for display.

    Parameters
    ----------
    records : list[CompetitorRecord]
        Records in display order.

    Returns
    -------
    pd.DataFrame
        Columns: tier, position, name, odds, probability, score.
    """
    columns = ["tier", "position", "name", "odds", "probability", "score"]
    if not records:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(
        [
            {
                "tier": r.tier,
                "position": r.position,
                "name": r.name,
                "odds": r.odds,
                "probability": r.probability,
                "score": r.score,
            }
            for r in records
        ],
        columns=columns,
    )
