"""Odds parsing and outrights feed modules.

The feed client lives in ``golf_tiers.odds.odds_api`` and is imported from
there directly; it depends on ingestion modules that themselves use the
parsers re-exported here.
"""

from .parsing import (
    clean_text,
    format_american_odds,
    is_odds_text,
    odds_to_probability,
    parse_odds_rank,
    probability_to_odds,
    strip_trend_prefix,
)

__all__ = [
    'clean_text',
    'format_american_odds',
    'is_odds_text',
    'odds_to_probability',
    'parse_odds_rank',
    'probability_to_odds',
    'strip_trend_prefix',
]
