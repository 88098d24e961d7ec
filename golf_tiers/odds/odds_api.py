"""The Odds API client for golf tournament outright (winner) odds.

Fetches outright winner prices from US bookmakers via
https://the-odds-api.com and reduces them to one record per player with
an averaged implied win probability.

Display odds are the first bookmaker's price, while ``probability`` is
the mean across every bookmaker quoting the player.

Usage:
    from golf_tiers.odds.odds_api import fetch_tournament_feed, parse_outrights_feed
    feed = fetch_tournament_feed("Masters")
    tournament, records = parse_outrights_feed(feed, "Masters")
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

import numpy as np
import requests
from dotenv import load_dotenv

from golf_tiers.config import (
    DEFAULT_NAME_RULES,
    MAX_RECORDS,
    ODDS_API_MARKET,
    ODDS_API_ODDS_FORMAT,
    ODDS_API_REGIONS,
    ODDS_API_SPORT_GROUP,
    PROJECT_ROOT,
    NameRules,
)
from golf_tiers.ingestion.fetch import SourceUnavailableError
from golf_tiers.ingestion.name_validator import is_record_name
from golf_tiers.odds.parsing import format_american_odds, odds_to_probability, parse_odds_rank
from golf_tiers.records import CompetitorRecord

LOGGER = logging.getLogger(__name__)

_BASE_URL = "https://api.the-odds-api.com"
_REQUEST_TIMEOUT = 10


class OddsAPIError(SourceUnavailableError):
    """Raised when The Odds API cannot be reached or returns a non-200 response."""


def get_api_key() -> str:
    """Read API key from ``.env`` file or ``ODDS_API_KEY`` env var.

    Returns
    -------
    str
        API key.

    Raises
    ------
    OddsAPIError
        If the key is not found.
    """
    load_dotenv(PROJECT_ROOT / ".env")

    key = os.environ.get("ODDS_API_KEY", "").strip()
    if not key:
        raise OddsAPIError(
            "ODDS_API_KEY not found. Add it to .env or set the environment variable. "
            "Get a key at https://the-odds-api.com"
        )
    return key


def _log_remaining_credits(response: requests.Response) -> None:
    """Log remaining API credits from response headers."""
    remaining = response.headers.get("x-requests-remaining")
    used = response.headers.get("x-requests-used")
    if remaining is not None:
        LOGGER.info(
            "Odds API credits — remaining: %s, used: %s", remaining, used
        )


def _get(url: str, params: dict[str, Any], what: str) -> Any:
    try:
        resp = requests.get(url, params=params, timeout=_REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        raise OddsAPIError(f"Failed to fetch {what}: {exc}") from exc
    _log_remaining_credits(resp)

    if resp.status_code != 200:
        raise OddsAPIError(
            f"Failed to fetch {what}: HTTP {resp.status_code} — {resp.text}"
        )
    return resp.json()


def fetch_golf_sports(api_key: str) -> list[dict[str, Any]]:
    """Fetch in-season golf outright markets (free, 0 credits).

    Parameters
    ----------
    api_key : str
        The Odds API key.

    Returns
    -------
    list[dict]
        Sport dicts with keys: key, group, title, description, active,
        has_outrights.

    Raises
    ------
    OddsAPIError
        On network failure or non-200 response.
    """
    sports = _get(f"{_BASE_URL}/v4/sports/", {"apiKey": api_key}, "sports")
    golf = [
        sport for sport in sports
        if sport.get("group") == ODDS_API_SPORT_GROUP and sport.get("has_outrights")
    ]
    LOGGER.info("Fetched %d golf outright markets from Odds API", len(golf))
    return golf


def _match_score(hint: Optional[str], *fields: Optional[str]) -> int:
    """Number of hint words (3+ chars) found in the given fields."""
    if not hint:
        return 0
    haystack = " ".join(f for f in fields if f).lower().replace("_", " ")
    words = [w for w in hint.lower().split() if len(w) > 2]
    return sum(1 for w in words if w in haystack)


def find_sport_key(
    sports: list[dict[str, Any]],
    tournament_hint: Optional[str] = None,
) -> Optional[str]:
    """Pick the golf market whose title best matches the tournament hint.

    Falls back to the first market when nothing matches.
    """
    if not sports:
        return None
    best = max(
        sports,
        key=lambda s: _match_score(
            tournament_hint, s.get("title"), s.get("description"), s.get("key")
        ),
    )
    return best.get("key")


def fetch_outright_odds(api_key: str, sport_key: str) -> list[dict[str, Any]]:
    """Fetch outright winner odds for one golf market (1 credit per region).

    Parameters
    ----------
    api_key : str
        The Odds API key.
    sport_key : str
        Odds API sport key, e.g. ``golf_masters_tournament_winner``.

    Returns
    -------
    list[dict]
        Event dicts with ``sport_title`` and ``bookmakers``.

    Raises
    ------
    OddsAPIError
        On network failure or non-200 response.
    """
    params = {
        "apiKey": api_key,
        "regions": ODDS_API_REGIONS,
        "markets": ODDS_API_MARKET,
        "oddsFormat": ODDS_API_ODDS_FORMAT,
    }
    return _get(
        f"{_BASE_URL}/v4/sports/{sport_key}/odds/", params, f"odds for {sport_key}"
    )


def fetch_tournament_feed(
    tournament_hint: Optional[str] = None,
    api_key: Optional[str] = None,
) -> list[dict[str, Any]]:
    """Fetch the outrights feed for the golf market matching the hint.

    Returns an empty list when no golf outright market is in season.
    """
    if api_key is None:
        api_key = get_api_key()

    sport_key = find_sport_key(fetch_golf_sports(api_key), tournament_hint)
    if sport_key is None:
        LOGGER.warning("No golf outright markets currently offered by Odds API")
        return []

    LOGGER.info("Using Odds API market %s for hint %r", sport_key, tournament_hint)
    return fetch_outright_odds(api_key, sport_key)


def _select_event(
    events: list[dict[str, Any]],
    tournament_hint: Optional[str],
) -> Optional[dict[str, Any]]:
    candidates = [e for e in events if isinstance(e, dict) and e.get("bookmakers")]
    if not candidates:
        return None
    return max(
        candidates,
        key=lambda e: _match_score(tournament_hint, e.get("sport_title"), e.get("sport_key")),
    )


def parse_outrights_feed(
    feed: Any,
    tournament_hint: Optional[str] = None,
    rules: NameRules = DEFAULT_NAME_RULES,
    max_records: int = MAX_RECORDS,
) -> tuple[Optional[str], list[CompetitorRecord]]:
    """Flatten an outrights feed to one record per player.

    Parameters
    ----------
    feed : list[dict] | dict
        Raw response from ``fetch_outright_odds()`` (or a single event).
    tournament_hint : str, optional
        Used to choose between events in a multi-event feed.
    rules : NameRules
        Name validation rules applied to outcome names.
    max_records : int
        Maximum number of records returned.

    Returns
    -------
    tuple[str | None, list[CompetitorRecord]]
        Event title and records ordered by descending probability, with
        positions assigned in that order. Records is empty when the feed
        has no parseable outrights market.
    """
    events = feed if isinstance(feed, list) else [feed]
    event = _select_event(events, tournament_hint)
    if event is None:
        LOGGER.warning("Odds feed has no events with bookmakers")
        return None, []

    title = event.get("sport_title") or tournament_hint
    players: dict[str, dict[str, Any]] = {}
    n_markets = 0

    for bookmaker in event.get("bookmakers", []):
        for market in bookmaker.get("markets", []):
            if market.get("key") != ODDS_API_MARKET:
                continue
            n_markets += 1

            for outcome in market.get("outcomes", []):
                name = str(outcome.get("name", "")).strip()
                probability = odds_to_probability(outcome.get("price"))
                if not name or probability is None:
                    continue

                entry = players.setdefault(name.lower(), {
                    "name": name,
                    "odds": format_american_odds(outcome.get("price")),
                    "probabilities": [],
                })
                entry["probabilities"].append(probability)

    if n_markets == 0:
        LOGGER.warning(
            "Odds feed for %r has no '%s' market; treating as no data",
            title, ODDS_API_MARKET,
        )
        return title, []

    ranked = []
    for entry in players.values():
        if not is_record_name(entry["name"], rules):
            LOGGER.debug("Dropping feed outcome %r: not a player name", entry["name"])
            continue
        ranked.append((float(np.mean(entry["probabilities"])), entry))
    ranked.sort(key=lambda item: -item[0])

    records = [
        CompetitorRecord(
            position=str(index),
            name=entry["name"],
            odds=entry["odds"],
            odds_rank=parse_odds_rank(entry["odds"]),
            probability=probability,
        )
        for index, (probability, entry) in enumerate(ranked[:max_records], start=1)
    ]
    LOGGER.info(
        "Parsed %d players from %d bookmaker markets for %r",
        len(records), n_markets, title,
    )
    return title, records
