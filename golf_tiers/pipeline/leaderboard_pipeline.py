"""Build a tiered tournament leaderboard from one raw document.

Orchestrates:
1. Structure discovery (scraped HTML) or outrights parsing (odds feed)
2. Record extraction, falling through to the next strategy when a
   strategy's rows yield no valid records
3. Odds backfill from player containers
4. Tier assignment
5. Weekly snapshot reuse (``get_weekly_leaderboard``)

Source failures (``SourceUnavailableError``) are never caught here; an
empty ``players`` list means the source answered but held no usable data.

Usage:
    from golf_tiers.pipeline.leaderboard_pipeline import build_leaderboard
    result = build_leaderboard(html, tournament_hint="Sony Open in Hawaii")
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol, Union

from bs4 import BeautifulSoup

from golf_tiers.config import (
    DEFAULT_SCANNER_CONFIG,
    DEFAULT_TOURNAMENT_NAME,
    MAX_RECORDS,
    TOURNAMENT_SELECTORS,
    ScannerConfig,
)
from golf_tiers.db import Snapshot
from golf_tiers.ingestion.record_extractor import backfill_missing_odds, extract
from golf_tiers.ingestion.structure_scanner import (
    Document,
    as_document,
    describe_document,
    iter_competitor_sources,
    scan_player_containers,
)
from golf_tiers.odds.odds_api import parse_outrights_feed
from golf_tiers.odds.parsing import clean_text
from golf_tiers.pipeline.tiers import assign_tiers
from golf_tiers.records import CompetitorRecord, LeaderboardResult

LOGGER = logging.getLogger(__name__)

# Parsed JSON odds feeds arrive as a list of events or a single event dict.
SourceDocument = Union[Document, list, dict]

_MIN_TOURNAMENT_NAME_LENGTH = 6
_MAX_TOURNAMENT_NAME_LENGTH = 99


class SnapshotStoreLike(Protocol):
    def save(self, tournament: str, records: list[CompetitorRecord]) -> Snapshot: ...

    def load(self, tournament: str) -> Optional[Snapshot]: ...


def extract_tournament_name(
    soup: BeautifulSoup,
    tournament_hint: Optional[str] = None,
) -> str:
    """First heading / tournament-class element with a sensible length.

    Falls back to the hint, then to ``DEFAULT_TOURNAMENT_NAME``.
    """
    for selector in TOURNAMENT_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        text = clean_text(element.get_text(" ", strip=True))
        if _MIN_TOURNAMENT_NAME_LENGTH <= len(text) <= _MAX_TOURNAMENT_NAME_LENGTH:
            return text
    return tournament_hint or DEFAULT_TOURNAMENT_NAME


def extract_competitors(
    document: Document,
    config: ScannerConfig = DEFAULT_SCANNER_CONFIG,
    max_records: int = MAX_RECORDS,
) -> tuple[list[CompetitorRecord], Optional[str]]:
    """Run the strategy chain until one yields records.

    Parameters
    ----------
    document : str | bytes | BeautifulSoup
        Raw or parsed HTML.
    config : ScannerConfig
        Structure heuristics.
    max_records : int
        Result cap.

    Returns
    -------
    tuple[list[CompetitorRecord], str | None]
        Records and the name of the strategy that produced them; ``([], None)``
        when no strategy found anything.
    """
    soup = as_document(document)

    for selection in iter_competitor_sources(soup, config):
        records = extract(selection, config.name_rules, max_records)
        if not records:
            LOGGER.info(
                "Strategy %s matched %d rows but none were valid; trying next strategy",
                selection.strategy, len(selection),
            )
            continue

        if selection.strategy != "container_class":
            backfill_missing_odds(records, scan_player_containers(soup, config))
        return records[:max_records], selection.strategy

    LOGGER.warning("No competitor structure found in document: %s", describe_document(soup))
    return [], None


def _now_iso(now: Optional[datetime]) -> str:
    return (now or datetime.now(timezone.utc)).isoformat()


def build_leaderboard(
    document: SourceDocument,
    tournament_hint: Optional[str] = None,
    now: Optional[datetime] = None,
    config: ScannerConfig = DEFAULT_SCANNER_CONFIG,
    max_records: int = MAX_RECORDS,
) -> LeaderboardResult:
    """Extract, normalise and tier the competitors in one document.

    Parameters
    ----------
    document : str | bytes | BeautifulSoup | list | dict
        Scraped HTML, or a parsed outrights feed.
    tournament_hint : str, optional
        Tournament name used to pick an event in multi-event feeds and as
        the fallback display name.
    now : datetime, optional
        Timestamp for ``lastUpdated``; defaults to now (UTC).
    config : ScannerConfig
        Structure heuristics for HTML documents.
    max_records : int
        Result cap.

    Returns
    -------
    LeaderboardResult
        Tiered players, favourite first. ``players`` is empty when the
        document held no usable data.
    """
    if isinstance(document, (list, dict)):
        title, records = parse_outrights_feed(
            document, tournament_hint, config.name_rules, max_records
        )
        tournament = title or tournament_hint or DEFAULT_TOURNAMENT_NAME
        strategy = "odds_feed" if records else None
    else:
        soup = as_document(document)
        tournament = extract_tournament_name(soup, tournament_hint)
        records, strategy = extract_competitors(soup, config, max_records)

    players = assign_tiers(records)
    LOGGER.info("%s: %d players via %s", tournament, len(players), strategy or "no strategy")
    return LeaderboardResult(
        tournament=tournament,
        players=players,
        last_updated=_now_iso(now),
        source_strategy=strategy,
    )


def leaderboard_from_snapshot(snapshot: Snapshot) -> LeaderboardResult:
    return LeaderboardResult(
        tournament=snapshot.tournament,
        players=snapshot.players,
        last_updated=snapshot.timestamp,
        source_strategy="snapshot",
    )


def get_weekly_leaderboard(
    tournament: str,
    fetch_document: Callable[[], Any],
    store: Optional[SnapshotStoreLike] = None,
    force: bool = False,
    now: Optional[datetime] = None,
) -> LeaderboardResult:
    """Return this week's leaderboard, fetching only on a snapshot miss.

    Parameters
    ----------
    tournament : str
        Tournament name; snapshot key and tournament hint.
    fetch_document : callable
        Zero-argument callable returning raw HTML or a parsed odds feed.
        Its exceptions propagate unchanged.
    store : SnapshotStoreLike, optional
        Snapshot store. Without one every call fetches.
    force : bool
        Ignore an existing snapshot and fetch again.
    now : datetime, optional
        Timestamp for ``lastUpdated``.

    Returns
    -------
    LeaderboardResult
        Cached or freshly built leaderboard. Empty results are not saved.
    """
    if store is not None and not force:
        snapshot = store.load(tournament)
        if snapshot is not None:
            LOGGER.info(
                "Using snapshot for %r from week %s (%d players)",
                tournament, snapshot.week, len(snapshot.players),
            )
            return leaderboard_from_snapshot(snapshot)

    document = fetch_document()
    result = build_leaderboard(document, tournament_hint=tournament, now=now)

    if store is not None and not result.is_empty:
        store.save(tournament, result.players)
    return result
