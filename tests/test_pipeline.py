"""Tests for the leaderboard pipeline.

Documents are built inline; fetchers and snapshot stores are fakes, so no
network access is required.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from golf_tiers.db import Snapshot, SnapshotStore
from golf_tiers.ingestion.fetch import SourceTimeoutError, SourceUnavailableError
from golf_tiers.ingestion.structure_scanner import as_document
from golf_tiers.pipeline.leaderboard_pipeline import (
    build_leaderboard,
    extract_competitors,
    extract_tournament_name,
    get_weekly_leaderboard,
)
from golf_tiers.records import CompetitorRecord

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

ODDS_PAGE = """
<html>
<head><title>Sony Open in Hawaii Odds</title></head>
<body>
  <nav><a>How It Works</a><a>Fan Council</a><a>Leaderboard</a></nav>
  <h1>Sony Open in Hawaii</h1>
  <table>
    <thead><tr><th>Pos</th><th>Player</th><th>Score</th><th>Odds</th></tr></thead>
    <tbody>
      <tr><td>1</td><td>Jon Rahm</td><td>-10</td><td>+500</td></tr>
      <tr><td>2</td><td>Scottie Scheffler</td><td>-9</td><td>+300</td></tr>
      <tr><td>3</td><td>Sepp Straka</td><td>-8</td><td>-</td></tr>
      <tr><td>4</td><td>Russell Henley</td><td>-7</td><td>+1200</td></tr>
    </tbody>
  </table>
  <div class="betting-row">
    <span class="golfer-name">Sepp Straka</span><span class="odds" data-odds="+2200">+2000</span>
  </div>
</body>
</html>
"""

# Header table whose rows hold only navigation labels, followed by real containers.
FALLTHROUGH_PAGE = """
<table>
  <tr><th>Player</th><th>Odds</th></tr>
  <tr><td>How It Works</td><td>-</td></tr>
  <tr><td>Fan Council</td><td>-</td></tr>
</table>
<div class="player-card"><h3>Jon Rahm</h3><span class="odds">+500</span></div>
<div class="player-card"><h3>Sepp Straka</h3><span class="odds">+2000</span></div>
"""

FEED = [{
    "sport_key": "golf_masters_tournament_winner",
    "sport_title": "Masters Tournament Winner",
    "bookmakers": [{
        "key": "draftkings",
        "markets": [{
            "key": "outrights",
            "outcomes": [
                {"name": "Scottie Scheffler", "price": 400},
                {"name": "Jon Rahm", "price": 900},
                {"name": "Rory McIlroy", "price": 700},
            ],
        }],
    }],
}]


class FakeStore:
    """In-memory stand-in for ``SnapshotStore``."""

    def __init__(self, snapshot: Snapshot | None = None) -> None:
        self.snapshot = snapshot
        self.saved: list[tuple[str, list[CompetitorRecord]]] = []

    def load(self, tournament: str):
        return self.snapshot

    def save(self, tournament: str, records: list[CompetitorRecord]):
        self.saved.append((tournament, records))
        self.snapshot = Snapshot(tournament, "2026-W03", NOW.isoformat(), list(records))
        return self.snapshot


# ---------------------------------------------------------------------------
# build_leaderboard
# ---------------------------------------------------------------------------

class TestBuildLeaderboard:
    def test_html_page(self):
        result = build_leaderboard(ODDS_PAGE, tournament_hint="Sony Open", now=NOW)

        assert result.tournament == "Sony Open in Hawaii"
        assert result.last_updated == NOW.isoformat()
        assert result.source_strategy == "header_keyword"
        assert [p.name for p in result.players] == [
            "Scottie Scheffler", "Jon Rahm", "Russell Henley", "Sepp Straka",
        ]
        assert all(p.tier is not None for p in result.players)
        assert result.players[0].tier == 1

    def test_missing_odds_backfilled_from_containers(self):
        result = build_leaderboard(ODDS_PAGE, now=NOW)
        straka = next(p for p in result.players if p.name == "Sepp Straka")
        assert straka.odds == "+2200"
        assert straka.score == "-8"

    def test_boilerplate_never_becomes_a_player(self):
        result = build_leaderboard(ODDS_PAGE, now=NOW)
        names = {p.name for p in result.players}
        assert not names & {"How It Works", "Fan Council", "Leaderboard"}

    def test_strategy_fallthrough(self):
        result = build_leaderboard(FALLTHROUGH_PAGE, now=NOW)
        assert result.source_strategy == "container_class"
        assert [p.name for p in result.players] == ["Jon Rahm", "Sepp Straka"]
        assert result.players[0].odds == "+500"

    def test_nothing_extractable(self, caplog):
        html = "<html><head><title>Down</title></head><body><h1>Down</h1></body></html>"
        with caplog.at_level("WARNING"):
            result = build_leaderboard(html, tournament_hint="Sony Open in Hawaii", now=NOW)
        assert result.is_empty
        assert result.tournament == "Sony Open in Hawaii"
        assert result.source_strategy is None
        assert "No competitor structure found" in caplog.text

    def test_odds_feed(self):
        result = build_leaderboard(FEED, tournament_hint="Masters", now=NOW)
        assert result.tournament == "Masters Tournament Winner"
        assert result.source_strategy == "odds_feed"
        assert [p.name for p in result.players] == ["Scottie Scheffler", "Rory McIlroy", "Jon Rahm"]
        assert all(p.probability is not None for p in result.players)
        assert [p.tier for p in result.players] == [1, 2, 3]

    def test_malformed_feed_is_empty(self):
        result = build_leaderboard([{"unexpected": True}], tournament_hint="Masters", now=NOW)
        assert result.is_empty
        assert result.tournament == "Masters"

    def test_to_dict_shape(self):
        payload = build_leaderboard(ODDS_PAGE, now=NOW).to_dict()
        assert set(payload) == {"tournament", "players", "lastUpdated"}
        first = payload["players"][0]
        assert {"position", "name", "odds", "oddsRank", "score", "tier"} <= set(first)


def test_extract_competitors_caps_records():
    rows = "".join(
        f"<tr><td>{i}</td><td>Player Name{chr(97 + i % 26)}{chr(97 + i // 26)}</td>"
        f"<td>-</td><td>+{1000 + i}</td></tr>"
        for i in range(40)
    )
    html = f"<table><tr><th>Pos</th><th>Player</th><th>Score</th><th>Odds</th></tr>{rows}</table>"
    records, strategy = extract_competitors(html, max_records=10)
    assert strategy == "header_keyword"
    assert len(records) == 10


def test_extract_competitors_headerless_table():
    html = """
    <table>
      <tr><td>1</td><td>Scottie Scheffler</td><td>-3</td><td>F</td><td>-10</td><td>+300</td></tr>
      <tr><td>2</td><td>Jon Rahm</td><td>-2</td><td>F</td><td>-9</td><td>+500</td></tr>
      <tr><td>3</td><td>Sepp Straka</td><td>-1</td><td>F</td><td>-8</td><td>+1200</td></tr>
    </table>
    """
    records, strategy = extract_competitors(html)
    assert strategy == "column_count"
    assert [r.name for r in records] == ["Scottie Scheffler", "Jon Rahm", "Sepp Straka"]
    assert records[0].odds == "+300"


def test_extract_competitors_unicode_minus_odds():
    html = (
        "<table><tr><th>Pos</th><th>Player</th><th>Score</th><th>Odds</th></tr>"
        "<tr><td>1</td><td>Jon Rahm</td><td>-10</td><td>−150</td></tr></table>"
    )
    records, _ = extract_competitors(html)
    assert records[0].odds == "-150"
    assert records[0].odds_rank == 150


def test_extract_tournament_name_fallbacks():
    assert extract_tournament_name(as_document("<h1>The Masters</h1>")) == "The Masters"
    # Too short for a tournament name.
    assert extract_tournament_name(as_document("<h1>Odds</h1>"), "Masters") == "Masters"
    assert extract_tournament_name(as_document("<p>nothing</p>")) == "Sony Open in Hawaii"


# ---------------------------------------------------------------------------
# get_weekly_leaderboard
# ---------------------------------------------------------------------------

class TestWeeklyLeaderboard:
    def test_snapshot_hit_skips_fetch(self):
        cached = Snapshot(
            "Sony Open in Hawaii", "2026-W03", NOW.isoformat(),
            [CompetitorRecord(position="1", name="Jon Rahm", odds="+500", odds_rank=500, tier=1)],
        )

        def fetch():
            raise AssertionError("fetch should not be called")

        result = get_weekly_leaderboard("Sony Open in Hawaii", fetch, store=FakeStore(cached))
        assert result.source_strategy == "snapshot"
        assert result.players[0].name == "Jon Rahm"
        assert result.last_updated == NOW.isoformat()

    def test_miss_fetches_and_saves(self):
        store = FakeStore()
        result = get_weekly_leaderboard("Sony Open in Hawaii", lambda: ODDS_PAGE, store=store, now=NOW)
        assert len(result.players) == 4
        assert store.saved[0][0] == "Sony Open in Hawaii"

    def test_force_refetches(self):
        cached = Snapshot("Sony Open in Hawaii", "2026-W03", NOW.isoformat(), [])
        store = FakeStore(cached)
        result = get_weekly_leaderboard(
            "Sony Open in Hawaii", lambda: ODDS_PAGE, store=store, force=True, now=NOW
        )
        assert result.source_strategy == "header_keyword"

    def test_empty_result_not_saved(self):
        store = FakeStore()
        result = get_weekly_leaderboard("Sony Open in Hawaii", lambda: "<p>down</p>", store=store)
        assert result.is_empty
        assert store.saved == []

    @pytest.mark.parametrize("error", [SourceUnavailableError("401"), SourceTimeoutError("slow")])
    def test_source_errors_propagate(self, error):
        def fetch():
            raise error

        store = FakeStore()
        with pytest.raises(SourceUnavailableError):
            get_weekly_leaderboard("Sony Open in Hawaii", fetch, store=store)
        assert store.saved == []

    def test_with_sqlite_store(self, tmp_path):
        store = SnapshotStore(tmp_path / "snapshots.db")
        calls = []

        def fetch():
            calls.append(1)
            return ODDS_PAGE

        first = get_weekly_leaderboard("Sony Open in Hawaii", fetch, store=store)
        second = get_weekly_leaderboard("sony open in hawaii", fetch, store=store)
        assert len(calls) == 1
        assert second.source_strategy == "snapshot"
        assert [p.name for p in second.players] == [p.name for p in first.players]
