"""Tests for odds page structure discovery."""

import pytest
from bs4 import BeautifulSoup

from golf_tiers.config import ScannerConfig
from golf_tiers.ingestion.structure_scanner import (
    ColumnRoles,
    as_document,
    describe_document,
    iter_competitor_sources,
    locate_competitor_source,
    positional_roles,
    resolve_roles_from_header,
    scan_free_text,
    scan_header_keyword_table,
    scan_player_containers,
    scan_wide_table,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

HEADER_TABLE_HTML = """
<table>
  <thead><tr><th>Pos</th><th>Player</th><th>Score</th><th>Odds</th></tr></thead>
  <tbody>
    <tr><td>1</td><td>Jon Rahm</td><td>-10</td><td>+500</td></tr>
    <tr><td>T2</td><td>Scottie Scheffler</td><td>-8</td><td>+650</td></tr>
  </tbody>
</table>
"""

WIDE_TABLE_HTML = """
<table>
  <tr><th>#</th><th>Golfer</th><th>Today</th><th>Thru</th><th>Total</th><th>Line</th></tr>
  <tr><td>1</td><td>Jon Rahm</td><td>-3</td><td>F</td><td>-10</td><td>+500</td></tr>
  <tr><td>2</td><td>Sepp Straka</td><td>-2</td><td>F</td><td>-7</td><td>+1200</td></tr>
</table>
"""

CONTAINER_HTML = """
<div class="player-row" data-odds="+480">
  <span class="player-name">Jon Rahm</span><span class="odds">+500</span>
</div>
<div class="player-row">
  <span class="player-name">Sepp Straka</span><span class="odds">+1200</span>
</div>
"""

FREE_TEXT_HTML = """
<section>
  <div><span>Jon Rahm</span><span class="odds">+500</span></div>
  <div><span>Fan Shop</span></div>
  <p>Sepp Straka</p>
</section>
"""


@pytest.fixture
def config():
    return ScannerConfig()


# ---------------------------------------------------------------------------
# Column roles
# ---------------------------------------------------------------------------

class TestColumnRoles:
    def test_header_labels(self, config):
        roles = resolve_roles_from_header(["Pos", "Player", "Score", "Odds"], config)
        assert roles == ColumnRoles(position=0, name=1, score=2, odds=3)
        assert roles.width == 4

    def test_header_without_odds_column(self, config):
        assert resolve_roles_from_header(["Pos", "Player", "Score"], config) is None

    def test_betting_keyword(self, config):
        roles = resolve_roles_from_header(["Golfer", "Betting Line"], config)
        assert roles.name == 0 and roles.odds == 1

    def test_positional_defaults_to_last_column(self):
        roles = positional_roles(5)
        assert roles == ColumnRoles(position=0, name=1, score=2, odds=4)

    def test_positional_narrow_tables(self):
        assert positional_roles(1) == ColumnRoles(name=0)
        assert positional_roles(2) == ColumnRoles(position=0, name=1)


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

class TestStrategies:
    def test_header_keyword_table(self, config):
        selection = scan_header_keyword_table(as_document(HEADER_TABLE_HTML), config)
        assert selection.strategy == "header_keyword"
        assert len(selection) == 2
        assert selection.roles.odds == 3
        assert selection.rows[1].cells[1].text == "Scottie Scheffler"

    def test_header_keyword_needs_both_keywords(self, config):
        assert scan_header_keyword_table(as_document(WIDE_TABLE_HTML), config) is None

    def test_wide_table_finds_odds_column(self, config):
        selection = scan_wide_table(as_document(WIDE_TABLE_HTML), config)
        assert selection.strategy == "column_count"
        assert len(selection) == 2
        assert selection.roles.name == 1
        assert selection.roles.odds == 5

    def test_wide_table_min_columns(self):
        narrow = ScannerConfig(min_columns=7)
        assert scan_wide_table(as_document(WIDE_TABLE_HTML), narrow) is None

    def test_wide_table_without_header_keeps_first_row(self, config):
        html = """
        <table>
          <tr><td>1</td><td>Scottie Scheffler</td><td>-3</td><td>F</td><td>-10</td><td>+300</td></tr>
          <tr><td>2</td><td>Jon Rahm</td><td>-2</td><td>F</td><td>-9</td><td>+500</td></tr>
          <tr><td>3</td><td>Sepp Straka</td><td>-1</td><td>F</td><td>-8</td><td>+1200</td></tr>
        </table>
        """
        selection = scan_wide_table(as_document(html), config)
        assert len(selection) == 3
        assert selection.rows[0].cells[1].text == "Scottie Scheffler"
        assert selection.roles.odds == 5

    def test_labelled_td_row_is_a_header(self, config):
        html = """
        <table>
          <tr><td>Pos</td><td>Player</td><td>Today</td><td>Thru</td><td>Total</td><td>Odds</td></tr>
          <tr><td>1</td><td>Jon Rahm</td><td>-3</td><td>F</td><td>-10</td><td>+500</td></tr>
          <tr><td>2</td><td>Sepp Straka</td><td>-2</td><td>F</td><td>-7</td><td>+1200</td></tr>
        </table>
        """
        selection = scan_wide_table(as_document(html), config)
        assert [row.cells[1].text for row in selection.rows] == ["Jon Rahm", "Sepp Straka"]

    def test_player_containers(self, config):
        selection = scan_player_containers(as_document(CONTAINER_HTML), config)
        assert selection.strategy == "container_class"
        assert [row.cells[0].text for row in selection.rows] == ["Jon Rahm", "Sepp Straka"]
        assert selection.rows[0].cells[1].attribute_odds == "+480"
        assert selection.rows[1].cells[1].text == "+1200"

    def test_player_container_skips_empty_name_match(self, config):
        html = """
        <div class="player-row">
          <a><img src="flag.png"></a>
          <span class="player-name">Jon Rahm</span><span class="odds">+500</span>
        </div>
        """
        selection = scan_player_containers(as_document(html), config)
        assert len(selection) == 1
        assert selection.rows[0].cells[0].text == "Jon Rahm"
        assert selection.rows[0].cells[1].text == "+500"

    def test_free_text(self, config):
        selection = scan_free_text(as_document(FREE_TEXT_HTML), config)
        assert selection.strategy == "free_text"
        names = [row.cells[0].text for row in selection.rows]
        assert names == ["Jon Rahm", "Sepp Straka"]
        assert selection.rows[0].cells[1].text == "+500"

    def test_free_text_cap(self):
        html = "".join(f"<p>Adam Scott{'x' * i}</p>" for i in range(1, 6))
        capped = ScannerConfig(free_text_max_candidates=3)
        assert len(scan_free_text(as_document(html), capped)) == 3

    def test_cell_prefers_button_text(self, config):
        html = """
        <table>
          <tr><th>Player</th><th>Odds</th></tr>
          <tr><td>Jon Rahm</td><td><span>Up +500</span><button>+450</button></td></tr>
        </table>
        """
        cell = scan_header_keyword_table(as_document(html), config).rows[0].cells[1]
        assert cell.action_text == "+450"
        assert "Up +500" in cell.text


# ---------------------------------------------------------------------------
# Strategy chain
# ---------------------------------------------------------------------------

class TestStrategyChain:
    def test_priority_order(self, config):
        html = HEADER_TABLE_HTML + CONTAINER_HTML
        strategies = [s.strategy for s in iter_competitor_sources(html, config)]
        assert strategies[0] == "header_keyword"
        assert "container_class" in strategies

    def test_locate_falls_through_to_containers(self, config):
        assert locate_competitor_source(CONTAINER_HTML, config).strategy == "container_class"

    def test_nothing_found(self, config):
        html = "<html><head><title>Maintenance</title></head><body><h1>Back soon</h1></body></html>"
        assert locate_competitor_source(html, config) is None

    def test_accepts_parsed_soup(self, config):
        soup = BeautifulSoup(HEADER_TABLE_HTML, "html.parser")
        assert as_document(soup) is soup
        assert locate_competitor_source(soup, config).strategy == "header_keyword"

    def test_describe_document(self):
        html = "<title>Odds</title><table></table><div class='odds'>+500</div>"
        assert describe_document(as_document(html)) == {
            "title": "Odds", "tables": 1, "odds_elements": 1,
        }
