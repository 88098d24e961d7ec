"""Locate the part of an odds page that holds one row per competitor.

Odds pages change markup without notice, so discovery is an ordered chain
of strategies, each a pure function ``(soup, config) -> Selection | None``.
The first strategy that returns a non-empty Selection wins:

    1. header_keyword: a table whose header mentions odds and players
    2. column_count: the first table with >= ``min_columns`` columns
    3. container_class: repeated elements with player / betting classes
    4. free_text: name-shaped text anywhere on the page

Selections are plain data (rows of cells of text), so the record
extractor never touches the parse tree.

Usage:
    from golf_tiers.ingestion.structure_scanner import locate_competitor_source
    selection = locate_competitor_source(html)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Union

from bs4 import BeautifulSoup, Tag

from golf_tiers.config import DEFAULT_SCANNER_CONFIG, ScannerConfig
from golf_tiers.ingestion.name_validator import is_record_name
from golf_tiers.odds.parsing import clean_text, is_odds_text

LOGGER = logging.getLogger(__name__)

Document = Union[str, bytes, BeautifulSoup, Tag]

# Rows sampled when looking for the odds column of a header-less table.
_ODDS_COLUMN_SAMPLE_ROWS = 5


@dataclass
class Cell:
    """Text content of one cell-like element."""

    text: str
    fragments: list[str] = field(default_factory=list)
    action_text: Optional[str] = None
    attribute_odds: Optional[str] = None


@dataclass
class Row:
    cells: list[Cell]


@dataclass(frozen=True)
class ColumnRoles:
    """Cell index for each field; None when the source has no such column."""

    position: Optional[int] = None
    name: Optional[int] = None
    score: Optional[int] = None
    odds: Optional[int] = None

    @property
    def width(self) -> int:
        indexes = [i for i in (self.position, self.name, self.score, self.odds) if i is not None]
        return max(indexes) + 1 if indexes else 0


@dataclass
class Selection:
    """Ordered row groupings found by one strategy."""

    strategy: str
    rows: list[Row]
    roles: ColumnRoles

    def __len__(self) -> int:
        return len(self.rows)


Strategy = Callable[[BeautifulSoup, ScannerConfig], Optional[Selection]]


def as_document(document: Document) -> BeautifulSoup:
    """Parse raw HTML, passing already-parsed trees through untouched."""
    if isinstance(document, (BeautifulSoup, Tag)):
        return document
    return BeautifulSoup(document, "html.parser")


def describe_document(soup: BeautifulSoup) -> dict[str, object]:
    """Summarise a page for diagnostics when nothing could be extracted."""
    title = soup.find("title")
    return {
        "title": clean_text(title.get_text()) if title else "",
        "tables": len(soup.find_all("table")),
        "odds_elements": len(soup.select('[class*="odds"], [class*="Odds"]')),
    }


# ------------------------------------------------------------------
# Cell helpers
# ------------------------------------------------------------------

def _tag_text(tag: Tag) -> str:
    return clean_text(tag.get_text(" ", strip=True))


def _cell_from_tag(tag: Tag) -> Cell:
    button = tag.find("button")
    data_odds = tag.get("data-odds")
    if data_odds is None:
        holder = tag.find(attrs={"data-odds": True})
        data_odds = holder.get("data-odds") if holder is not None else None
    return Cell(
        text=_tag_text(tag),
        fragments=[_tag_text(el) for el in tag.find_all(True)],
        action_text=_tag_text(button) if button is not None else None,
        attribute_odds=data_odds,
    )


def _row_cells(row: Tag) -> list[Tag]:
    return row.find_all(["td", "th"], recursive=False)


# ------------------------------------------------------------------
# Table strategies
# ------------------------------------------------------------------

def _is_header_row(row: Tag, config: ScannerConfig) -> bool:
    """A leading row is a header if it holds only ``th`` cells or known labels."""
    cells = _row_cells(row)
    if cells and all(cell.name == "th" for cell in cells):
        return True
    labels = [_tag_text(cell) for cell in cells]
    return resolve_roles_from_header(labels, config) is not None


def _split_table(
    table: Tag,
    config: ScannerConfig = DEFAULT_SCANNER_CONFIG,
) -> tuple[Optional[Tag], list[Tag]]:
    """Return (header_row, data_rows); data rows must hold at least one ``td``.

    Without a ``thead`` the first row is a header only when it looks like
    one; otherwise it is the first competitor and stays in the data rows.
    """
    rows = table.find_all("tr")
    if not rows:
        return None, []

    thead = table.find("thead")
    header_row = thead.find("tr") if thead is not None else None
    if header_row is not None:
        body = [row for row in rows if row.find_parent("thead") is None]
    elif _is_header_row(rows[0], config):
        header_row, body = rows[0], rows[1:]
    else:
        body = rows

    return header_row, [row for row in body if row.find("td") is not None]


def _header_labels(header_row: Optional[Tag]) -> list[str]:
    if header_row is None:
        return []
    return [_tag_text(cell) for cell in _row_cells(header_row)]


def _header_text(table: Tag, header_row: Optional[Tag]) -> str:
    parts = [_tag_text(th) for th in table.find_all("th")]
    if header_row is not None:
        parts.append(_tag_text(header_row))
    return " ".join(parts).lower()


def _matches_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def resolve_roles_from_header(
    labels: list[str],
    config: ScannerConfig = DEFAULT_SCANNER_CONFIG,
) -> Optional[ColumnRoles]:
    """Map header labels to column roles.

    Returns None unless both a name and an odds column are identified,
    in which case the caller falls back to positional roles.
    """
    keyword_sets = (
        ("odds", config.odds_keywords),
        ("name", config.name_keywords),
        ("score", config.score_keywords),
        ("position", config.position_keywords),
    )
    roles: dict[str, int] = {}
    for index, label in enumerate(labels):
        lower = label.lower()
        if not lower:
            continue
        for role, keywords in keyword_sets:
            if role not in roles and _matches_any(lower, keywords):
                roles[role] = index
                break

    if "name" not in roles or "odds" not in roles:
        return None
    return ColumnRoles(**roles)


def _odds_column(rows: list[Tag], width: int) -> int:
    """Right-most column whose sampled cells carry odds; else the last column."""
    best: Optional[int] = None
    for row in rows[:_ODDS_COLUMN_SAMPLE_ROWS]:
        cells = _row_cells(row)
        for index, cell in enumerate(cells[:width]):
            if index < 2:
                continue
            parsed = _cell_from_tag(cell)
            if is_odds_text(parsed.action_text) or is_odds_text(parsed.text):
                best = index if best is None else max(best, index)
    return best if best is not None else width - 1


def positional_roles(width: int, rows: Optional[list[Tag]] = None) -> ColumnRoles:
    """Fixed convention: position, name, score, ..., odds."""
    if width < 2:
        return ColumnRoles(name=0)
    if width == 2:
        return ColumnRoles(position=0, name=1)
    odds = _odds_column(rows or [], width)
    score = 2 if width >= 4 and odds != 2 else None
    return ColumnRoles(position=0, name=1, score=score, odds=odds)


def _table_selection(
    strategy: str,
    table: Tag,
    header_row: Optional[Tag],
    data_rows: list[Tag],
    config: ScannerConfig,
) -> Optional[Selection]:
    labels = _header_labels(header_row)
    width = len(labels) or max((len(_row_cells(row)) for row in data_rows), default=0)
    roles = resolve_roles_from_header(labels, config) or positional_roles(width, data_rows)

    rows = []
    for data_row in data_rows:
        cells = _row_cells(data_row)
        if len(cells) < roles.width:
            continue
        rows.append(Row(cells=[_cell_from_tag(cell) for cell in cells]))

    if not rows:
        return None
    LOGGER.debug("%s: table with %d rows, roles=%s", strategy, len(rows), roles)
    return Selection(strategy=strategy, rows=rows, roles=roles)


def scan_header_keyword_table(
    soup: BeautifulSoup,
    config: ScannerConfig = DEFAULT_SCANNER_CONFIG,
) -> Optional[Selection]:
    """Find a table whose header mentions both an odds and a player keyword."""
    for table in soup.find_all("table"):
        header_row, data_rows = _split_table(table, config)
        header_text = _header_text(table, header_row)
        if _matches_any(header_text, config.odds_keywords) and _matches_any(
            header_text, config.name_keywords
        ):
            selection = _table_selection("header_keyword", table, header_row, data_rows, config)
            if selection is not None:
                return selection
    return None


def scan_wide_table(
    soup: BeautifulSoup,
    config: ScannerConfig = DEFAULT_SCANNER_CONFIG,
) -> Optional[Selection]:
    """Use the first table whose first row has at least ``min_columns`` cells."""
    for table in soup.find_all("table"):
        first_row = table.find("tr")
        if first_row is None or len(_row_cells(first_row)) < config.min_columns:
            continue
        header_row, data_rows = _split_table(table, config)
        return _table_selection("column_count", table, header_row, data_rows, config)
    return None


# ------------------------------------------------------------------
# Non-tabular strategies
# ------------------------------------------------------------------

def _container_row(container: Tag, config: ScannerConfig) -> Optional[Row]:
    # Icon links can match the name selector before the real name element.
    name_el = next(
        (el for el in container.select(config.container_name_selector) if _tag_text(el)),
        None,
    )
    if name_el is None:
        return None
    name_text = _tag_text(name_el)

    odds_el = container.select_one(config.container_odds_selector)
    data_odds = container.get("data-odds")
    if data_odds is None and odds_el is not None:
        data_odds = odds_el.get("data-odds")

    name_cell = Cell(
        text=name_text,
        fragments=[_tag_text(el) for el in name_el.find_all(True)],
    )
    odds_cell = Cell(
        text=_tag_text(odds_el) if odds_el is not None else "",
        attribute_odds=data_odds,
    )
    return Row(cells=[name_cell, odds_cell])


def scan_player_containers(
    soup: BeautifulSoup,
    config: ScannerConfig = DEFAULT_SCANNER_CONFIG,
) -> Optional[Selection]:
    """Collect repeated player / betting-row elements that expose a name."""
    rows = []
    for container in soup.select(config.container_selector):
        row = _container_row(container, config)
        if row is not None:
            rows.append(row)
    if not rows:
        return None
    return Selection(strategy="container_class", rows=rows, roles=ColumnRoles(name=0, odds=1))


def _is_free_text_name(text: str, config: ScannerConfig) -> bool:
    if any(blocked in text for blocked in config.free_text_blocklist):
        return False
    return is_record_name(text, config.name_rules)


def _nearby_odds_text(element: Tag, config: ScannerConfig) -> str:
    scopes = ("div", "tr", "li")
    scope = element if element.name in scopes else element.find_parent(list(scopes))
    if scope is None:
        return ""
    odds_el = scope.select_one(config.free_text_odds_selector)
    return _tag_text(odds_el) if odds_el is not None else ""


def scan_free_text(
    soup: BeautifulSoup,
    config: ScannerConfig = DEFAULT_SCANNER_CONFIG,
) -> Optional[Selection]:
    """Last resort: name-shaped text anywhere, paired with nearby odds."""
    seen: set[str] = set()
    rows = []
    for element in soup.find_all(list(config.free_text_elements)):
        text = _tag_text(element)
        if text in seen or not _is_free_text_name(text, config):
            continue
        seen.add(text)
        rows.append(Row(cells=[
            Cell(text=text, fragments=[text]),
            Cell(text=_nearby_odds_text(element, config)),
        ]))
        if len(rows) >= config.free_text_max_candidates:
            break

    if not rows:
        return None
    return Selection(strategy="free_text", rows=rows, roles=ColumnRoles(name=0, odds=1))


STRATEGIES: tuple[Strategy, ...] = (
    scan_header_keyword_table,
    scan_wide_table,
    scan_player_containers,
    scan_free_text,
)


def iter_competitor_sources(
    document: Document,
    config: ScannerConfig = DEFAULT_SCANNER_CONFIG,
    strategies: tuple[Strategy, ...] = STRATEGIES,
) -> Iterator[Selection]:
    """Yield the non-empty Selection of each strategy, in priority order."""
    soup = as_document(document)
    for strategy in strategies:
        selection = strategy(soup, config)
        if selection:
            LOGGER.info(
                "Strategy %s found %d candidate rows", selection.strategy, len(selection)
            )
            yield selection
        else:
            LOGGER.debug("Strategy %s found nothing", strategy.__name__)


def locate_competitor_source(
    document: Document,
    config: ScannerConfig = DEFAULT_SCANNER_CONFIG,
) -> Optional[Selection]:
    """Return the first non-empty Selection, or None if every strategy fails."""
    return next(iter_competitor_sources(document, config), None)
