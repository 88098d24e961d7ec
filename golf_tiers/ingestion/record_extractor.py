"""Turn a scanned Selection into deduplicated competitor records.

Rows that fail name validation are dropped silently; noisy markup makes
that the normal case rather than an error. The result is capped at
``MAX_RECORDS`` in discovery order.

Usage:
    from golf_tiers.ingestion.record_extractor import extract
    records = extract(selection)
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from golf_tiers.config import DEFAULT_NAME_RULES, MAX_RECORDS, NOT_AVAILABLE, NameRules
from golf_tiers.ingestion.name_validator import is_record_name, pick_best_name, salvage_name
from golf_tiers.ingestion.structure_scanner import Cell, ColumnRoles, Row, Selection
from golf_tiers.odds.parsing import is_odds_text, parse_odds_rank, strip_trend_prefix
from golf_tiers.records import CompetitorRecord

LOGGER = logging.getLogger(__name__)

# Leading characters of a container name compared against record names
_BACKFILL_PREFIX_LENGTH = 10
_MIN_BACKFILL_KEY_LENGTH = 3

# Rows logged in detail at DEBUG level
_DEBUG_ROWS = 5

# "1", "T5", "12." -> digits
_POSITION_RE = re.compile(r"^T?(\d+)\.?$", re.IGNORECASE)


def _cell(row: Row, index: Optional[int]) -> Optional[Cell]:
    if index is None or index >= len(row.cells):
        return None
    return row.cells[index]


def _row_position(row: Row, roles: ColumnRoles, running_count: int) -> str:
    cell = _cell(row, roles.position)
    if cell is not None:
        match = _POSITION_RE.match(cell.text)
        if match:
            return match.group(1)
    return str(running_count + 1)


def _row_name(row: Row, roles: ColumnRoles, rules: NameRules) -> Optional[str]:
    cell = _cell(row, roles.name)
    if cell is None:
        return None

    name = pick_best_name([*cell.fragments, cell.text], rules)
    if name is not None:
        return name

    salvaged = salvage_name(cell.text, rules)
    if salvaged and is_record_name(salvaged, rules):
        return salvaged
    return None


def first_valid_odds(*candidates: Optional[str]) -> Optional[str]:
    """Return the first candidate that is a recognisable odds token."""
    for candidate in candidates:
        if not candidate:
            continue
        token = strip_trend_prefix(candidate)
        if is_odds_text(token):
            return token
    return None


def _row_odds(row: Row, roles: ColumnRoles) -> str:
    cell = _cell(row, roles.odds)
    if cell is None:
        return NOT_AVAILABLE
    # A clickable odds button is more reliable than the cell's full text.
    odds = first_valid_odds(cell.action_text, cell.text, cell.attribute_odds)
    return odds or NOT_AVAILABLE


def _row_score(row: Row, roles: ColumnRoles) -> str:
    cell = _cell(row, roles.score)
    if cell is None or not cell.text:
        return "-"
    return cell.text


def extract(
    selection: Optional[Selection],
    rules: NameRules = DEFAULT_NAME_RULES,
    max_records: int = MAX_RECORDS,
) -> list[CompetitorRecord]:
    """Build one record per competitor row.

    Parameters
    ----------
    selection : Selection | None
        Rows found by the structure scanner.
    rules : NameRules
        Name validation rules.
    max_records : int
        Maximum number of records returned.

    Returns
    -------
    list[CompetitorRecord]
        Records in discovery order, unique by case-insensitive name.
        Empty when nothing valid was found.
    """
    if not selection:
        return []

    records: list[CompetitorRecord] = []
    seen: set[str] = set()
    n_rejected = 0
    n_duplicates = 0

    for row_index, row in enumerate(selection.rows):
        if len(records) >= max_records:
            LOGGER.info("Reached %d records, ignoring remaining rows", max_records)
            break

        name = _row_name(row, selection.roles, rules)
        if name is None:
            n_rejected += 1
            if row_index < _DEBUG_ROWS:
                name_cell = _cell(row, selection.roles.name)
                LOGGER.debug(
                    "Row %d rejected: no valid name in %r",
                    row_index, name_cell.text if name_cell else None,
                )
            continue

        key = name.lower()
        if key in seen:
            n_duplicates += 1
            continue
        seen.add(key)

        odds = _row_odds(row, selection.roles)
        record = CompetitorRecord(
            position=_row_position(row, selection.roles, len(records)),
            name=name,
            odds=odds,
            odds_rank=parse_odds_rank(odds),
            score=_row_score(row, selection.roles),
        )
        if row_index < _DEBUG_ROWS:
            LOGGER.debug("Row %d accepted: %s (%s)", row_index, record.name, record.odds)
        records.append(record)

    LOGGER.info(
        "%s: extracted %d records (%d rows rejected, %d duplicates)",
        selection.strategy, len(records), n_rejected, n_duplicates,
    )
    return records


def backfill_missing_odds(
    records: list[CompetitorRecord],
    containers: Optional[Selection],
) -> int:
    """Fill ``N/A`` odds from loosely structured player containers.

    A container matches a record when the first ``_BACKFILL_PREFIX_LENGTH``
    characters of its name prefix the record's name, case-insensitively.
    A ``data-odds`` attribute wins over the container's odds text.

    Parameters
    ----------
    records : list[CompetitorRecord]
        Records to update in place.
    containers : Selection | None
        Output of ``scan_player_containers`` for the same document.

    Returns
    -------
    int
        Number of records whose odds were filled.
    """
    if not containers or all(record.has_odds for record in records):
        return 0

    n_filled = 0
    for row in containers.rows:
        if len(row.cells) < 2:
            continue
        key = row.cells[0].text.lower()[:_BACKFILL_PREFIX_LENGTH]
        if len(key) < _MIN_BACKFILL_KEY_LENGTH:
            continue

        record = next(
            (r for r in records if not r.has_odds and r.name.lower().startswith(key)),
            None,
        )
        if record is None:
            continue

        odds_cell = row.cells[1]
        odds = first_valid_odds(odds_cell.attribute_odds, odds_cell.text)
        if odds is None:
            continue
        record.odds = odds
        record.odds_rank = parse_odds_rank(odds)
        n_filled += 1

    LOGGER.info("Backfilled odds for %d records from player containers", n_filled)
    return n_filled
