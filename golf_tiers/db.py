"""SQLite storage for weekly leaderboard snapshots.

A snapshot is the tiered record list for one tournament, keyed by ISO
week, so a fresh fetch is only needed once per week. Tournament names are
compared case-insensitively.

Usage:
    from golf_tiers.db import SnapshotStore
    store = SnapshotStore()
    snapshot = store.load("Sony Open in Hawaii")
"""

from __future__ import annotations

import json
import logging
import re
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pandas as pd

from .config import DB_PATH
from .records import CompetitorRecord

LOGGER = logging.getLogger(__name__)

SNAPSHOT_TABLE = "leaderboard_snapshots"
_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_SNAPSHOT_DDL = """
CREATE TABLE IF NOT EXISTS {table} (
    tournament_key TEXT NOT NULL,
    iso_week       TEXT NOT NULL,
    tournament     TEXT NOT NULL,
    saved_at       TEXT NOT NULL,
    players_json   TEXT NOT NULL,
    PRIMARY KEY (tournament_key, iso_week)
)
"""


@dataclass
class Snapshot:
    tournament: str
    week: str
    timestamp: str
    players: list[CompetitorRecord] = field(default_factory=list)


def get_connection(db_path: Path | str = DB_PATH) -> sqlite3.Connection:
    """Create a SQLite connection with row access by name.

    The parent directory is created when missing.

    Parameters
    ----------
    db_path : Path | str
        Path to the SQLite database.

    Returns
    -------
    sqlite3.Connection
        Open connection to the database.
    """
    resolved = Path(db_path)
    resolved.parent.mkdir(parents=True, exist_ok=True)

    connection = sqlite3.connect(str(resolved))
    connection.row_factory = sqlite3.Row
    return connection


def validate_identifier(name: str) -> None:
    """Ensure SQL identifiers only contain safe characters.

    Raises
    ------
    ValueError
        If the identifier contains unexpected characters.
    """
    if not _IDENTIFIER_PATTERN.match(name):
        raise ValueError(f"Invalid SQL identifier: {name}")


def table_exists(connection: sqlite3.Connection, table_name: str) -> bool:
    """Check whether a table exists."""
    validate_identifier(table_name)
    cursor = connection.execute(
        "SELECT 1 FROM sqlite_master WHERE type='table' AND name = ?",
        (table_name,),
    )
    return cursor.fetchone() is not None


def iso_week_key(moment: Optional[datetime] = None) -> str:
    """Return the ISO week of ``moment`` (default now, UTC) as ``YYYY-Www``."""
    if moment is None:
        moment = datetime.now(timezone.utc)
    year, week, _ = moment.isocalendar()
    return f"{year}-W{week:02d}"


def _tournament_key(tournament: str) -> str:
    return " ".join(tournament.lower().split())


def create_snapshots_table(
    connection: sqlite3.Connection,
    table: str = SNAPSHOT_TABLE,
) -> None:
    """Create the snapshot table if it does not exist."""
    validate_identifier(table)
    connection.execute(_SNAPSHOT_DDL.format(table=table))
    connection.commit()


def save_snapshot(
    connection: sqlite3.Connection,
    tournament: str,
    records: list[CompetitorRecord],
    now: Optional[datetime] = None,
    table: str = SNAPSHOT_TABLE,
) -> Snapshot:
    """Insert or replace this week's snapshot for a tournament.

    Parameters
    ----------
    connection : sqlite3.Connection
        Database connection.
    tournament : str
        Tournament name used as the lookup key.
    records : list[CompetitorRecord]
        Tiered records to store.
    now : datetime, optional
        Save time; defaults to now (UTC).
    table : str
        Snapshot table name.

    Returns
    -------
    Snapshot
        The stored snapshot with its timestamp and ISO week.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    week = iso_week_key(now)
    timestamp = now.isoformat()

    create_snapshots_table(connection, table)
    connection.execute(
        f"""
        INSERT INTO {table} (tournament_key, iso_week, tournament, saved_at, players_json)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(tournament_key, iso_week)
        DO UPDATE SET
            tournament = excluded.tournament,
            saved_at = excluded.saved_at,
            players_json = excluded.players_json
        """,
        (
            _tournament_key(tournament),
            week,
            tournament,
            timestamp,
            json.dumps([r.to_dict() for r in records]),
        ),
    )
    connection.commit()
    LOGGER.info("Saved %d records for %r (week %s)", len(records), tournament, week)
    return Snapshot(tournament=tournament, week=week, timestamp=timestamp, players=list(records))


def load_snapshot(
    connection: sqlite3.Connection,
    tournament: str,
    week: Optional[str] = None,
    table: str = SNAPSHOT_TABLE,
) -> Optional[Snapshot]:
    """Load a tournament's snapshot for ``week`` (default: current ISO week).

    Returns
    -------
    Snapshot | None
        None when the table or the snapshot does not exist.
    """
    if not table_exists(connection, table):
        return None
    if week is None:
        week = iso_week_key()

    df = pd.read_sql_query(
        f"""
        SELECT tournament, iso_week, saved_at, players_json
        FROM {table}
        WHERE tournament_key = ? AND iso_week = ?
        """,
        connection,
        params=(_tournament_key(tournament), week),
    )
    if df.empty:
        LOGGER.info("No snapshot for %r in week %s", tournament, week)
        return None

    row = df.iloc[0]
    players = [CompetitorRecord.from_dict(item) for item in json.loads(row["players_json"])]
    return Snapshot(
        tournament=row["tournament"],
        week=row["iso_week"],
        timestamp=row["saved_at"],
        players=players,
    )


class SnapshotStore:
    """Weekly snapshot store backed by a SQLite file."""

    def __init__(self, db_path: Path | str = DB_PATH) -> None:
        self.db_path = Path(db_path)

    def save(
        self,
        tournament: str,
        records: list[CompetitorRecord],
        now: Optional[datetime] = None,
    ) -> Snapshot:
        conn = get_connection(self.db_path)
        try:
            return save_snapshot(conn, tournament, records, now=now)
        finally:
            conn.close()

    def load(self, tournament: str, week: Optional[str] = None) -> Optional[Snapshot]:
        conn = get_connection(self.db_path)
        try:
            return load_snapshot(conn, tournament, week=week)
        finally:
            conn.close()
