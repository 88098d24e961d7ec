"""Golf Draft Tiers Dashboard.

Interactive Streamlit dashboard for browsing the tiered odds leaderboard
and picking a draft team (one player per tier).

Usage:
    streamlit run app/dashboard.py
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure project root is on sys.path so `golf_tiers.*` imports work
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import logging
from functools import partial

import pandas as pd
import streamlit as st

from golf_tiers.config import DB_PATH, DEFAULT_TARGET_URL, DEFAULT_TOURNAMENT_NAME, TIER_NAMES
from golf_tiers.db import SnapshotStore
from golf_tiers.ingestion.fetch import SourceUnavailableError, fetch_page_html
from golf_tiers.odds.odds_api import fetch_tournament_feed
from golf_tiers.pipeline.draft import team_total_score, validate_team_selection
from golf_tiers.pipeline.leaderboard_pipeline import get_weekly_leaderboard
from golf_tiers.pipeline.tiers import group_by_tier
from golf_tiers.records import LeaderboardResult, records_to_frame

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(name)s | %(message)s")
LOGGER = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pipeline runner (session-state cached)
# ---------------------------------------------------------------------------

def _run_pipeline(tournament: str, source: str, url: str, refresh: bool) -> None:
    """Fetch (or load) the leaderboard and store it in session state."""
    if source == "Odds API":
        fetch = partial(fetch_tournament_feed, tournament)
    else:
        fetch = partial(fetch_page_html, url)

    st.session_state.pop("fetch_error", None)
    with st.spinner(f"Loading {tournament} odds..."):
        try:
            result = get_weekly_leaderboard(
                tournament, fetch, store=SnapshotStore(DB_PATH), force=refresh,
            )
        except SourceUnavailableError as exc:
            LOGGER.warning("Fetch failed: %s", exc)
            st.session_state["fetch_error"] = str(exc)
            return
    st.session_state["leaderboard"] = result


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def _format_pct(val: float | None) -> str:
    if val is None or pd.isna(val):
        return "—"
    return f"{val * 100:.1f}%"


def _tier_table(players) -> pd.DataFrame:
    df = records_to_frame(players).drop(columns=["tier"])
    if df["probability"].notna().any():
        df["probability"] = df["probability"].map(_format_pct)
    else:
        df = df.drop(columns=["probability"])
    return df.rename(columns=str.title)


def _render_draft(result: LeaderboardResult) -> None:
    st.subheader("Draft Your Team")
    tiers = group_by_tier(result.players)
    picks: dict[int, str] = {}
    cols = st.columns(3)
    for index, (name, players) in enumerate(zip(TIER_NAMES, tiers)):
        with cols[index % 3]:
            options = [p.name for p in players]
            if not options:
                st.caption(f"{name}: no players")
                continue
            picks[index + 1] = st.selectbox(name, options, key=f"tier{index + 1}")

    try:
        validate_team_selection(picks, result.players)
    except ValueError as exc:
        st.warning(str(exc))
        return
    st.metric("Team score (to par)", team_total_score(picks, result.players))


# ---------------------------------------------------------------------------
# Main app
# ---------------------------------------------------------------------------

def main() -> None:
    st.set_page_config(page_title="Golf Draft Tiers", layout="wide")
    st.title("Golf Odds Leaderboard & Draft Tiers")

    # --- Sidebar ---
    with st.sidebar:
        st.header("Controls")
        tournament = st.text_input("Tournament", value=DEFAULT_TOURNAMENT_NAME)
        source = st.radio("Source", ["Odds page", "Odds API"], index=0)
        url = st.text_input("Odds page URL", value=DEFAULT_TARGET_URL,
                            disabled=source != "Odds page")
        refresh = st.toggle("Ignore this week's snapshot", value=False)
        st.divider()
        run_clicked = st.button("Load Leaderboard", type="primary", use_container_width=True)

    if run_clicked:
        _run_pipeline(tournament, source, url, refresh)

    # --- Main area ---
    if "fetch_error" in st.session_state:
        st.error(
            f"Failed to fetch leaderboard data: {st.session_state['fetch_error']}\n\n"
            "Check the API keys in .env and try again."
        )
        return

    if "leaderboard" not in st.session_state:
        st.info("Enter a tournament, then click **Load Leaderboard**.")
        return

    result: LeaderboardResult = st.session_state["leaderboard"]
    st.caption(f"{result.tournament}  |  Last updated {result.last_updated}")

    if result.is_empty:
        st.info("The source responded but no players could be extracted. "
                "The page layout may have changed.")
        return

    for name, players in zip(TIER_NAMES, group_by_tier(result.players)):
        if not players:
            continue
        label = "player" if len(players) == 1 else "players"
        with st.expander(f"{name} ({len(players)} {label})", expanded=True):
            st.dataframe(_tier_table(players), use_container_width=True, hide_index=True)

    st.divider()
    _render_draft(result)


if __name__ == "__main__":
    main()
