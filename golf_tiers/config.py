"""Project configuration and constants."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = PROJECT_ROOT / "data"
DB_PATH = DATA_DIR / "golf_tiers.db"

DEFAULT_TOURNAMENT_NAME = "Sony Open in Hawaii"
DEFAULT_TARGET_URL = (
    "https://www.pgatour.com/tournaments/2026/sony-open-in-hawaii/R2026006/odds"
)

# Result set bounds
MAX_RECORDS: int = 100
NOT_AVAILABLE: str = "N/A"

# ---------------------------------------------------------------------------
# Tiering
# ---------------------------------------------------------------------------
TIER_COUNT: int = 6
# Integer percentages of the odds-bearing field, favourites first.
TIER_PERCENTAGES: tuple[int, ...] = (5, 10, 15, 20, 25, 25)
TIER_NAMES: tuple[str, ...] = (
    "Tier 1 - Favorites",
    "Tier 2 - Strong Contenders",
    "Tier 3 - Solid Picks",
    "Tier 4 - Good Value",
    "Tier 5 - Long Shots",
    "Tier 6 - Field",
)

# ---------------------------------------------------------------------------
# Name validation heuristics
# ---------------------------------------------------------------------------
# Lower-case substrings; any hit rejects the candidate.
BOILERPLATE_PATTERNS: tuple[str, ...] = (
    # navigation / section headers
    "signature events", "how it works", "groupings official", "how to watch",
    "tournament", "leaderboard", "odds", "schedule", "players", "news",
    "video", "mobile app", "follow us", "about", "contact", "quick links",
    "weather", "search", "filter", "advertisement",
    # venue / marketing / ticketing
    "waialae country club", "country club", "marketing partners",
    "payne stewart award", "fan council", "fan shop", "mastercard tickets",
    "tickets", "social responsibility", "better decisions",
    # accounts / legal / consent banners
    "create", "account", "sign in", "sign up", "privacy", "terms", "cookie",
    "accessibility", "consent", "reject", "confirm", "choices", "opt out",
    "preference", "apply", "cancel", "favorite",
)

# Three-letter country codes rendered next to player names.
COUNTRY_CODES: frozenset[str] = frozenset({
    "USA", "KOR", "JPN", "ENG", "CAN", "FIJ", "SCO", "COL", "AUS", "BEL",
    "FRA", "NOR", "PHI", "ARG", "IRL", "RSA", "SWE", "MEX", "PUR", "CHN",
    "GER", "ESP", "ITA", "DEN", "AUT", "NZL", "NIR", "WAL", "TPE", "VEN",
    "ZIM", "CHI", "FIN", "IND", "THA",
})

# Words stripped from a whole cell before salvaging a name from it.
CELL_NOISE_WORDS: frozenset[str] = frozenset({
    "favorite", "create", "account", "sign", "up", "in", "quick", "links",
    "weather", "your", "opt", "out", "preference", "signal", "honored",
    "switch", "label", "search", "icon", "filter", "apply", "cancel",
    "consent", "leg", "interest", "reject", "all", "confirm", "my",
    "choices", "aon", "better", "decisions",
})


@dataclass(frozen=True)
class NameRules:
    """Bounds and block-lists used to accept a competitor name."""

    min_length: int = 3
    max_length: int = 50
    record_min_length: int = 6
    record_max_length: int = 40
    min_tokens: int = 2
    max_tokens: int = 3
    blocklist: tuple[str, ...] = BOILERPLATE_PATTERNS
    country_codes: frozenset[str] = COUNTRY_CODES
    noise_words: frozenset[str] = CELL_NOISE_WORDS


DEFAULT_NAME_RULES = NameRules()

# ---------------------------------------------------------------------------
# Structure scanning heuristics
# ---------------------------------------------------------------------------
HEADER_ODDS_KEYWORDS: tuple[str, ...] = ("odds", "betting")
HEADER_NAME_KEYWORDS: tuple[str, ...] = ("player", "golfer", "name")
HEADER_POSITION_KEYWORDS: tuple[str, ...] = ("pos", "rank", "place", "#")
HEADER_SCORE_KEYWORDS: tuple[str, ...] = ("score", "total", "to par")

CONTAINER_SELECTOR = (
    '[class*="player"], [class*="Player"], [data-testid*="player"], '
    '[class*="odds-row"], [class*="betting-row"], li[class*="player"], '
    '[class*="betting"], [class*="Betting"]'
)
CONTAINER_NAME_SELECTOR = '[class*="name"], [class*="Name"], strong, h3, h4, a'
CONTAINER_ODDS_SELECTOR = (
    '[class*="odds"], [class*="Odds"], [class*="betting"], [class*="Betting"], '
    "[data-odds]"
)
FREE_TEXT_ELEMENTS: tuple[str, ...] = ("div", "span", "p", "li")
FREE_TEXT_ODDS_SELECTOR = '[class*="odds"], [class*="betting"]'
# Case-sensitive substrings; free text has no structure to vouch for it.
FREE_TEXT_BLOCKLIST: tuple[str, ...] = (
    "Tournament", "Open", "Leaderboard", "Odds", "Signature", "How It Works",
    "Groupings", "Country Club", "Marketing", "Fan", "Shop", "Tickets",
)
TOURNAMENT_SELECTORS: tuple[str, ...] = (
    "h1",
    '[class*="tournament"]',
    '[class*="Tournament"]',
    '[class*="event"]',
    '[class*="Event"]',
)


@dataclass(frozen=True)
class ScannerConfig:
    """Keyword lists and selectors that drive structure discovery."""

    odds_keywords: tuple[str, ...] = HEADER_ODDS_KEYWORDS
    name_keywords: tuple[str, ...] = HEADER_NAME_KEYWORDS
    position_keywords: tuple[str, ...] = HEADER_POSITION_KEYWORDS
    score_keywords: tuple[str, ...] = HEADER_SCORE_KEYWORDS
    min_columns: int = 6
    container_selector: str = CONTAINER_SELECTOR
    container_name_selector: str = CONTAINER_NAME_SELECTOR
    container_odds_selector: str = CONTAINER_ODDS_SELECTOR
    free_text_elements: tuple[str, ...] = FREE_TEXT_ELEMENTS
    free_text_odds_selector: str = FREE_TEXT_ODDS_SELECTOR
    free_text_blocklist: tuple[str, ...] = FREE_TEXT_BLOCKLIST
    free_text_max_candidates: int = 50
    name_rules: NameRules = field(default_factory=NameRules)


DEFAULT_SCANNER_CONFIG = ScannerConfig()

# ---------------------------------------------------------------------------
# Scraping proxy (ScraperAPI, https://www.scraperapi.com)
# ---------------------------------------------------------------------------
SCRAPER_API_URL: str = "https://api.scraperapi.com"
SCRAPER_REQUEST_TIMEOUT: int = 30
SCRAPER_USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# ---------------------------------------------------------------------------
# Odds API Configuration (The Odds API, https://the-odds-api.com)
# ---------------------------------------------------------------------------
ODDS_API_SPORT_GROUP: str = "Golf"
ODDS_API_MARKET: str = "outrights"
ODDS_API_REGIONS: str = "us"
ODDS_API_ODDS_FORMAT: str = "american"
