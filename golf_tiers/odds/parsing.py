"""Odds token parsing and implied probability conversion.

Sportsbook pages quote prices in whatever notation the site prefers, so
every odds string is reduced to a unit-less ``odds rank`` for ordering:

- American ``+500`` / ``-500``  -> 500 (sign ignored)
- Fractional ``5/1``           -> (5 / 1) * 100
- Decimal ``6.0``              -> (6.0 - 1) * 100
- Bare integer ``500``         -> 500
- Anything else                -> inf (sorts last)

Implied probability is only computed from American odds, which is what
the outrights feed is requested in.
"""

from __future__ import annotations

import math
import re
from typing import Optional, Union

from golf_tiers.config import NOT_AVAILABLE

_AMERICAN_RE = re.compile(r"^[+-]\d+$")
_FRACTIONAL_RE = re.compile(r"^(\d+)/(\d+)$")
_DECIMAL_RE = re.compile(r"^\d+\.\d+$")
_INTEGER_RE = re.compile(r"^\d+$")
_TREND_PREFIX_RE = re.compile(r"^(up|down)\s*", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")
# Typeset pages print favourites with U+2212 rather than an ASCII hyphen.
_UNICODE_MINUS = "\u2212"

OddsValue = Union[str, int, float, None]


def clean_text(text: Optional[str]) -> str:
    """Collapse runs of whitespace and strip the ends."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def strip_trend_prefix(text: str) -> str:
    """Drop the ``Up`` / ``Down`` movement label some books prepend to prices."""
    text = clean_text(text).replace(_UNICODE_MINUS, "-")
    return _TREND_PREFIX_RE.sub("", text).strip()


def _normalise_token(value: OddsValue) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        if isinstance(value, float):
            if not math.isfinite(value):
                return ""
            if value.is_integer():
                return str(int(value))
        return str(value)
    return strip_trend_prefix(str(value))


def is_odds_text(text: OddsValue) -> bool:
    """Return True if ``text`` is American, fractional or decimal odds."""
    token = _normalise_token(text)
    if not token:
        return False
    return bool(
        _AMERICAN_RE.match(token)
        or _FRACTIONAL_RE.match(token)
        or _DECIMAL_RE.match(token)
    )


def parse_odds_rank(text: OddsValue) -> float:
    """Convert an odds token to a comparable rank (lower = more favoured).

    Parameters
    ----------
    text : str | int | float | None
        Raw odds as displayed by the source.

    Returns
    -------
    float
        Rank value; ``inf`` for empty, ``N/A`` or unrecognised input.

    Examples
    --------
    >>> parse_odds_rank("+500")
    500.0
    >>> parse_odds_rank("-500")
    500.0
    >>> parse_odds_rank("5/1")
    500.0
    """
    token = _normalise_token(text)
    if not token or token.upper() == NOT_AVAILABLE:
        return math.inf

    if _AMERICAN_RE.match(token):
        return float(abs(int(token)))

    fractional = _FRACTIONAL_RE.match(token)
    if fractional:
        numerator, denominator = int(fractional.group(1)), int(fractional.group(2))
        if denominator == 0:
            return math.inf
        return numerator / denominator * 100

    if _DECIMAL_RE.match(token):
        return (float(token) - 1) * 100

    if _INTEGER_RE.match(token):
        return float(int(token))

    return math.inf


def odds_to_probability(american_odds: OddsValue) -> Optional[float]:
    """Convert American odds to implied win probability.

    Parameters
    ----------
    american_odds : str | int | float | None
        Signed American price, e.g. ``+500``, ``-150`` or ``500``.

    Returns
    -------
    float | None
        Probability in (0, 1), or None for invalid input.

    Examples
    --------
    >>> odds_to_probability(100)
    0.5
    >>> odds_to_probability("-300")
    0.75
    """
    if american_odds is None or isinstance(american_odds, bool):
        return None
    try:
        odds = float(str(american_odds).strip().replace(_UNICODE_MINUS, "-").lstrip("+"))
    except ValueError:
        return None
    if not math.isfinite(odds) or odds == 0:
        return None

    if odds > 0:
        return 100.0 / (odds + 100.0)
    return abs(odds) / (abs(odds) + 100.0)


def probability_to_odds(probability: Optional[float]) -> str:
    """Convert a win probability back to a display American odds string.

    Parameters
    ----------
    probability : float | None
        Win probability.

    Returns
    -------
    str
        ``+NNN`` for underdogs, ``-NNN`` for favourites, ``N/A`` when the
        probability is outside the open interval (0, 1).
    """
    if probability is None or not 0 < probability < 1:
        return NOT_AVAILABLE

    decimal = 1.0 / probability
    if decimal >= 2:
        return f"+{round((decimal - 1) * 100)}"
    return str(round(-100 / (decimal - 1)))


def format_american_odds(price: OddsValue) -> str:
    """Render a numeric American price with an explicit sign."""
    if price is None or isinstance(price, bool):
        return NOT_AVAILABLE
    try:
        value = int(round(float(str(price).strip().replace(_UNICODE_MINUS, "-").lstrip("+"))))
    except ValueError:
        return NOT_AVAILABLE
    if value == 0:
        return NOT_AVAILABLE
    return f"+{value}" if value > 0 else str(value)
