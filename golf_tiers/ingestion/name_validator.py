"""Decide whether a text span is a competitor name or site boilerplate.

Odds pages mix player names with navigation labels, consent banners and
marketing copy that often sit in the same cells. A candidate is accepted
only when it:

    1. is within the configured length bounds,
    2. contains none of the block-listed boilerplate substrings,
    3. does not start or end with a country-code token,
    4. is 2-3 tokens, each a capital letter followed by lower-case letters.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from golf_tiers.config import DEFAULT_NAME_RULES, NameRules
from golf_tiers.odds.parsing import clean_text

LOGGER = logging.getLogger(__name__)

_NAME_TOKEN_EXTRA_CHARS = frozenset("'-")


def _is_name_token(token: str) -> bool:
    """``Rahm``, ``McIlroy``, ``Åberg`` and ``O'Hair`` pass; ``USA``, ``3`` do not."""
    if len(token) < 2:
        return False
    if not token[0].isupper() or token.isupper():
        return False
    return all(ch.isalpha() or ch in _NAME_TOKEN_EXTRA_CHARS for ch in token)


def is_country_code(token: str, rules: NameRules = DEFAULT_NAME_RULES) -> bool:
    """Return True for 2-3 letter all-caps tokens such as ``USA`` or ``NZ``."""
    if token in rules.country_codes:
        return True
    return 2 <= len(token) <= 3 and token.isalpha() and token.isupper()


def is_boilerplate(text: str, rules: NameRules = DEFAULT_NAME_RULES) -> bool:
    """Case-insensitive substring match against the boilerplate block-list."""
    lower = text.lower()
    return any(pattern in lower for pattern in rules.blocklist)


def matches_name_shape(text: str, rules: NameRules = DEFAULT_NAME_RULES) -> bool:
    """Return True for ``First Last`` or ``First Middle Last`` shaped text."""
    tokens = clean_text(text).split(" ")
    if not rules.min_tokens <= len(tokens) <= rules.max_tokens:
        return False
    return all(_is_name_token(token) for token in tokens)


def is_plausible_name(text: Optional[str], rules: NameRules = DEFAULT_NAME_RULES) -> bool:
    """Decide whether ``text`` looks like a competitor's name.

    Parameters
    ----------
    text : str | None
        Candidate text span.
    rules : NameRules
        Length bounds and block-lists.

    Returns
    -------
    bool
        True if the span is a plausible personal name.

    Examples
    --------
    >>> is_plausible_name("Jon Rahm")
    True
    >>> is_plausible_name("Fan Council")
    False
    """
    text = clean_text(text)
    if not rules.min_length <= len(text) <= rules.max_length:
        return False
    if is_boilerplate(text, rules):
        return False

    tokens = text.split(" ")
    if is_country_code(tokens[0], rules) or is_country_code(tokens[-1], rules):
        return False

    return matches_name_shape(text, rules)


def is_record_name(text: Optional[str], rules: NameRules = DEFAULT_NAME_RULES) -> bool:
    """Plausible name within the tighter length bounds of a stored record."""
    text = clean_text(text)
    if not rules.record_min_length <= len(text) <= rules.record_max_length:
        return False
    return is_plausible_name(text, rules)


def pick_best_name(
    candidates: Iterable[Optional[str]],
    rules: NameRules = DEFAULT_NAME_RULES,
) -> Optional[str]:
    """Return the longest candidate that passes validation.

    Nested spans in a name cell usually hold the full name, an abbreviated
    name and a country code; the longest valid one is the full name. Ties
    keep the earliest candidate.
    """
    best: Optional[str] = None
    for candidate in candidates:
        text = clean_text(candidate)
        if not is_record_name(text, rules):
            continue
        if best is None or len(text) > len(best):
            best = text
    return best


def salvage_name(text: Optional[str], rules: NameRules = DEFAULT_NAME_RULES) -> Optional[str]:
    """Recover a name from a whole cell's concatenated text.

    Drops noise words (button labels, consent text) and country codes, then
    keeps the first 2-3 properly capitalised tokens.

    Examples
    --------
    >>> salvage_name("Jon Rahm ESP Favorite")
    'Jon Rahm'
    """
    tokens = [
        token
        for token in clean_text(text).split(" ")
        if token
        and token.lower() not in rules.noise_words
        and not is_country_code(token, rules)
        and _is_name_token(token)
    ]
    if len(tokens) < rules.min_tokens:
        return None
    return " ".join(tokens[: rules.max_tokens])
