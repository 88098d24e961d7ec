"""Fetch rendered tournament odds pages through the ScraperAPI proxy.

The odds page is rendered client-side, so it is requested through
ScraperAPI with ``render=true`` rather than fetched directly.

Usage:
    from golf_tiers.ingestion.fetch import fetch_page_html
    html = fetch_page_html("https://www.pgatour.com/tournaments/.../odds")
"""

from __future__ import annotations

import logging
import os

import requests
from dotenv import load_dotenv

from golf_tiers.config import (
    DEFAULT_TARGET_URL,
    PROJECT_ROOT,
    SCRAPER_API_URL,
    SCRAPER_REQUEST_TIMEOUT,
    SCRAPER_USER_AGENT,
)

LOGGER = logging.getLogger(__name__)


class SourceUnavailableError(RuntimeError):
    """Raised when a document source cannot be reached or refuses the request."""


class SourceTimeoutError(SourceUnavailableError):
    """Raised when a document source does not answer within the timeout."""


def get_scraper_api_key() -> str:
    """Read the ScraperAPI key from ``.env`` or ``SCRAPERAPI_KEY``.

    Raises
    ------
    SourceUnavailableError
        If the key is not configured.
    """
    load_dotenv(PROJECT_ROOT / ".env")
    key = os.environ.get("SCRAPERAPI_KEY", "").strip()
    if not key or key == "YOUR_API_KEY_HERE":
        raise SourceUnavailableError(
            "ScraperAPI key not configured. Add SCRAPERAPI_KEY to .env or set "
            "the environment variable. Get a key at https://www.scraperapi.com/"
        )
    return key


def fetch_page_html(
    target_url: str = DEFAULT_TARGET_URL,
    api_key: str | None = None,
    render: bool = True,
    timeout: int = SCRAPER_REQUEST_TIMEOUT,
) -> str:
    """Fetch a page's rendered HTML via ScraperAPI.

    Parameters
    ----------
    target_url : str
        Page to fetch.
    api_key : str, optional
        ScraperAPI key. Read from the environment when omitted.
    render : bool
        Ask the proxy to execute JavaScript before returning HTML.
    timeout : int
        Request timeout in seconds.

    Returns
    -------
    str
        Raw HTML text.

    Raises
    ------
    SourceTimeoutError
        If the proxy does not respond within ``timeout``.
    SourceUnavailableError
        On network failure, authentication failure or non-200 status.
    """
    if api_key is None:
        api_key = get_scraper_api_key()

    params = {
        "api_key": api_key,
        "url": target_url,
        "render": "true" if render else "false",
    }
    LOGGER.info("Fetching %s via ScraperAPI (render=%s)", target_url, render)

    try:
        response = requests.get(
            SCRAPER_API_URL,
            params=params,
            timeout=timeout,
            headers={"User-Agent": SCRAPER_USER_AGENT},
        )
    except requests.Timeout as exc:
        raise SourceTimeoutError(
            f"ScraperAPI request for {target_url} timed out after {timeout}s"
        ) from exc
    except requests.RequestException as exc:
        raise SourceUnavailableError(
            f"ScraperAPI request failed - no response received: {exc}"
        ) from exc

    if response.status_code == 401:
        raise SourceUnavailableError(
            "ScraperAPI authentication failed (401). Verify SCRAPERAPI_KEY is "
            "correct and active in your ScraperAPI dashboard."
        )
    if response.status_code != 200:
        raise SourceUnavailableError(
            f"ScraperAPI returned status {response.status_code}: {response.text[:200]}"
        )

    LOGGER.info("Fetched %d bytes for %s", len(response.text), target_url)
    return response.text
