"""Server-supplied reading list limits from the MediaWiki site-info API.

The wiki publishes ``readinglists-config`` under ``query.general``::

    {"maxListsPerUser": 100, "maxEntriesPerList": 5000, "deletedRetentionDays": 30}

Fetching never raises; callers fall back to the configured limits.
"""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import UTC, datetime
from typing import Any

import httpx

from reading_lists.models import ListLimits, UserConfig

logger = logging.getLogger(__name__)

SITE_INFO_PATH = "/w/api.php"
SITE_INFO_PARAMS = {
    "action": "query",
    "meta": "siteinfo",
    "format": "json",
    "formatversion": "2",
}
SITE_INFO_TIMEOUT = 15  # seconds
SITE_INFO_MAX_RETRIES = 3
SITE_INFO_INITIAL_BACKOFF = 1.0  # seconds, doubles each retry
USER_AGENT = "reading-lists/1.0"


def _positive_int(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return None


def parse_list_limits(payload: Any) -> ListLimits | None:
    """Extract limits from a site-info response; None if either is missing."""
    if not isinstance(payload, dict):
        return None
    query = payload.get("query")
    general = query.get("general") if isinstance(query, dict) else None
    rl_config = general.get("readinglists-config") if isinstance(general, dict) else None
    if not isinstance(rl_config, dict):
        return None
    max_lists = _positive_int(rl_config.get("maxListsPerUser"))
    max_entries = _positive_int(rl_config.get("maxEntriesPerList"))
    if max_lists is None or max_entries is None:
        return None
    return ListLimits(max_lists=max_lists, max_pages_per_list=max_entries)


async def fetch_list_limits(
    client: httpx.AsyncClient,
    site: str,
    timeout: int = SITE_INFO_TIMEOUT,
) -> ListLimits | None:
    """Fetch reading list limits for a wiki. Returns None on failure."""
    url = f"https://{site}{SITE_INFO_PATH}"
    backoff = SITE_INFO_INITIAL_BACKOFF
    for attempt in range(SITE_INFO_MAX_RETRIES):
        try:
            response = await client.get(
                url,
                params=SITE_INFO_PARAMS,
                headers={"User-Agent": USER_AGENT},
                timeout=timeout,
            )
            if response.status_code == 200:
                try:
                    payload = response.json()
                except ValueError:
                    logger.warning("Site info for %s returned invalid JSON", site, exc_info=True)
                    return None
                limits = parse_list_limits(payload)
                if limits is None:
                    logger.info("Site info for %s has no readinglists-config", site)
                return limits
            if response.status_code in (429, 500, 502, 503, 504) and (
                attempt < SITE_INFO_MAX_RETRIES - 1
            ):
                jitter = random.uniform(0, backoff * 0.5)
                logger.info(
                    "Site info %d, retrying in %.1fs (attempt %d/%d)",
                    response.status_code,
                    backoff + jitter,
                    attempt + 1,
                    SITE_INFO_MAX_RETRIES,
                )
                await asyncio.sleep(backoff + jitter)
                backoff *= 2
                continue
            logger.warning("Site info for %s returned %d", site, response.status_code)
            return None
        except httpx.TimeoutException:
            if attempt < SITE_INFO_MAX_RETRIES - 1:
                logger.info(
                    "Site info timeout, retrying (attempt %d/%d)",
                    attempt + 1,
                    SITE_INFO_MAX_RETRIES,
                )
                jitter = random.uniform(0, backoff * 0.5)
                await asyncio.sleep(backoff + jitter)
                backoff *= 2
                continue
            logger.warning("Site info timeout after %d retries", SITE_INFO_MAX_RETRIES)
            return None
        except httpx.HTTPError:
            logger.warning("Site info HTTP error for %s", site, exc_info=True)
            return None

    return None


async def resolve_list_limits(
    config: UserConfig,
    client: httpx.AsyncClient | None = None,
) -> ListLimits:
    """Refresh limits from the server into ``config``; keep configured ones on failure."""
    if client is not None:
        limits = await fetch_list_limits(client, config.site)
    else:
        async with httpx.AsyncClient() as tmp_client:
            limits = await fetch_list_limits(tmp_client, config.site)
    if limits is None:
        return config.limits
    config.max_lists = limits.max_lists
    config.max_pages_per_list = limits.max_pages_per_list
    config.limits_fetched_at = datetime.now(UTC).isoformat()
    return limits


__all__ = [
    "fetch_list_limits",
    "parse_list_limits",
    "resolve_list_limits",
]
