"""Shop catalog source."""

from __future__ import annotations

import logging
import time
from typing import Any, List, Optional

import requests

from .config import FLAVORTOWN_API_KEY, FLAVORTOWN_API_URL, REQUEST_TIMEOUT_SECONDS
from .models import CatalogEntry, CatalogError
from .utils import get_http_session, retryable_request

logger = logging.getLogger(__name__)


@retryable_request(attempts=3)
def _get(session: requests.Session, url: str, **kwargs: Any) -> requests.Response:
    return session.get(url, **kwargs)


def _build_store_endpoint(api_url: str) -> str:
    return f"{api_url.rstrip('/')}/api/v1/store"


def parse_catalog(data: Any) -> List[CatalogEntry]:
    """Convert the decoded store JSON into entries. Raises CatalogError."""
    if not isinstance(data, list):
        raise CatalogError(f"store endpoint returned {type(data).__name__}, expected a list")
    return [CatalogEntry.from_dict(item) for item in data]


def fetch_catalog(
    *,
    api_url: str = FLAVORTOWN_API_URL,
    api_key: Optional[str] = FLAVORTOWN_API_KEY,
    session: Optional[requests.Session] = None,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
) -> List[CatalogEntry]:
    """Fetch the current shop items.

    A millisecond timestamp and no-cache headers keep intermediate caches
    from serving a stale listing.
    """
    close_session = False
    if session is None:
        session = get_http_session()
        close_session = True

    endpoint = _build_store_endpoint(api_url)
    headers = {"Cache-Control": "no-cache", "Pragma": "no-cache"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"

    try:
        logger.info("Fetching shop items from %s...", endpoint)
        resp = _get(
            session,
            endpoint,
            params={"t": int(time.time() * 1000)},
            headers=headers,
            timeout=timeout,
        )
        try:
            data = resp.json()
        except ValueError as e:
            raise CatalogError(f"store endpoint returned invalid JSON: {e}") from e
        entries = parse_catalog(data)
        logger.info("Successfully fetched %d shop items.", len(entries))
        return entries
    finally:
        if close_session:
            session.close()


__all__ = ["fetch_catalog", "parse_catalog"]
