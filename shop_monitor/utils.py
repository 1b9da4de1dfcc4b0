"""Helper utilities.

Shared HTTP plumbing: a configured ``requests`` session, status checking
and the retry policy used for catalog fetches.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable

import requests
from requests import Response
from tenacity import (after_log, retry, retry_if_exception_type,
                      stop_after_attempt, wait_exponential)


logger = logging.getLogger(__name__)


def get_http_session() -> requests.Session:
    """Return a new HTTP session with JSON defaults.

    Caller is responsible for closing the session.
    """
    session = requests.Session()
    session.headers.update(
        {
            "User-Agent": "ShopMonitor/1.0 (+https://github.com/)",
            "Accept": "application/json",
        }
    )
    return session


class HTTPError(Exception):
    """Raised when an HTTP request fails (after retries, where retried)."""


class _ServerError(HTTPError):
    """5xx response; retried."""


def raise_for_status(resp: Response) -> None:
    try:
        resp.raise_for_status()
    except requests.RequestException as e:
        raise HTTPError(str(e)) from e


def retryable_request(attempts: int = 5) -> Callable[[Callable[..., Response]], Callable[..., Response]]:
    """Decorator factory applying retry logic to HTTP calls.

    The decorated function must accept a `requests.Session` as its first
    argument, followed by URL and optional kwargs, and return a
    `requests.Response`.  Network errors and 5xx responses are retried up
    to ``attempts`` times with exponential back-off between 1 and 10
    seconds; 4xx responses fail immediately. Every failure surfaces as
    ``HTTPError``.
    """

    def decorator(method: Callable[..., Response]) -> Callable[..., Response]:
        @retry(
            reraise=True,
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=(
                retry_if_exception_type(requests.ConnectionError)
                | retry_if_exception_type(requests.Timeout)
                | retry_if_exception_type(_ServerError)
            ),
            after=after_log(logger, logging.WARNING),
        )
        def attempt(session: requests.Session, url: str, **kwargs: Any) -> Response:
            response = method(session, url, **kwargs)
            if response.status_code >= 500:
                raise _ServerError(f"Server returned status {response.status_code}")
            raise_for_status(response)
            return response

        @functools.wraps(method)
        def wrapper(session: requests.Session, url: str, **kwargs: Any) -> Response:
            try:
                return attempt(session, url, **kwargs)
            except (requests.ConnectionError, requests.Timeout) as e:
                raise HTTPError(f"Request to {url} failed after {attempts} attempts: {e}") from e

        return wrapper

    return decorator


__all__ = ["get_http_session", "retryable_request", "raise_for_status", "HTTPError"]
