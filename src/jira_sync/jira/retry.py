"""
Retry Module
Provides retry functionality for API calls with exponential backoff.
"""

import time
from typing import Optional

import requests

from jira_sync.constants import (
    API_MAX_RETRIES,
    API_RETRY_BASE_DELAY,
    DEFAULT_TIMEOUT,
    RETRYABLE_STATUS_CODES,
)
from jira_sync.logger import logger


def _retry_after(response: requests.Response, delay: float) -> float:
    header = response.headers.get("Retry-After")
    if header:
        try:
            return max(delay, float(header))
        except ValueError:
            logger.debug(f"Ignoring unparseable Retry-After header: {header!r}")
    return delay


def api_request_with_retry(
    session: requests.Session,
    method: str,
    url: str,
    max_retries: int = API_MAX_RETRIES,
    base_delay: float = API_RETRY_BASE_DELAY,
    **kwargs
) -> requests.Response:
    """
    Make an HTTP request with automatic retry and exponential backoff.

    Retries on 429/5xx responses and on connection-level errors.

    Args:
        session: requests session carrying auth and headers
        method: HTTP method ('GET', 'PUT', ...)
        url: Request URL
        max_retries: Maximum retry attempts
        base_delay: Base delay between retries
        **kwargs: Additional arguments passed to requests

    Returns:
        Response object (the last one when retries on status codes run out)

    Raises:
        requests.exceptions.RequestException: If all retries fail
    """
    kwargs.setdefault("timeout", DEFAULT_TIMEOUT)
    last_response: Optional[requests.Response] = None

    for attempt in range(max_retries + 1):
        try:
            response = session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            if attempt >= max_retries:
                logger.error(f"Request failed after {max_retries} retries: {e}")
                raise
            delay = base_delay * (2 ** attempt)
            logger.warning(f"Request failed: {e}, retrying in {delay:.1f}s ({attempt + 1}/{max_retries})")
            time.sleep(delay)
            continue

        if response.status_code not in RETRYABLE_STATUS_CODES:
            return response

        last_response = response
        if attempt < max_retries:
            delay = _retry_after(response, base_delay * (2 ** attempt))
            logger.warning(f"Got {response.status_code}, retrying in {delay:.1f}s ({attempt + 1}/{max_retries})")
            time.sleep(delay)

    return last_response
