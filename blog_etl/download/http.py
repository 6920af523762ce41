"""
HTTP session with retry/backoff

All remote reads go through one session so every request gets the same
timeout and transient-error policy.
"""

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from config.settings import (
    REQUEST_TIMEOUT, RETRY_TOTAL, RETRY_BACKOFF, RETRY_STATUSES
)
from blog_etl.errors import SourceUnavailable


def get_http_session(total: int = RETRY_TOTAL,
                     backoff: float = RETRY_BACKOFF,
                     statuses: tuple = RETRY_STATUSES) -> requests.Session:
    """
    Create a session that retries transient HTTP failures

    Args:
        total: Max retries for connect/read/status failures
        backoff: Backoff factor (sleep grows as 0.5, 1.0, 2.0, ...)
        statuses: HTTP status codes that trigger a retry

    Returns:
        requests.Session with retry-enabled adapters mounted
    """
    retry = Retry(
        total=total,
        read=total,
        connect=total,
        backoff_factor=backoff,
        status_forcelist=statuses,
        allowed_methods=frozenset(['GET', 'HEAD']),
        raise_on_status=False,
    )
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=retry)
    session.mount('https://', adapter)
    session.mount('http://', adapter)
    return session


def http_get(url: str, params: dict = None, session: requests.Session = None,
             timeout: float = REQUEST_TIMEOUT, keys=None) -> requests.Response:
    """
    GET a URL, turning transport failures into SourceUnavailable

    The response is returned even for 4xx so callers can inspect API error
    bodies; 5xx after retries is treated as unavailable. Without a `session`
    a one-off retrying session is opened and closed around the request.
    """
    if session is None:
        with get_http_session() as own:
            return http_get(url, params=params, session=own, timeout=timeout, keys=keys)

    keys = keys or [url]

    try:
        response = session.get(url, params=params, timeout=timeout)
    except requests.RequestException as e:
        raise SourceUnavailable(f'Request failed: {e}', keys=keys) from e

    if response.status_code >= 500:
        raise SourceUnavailable(
            f'HTTP {response.status_code} from {url} after retries', keys=keys
        )
    return response
