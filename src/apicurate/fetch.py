"""HTTP access to remote resources (source specs, discovery lists, logos)."""

from __future__ import annotations

import logging

import requests

from apicurate.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


def get_resource(url: str, timeout: float = DEFAULT_TIMEOUT) -> requests.Response:
    """GET ``url`` and return the response.

    Failed requests are not retried.

    Args:
        url: Absolute URL to fetch.
        timeout: Seconds to wait for the server.

    Returns:
        The successful (HTTP 200) response.

    Raises:
        FetchError: On transport failure or any status other than 200.
    """
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise FetchError(url, str(e)) from e

    if response.status_code != 200:
        raise FetchError(url, f"{response.status_code} {response.reason}")

    logger.info("Fetched %s", url)
    return response


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))
