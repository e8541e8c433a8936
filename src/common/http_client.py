"""Shared HTTP helpers used by the repository fetcher.

Encapsulates common request/timeout error handling so callers avoid
duplicating try/except blocks. Every request is attempted exactly once;
failures surface as FetchError and are never retried here.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when a URL cannot be retrieved."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        super().__init__(f"{reason}: {safe_url(url)}")
        self.url = url
        self.reason = reason
        self.status_code = status_code


def safe_get(
    url: str,
    *,
    context: str,
    timeout: Optional[float] = None,
    **kwargs: Any,
) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "artifact", "pom").
        timeout: Request timeout in seconds; defaults to Constants.REQUEST_TIMEOUT.
        **kwargs: Passed through to requests.get.

    Returns:
        requests.Response: The HTTP response object, whatever its status.

    Raises:
        FetchError: On timeout or any transport-level failure.
    """
    safe_target = safe_url(url)
    effective_timeout = timeout if timeout is not None else Constants.REQUEST_TIMEOUT
    headers = dict(kwargs.pop("headers", None) or {})
    headers.setdefault("User-Agent", Constants.USER_AGENT)
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=context
                )
            )
        try:
            res = requests.get(url, timeout=effective_timeout, headers=headers, **kwargs)
        except requests.Timeout as exc:
            logger.warning(
                "%s request timed out after %s seconds: %s",
                context,
                effective_timeout,
                safe_target,
            )
            raise FetchError(url, "timed out") from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.warning("%s connection error: %s", context, exc)
            raise FetchError(url, f"connection error ({exc.__class__.__name__})") from exc
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    outcome="success" if res.status_code == 200 else "non_2xx",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context
                )
            )
        return res


def get_bytes(url: str, *, context: str, timeout: Optional[float] = None) -> bytes:
    """Fetch a URL and return its body.

    Raises:
        FetchError: On transport failure or any status other than 200.
    """
    res = safe_get(url, context=context, timeout=timeout)
    if res.status_code != 200:
        raise FetchError(url, f"HTTP {res.status_code}", status_code=res.status_code)
    return res.content
