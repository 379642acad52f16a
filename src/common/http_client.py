"""Shared HTTP helpers used by the search and runx clients.

Encapsulates common request/timeout error handling so modules avoid
duplicating try/except blocks. Requests are never retried; a failed
request is reported to the caller.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Tuple

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def safe_get(url: str, *, context: str, **kwargs: Any) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "search", "runx").
        **kwargs: Passed through to requests.get.

    Returns:
        requests.Response: The HTTP response object.

    Raises:
        requests.RequestException: on timeout or connection failure, after
            logging it.
    """
    safe_target = safe_url(url)
    kwargs.setdefault("timeout", Constants.REQUEST_TIMEOUT)
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
            res = requests.get(url, **kwargs)
        except requests.Timeout:
            logger.error(
                "%s request timed out after %s seconds",
                context,
                kwargs["timeout"],
            )
            raise
        except requests.RequestException as exc:  # includes ConnectionError
            logger.error("%s connection error: %s", context, exc)
            raise
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response ok",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    outcome="success",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context
                )
            )
        return res


def get_json(
    url: str,
    *,
    context: str,
    params: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Tuple[int, Dict[str, str], Optional[Any]]:
    """Perform GET request and parse JSON response.

    Transport failures propagate as ``requests.RequestException``.

    Args:
        url: Target URL
        context: Source tag for logs
        params: Optional query parameters
        headers: Optional request headers

    Returns:
        Tuple of (status_code, headers_dict, parsed_json_or_none)
    """
    res = safe_get(url, context=context, params=params, headers=headers)
    status_code = res.status_code
    response_headers = dict(res.headers)

    if status_code == 200 and res.text:
        try:
            parsed = json.loads(res.text)
        except json.JSONDecodeError:
            if is_debug_enabled(logger):
                logger.debug(
                    "JSON decode error",
                    extra=extra_context(
                        event="parse",
                        component="http_client",
                        action="get_json",
                        outcome="json_decode_error",
                        status_code=status_code,
                        target=safe_url(url)
                    )
                )
            return status_code, response_headers, None
        return status_code, response_headers, parsed

    return status_code, response_headers, None
