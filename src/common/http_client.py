"""Shared HTTP helpers used across registry and repository clients.

Encapsulates common request/timeout error handling so modules avoid
duplicating try/except blocks. Each helper performs exactly one attempt
with ``Constants.REQUEST_TIMEOUT``; transport failures are reported as a
status code of ``0`` so callers can decide whether to try a fallback.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Tuple

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

DOWNLOAD_CHUNK_SIZE = 64 * 1024


def _log_request(method: str, url: str, **fields: Any) -> None:
    if is_debug_enabled(logger):
        logger.debug(
            "HTTP request",
            extra=extra_context(
                event="http_request",
                component="http_client",
                action=method,
                target=safe_url(url),
                **fields
            )
        )


def _log_response(method: str, url: str, status_code: int, duration_ms: int) -> None:
    if is_debug_enabled(logger):
        logger.debug(
            "HTTP response ok",
            extra=extra_context(
                event="http_response",
                component="http_client",
                action=method,
                outcome="success",
                status_code=status_code,
                duration_ms=duration_ms,
                target=safe_url(url)
            )
        )


def _log_exception(method: str, url: str, outcome: str) -> None:
    if is_debug_enabled(logger):
        logger.debug(
            "HTTP request exception",
            extra=extra_context(
                event="http_exception",
                component="http_client",
                action=method,
                outcome=outcome,
                target=safe_url(url)
            )
        )


def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], str]:
    """Perform a single GET request with timeout and DEBUG traces.

    Returns:
        Tuple of (status_code, headers_dict, body_text). On timeout or
        connection failure the status is 0 and the body holds the reason.
    """
    with Timer() as t:
        _log_request("GET", url)
        try:
            response = requests.get(
                url,
                timeout=Constants.REQUEST_TIMEOUT,
                headers=headers,
                **kwargs
            )
        except requests.Timeout:
            _log_exception("GET", url, "timeout")
            return 0, {}, f"Request timed out after {Constants.REQUEST_TIMEOUT} seconds"
        except requests.RequestException as exc:  # includes ConnectionError
            _log_exception("GET", url, "request_exception")
            return 0, {}, f"Request failed: {exc}"
        _log_response("GET", url, response.status_code, t.duration_ms())
        return response.status_code, dict(response.headers), response.text


def get_json(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], Optional[Any]]:
    """Perform GET request and parse JSON response with DEBUG traces.

    Args:
        url: Target URL
        headers: Optional request headers
        **kwargs: Additional requests.get parameters

    Returns:
        Tuple of (status_code, headers_dict, parsed_json_or_none)
    """
    status_code, response_headers, text = robust_get(url, headers=headers, **kwargs)

    if status_code == 200 and text:
        try:
            parsed = json.loads(text)
            if is_debug_enabled(logger):
                logger.debug(
                    "Parsed JSON response",
                    extra=extra_context(
                        event="parse",
                        component="http_client",
                        action="get_json",
                        outcome="success",
                        status_code=status_code,
                        target=safe_url(url)
                    )
                )
            return status_code, response_headers, parsed
        except json.JSONDecodeError:
            logger.warning(
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

    return status_code, response_headers, None


def head(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
) -> Tuple[int, Dict[str, str]]:
    """Perform a single HEAD request; status 0 on transport failure."""
    with Timer() as t:
        _log_request("HEAD", url)
        try:
            response = requests.head(
                url,
                timeout=Constants.REQUEST_TIMEOUT,
                headers=headers,
                allow_redirects=True,
            )
        except requests.RequestException:
            _log_exception("HEAD", url, "request_exception")
            return 0, {}
        _log_response("HEAD", url, response.status_code, t.duration_ms())
        return response.status_code, dict(response.headers)


def download_file(url: str, dest_path: str) -> bool:
    """Stream ``url`` into ``dest_path``.

    Returns:
        True when the body was written completely, False otherwise.
    """
    with Timer() as t:
        _log_request("GET", url, context="download")
        try:
            with requests.get(url, timeout=Constants.REQUEST_TIMEOUT, stream=True) as response:
                if response.status_code != 200:
                    logger.warning(
                        "Download failed",
                        extra=extra_context(
                            event="http_response",
                            component="http_client",
                            action="download",
                            outcome="non_200",
                            status_code=response.status_code,
                            target=safe_url(url)
                        )
                    )
                    return False
                with open(dest_path, "wb") as fh:
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            fh.write(chunk)
                _log_response("GET", url, response.status_code, t.duration_ms())
                return True
        except requests.RequestException as exc:
            logger.warning("Download of %s failed: %s", safe_url(url), exc)
            return False
        except OSError as exc:
            logger.warning("Could not write %s: %s", dest_path, exc)
            return False
