"""
Shared outbound HTTP helpers.

Every upstream call goes through fetch_with_timeout so that a slow vendor
API cannot hold a request open past a fixed deadline. There are no retries.
"""

import concurrent.futures
import json
import logging
from typing import Any

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 20.0


class UpstreamRequestError(Exception):
    """Network-level failure talking to a vendor API."""

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url
        self.message = message


class UpstreamTimeoutError(UpstreamRequestError):
    """The vendor API did not answer within the configured timeout."""

    def __init__(self, url: str, timeout: float):
        timeout_ms = int(round(timeout * 1000))
        super().__init__(url, f"Request to {url} timed out after {timeout_ms}ms")
        self.timeout = timeout


def fetch_with_timeout(
    method: str,
    url: str,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    **kwargs: Any,
) -> requests.Response:
    """
    Perform an HTTP request that is aborted after ``timeout`` seconds.

    ``timeout`` is a wall-clock deadline for the whole exchange, body
    included, not just the connect and each socket read. The call runs on a
    worker thread; at the deadline the caller stops waiting and the worker
    is abandoned.

    Args:
        method: HTTP method
        url: Target URL
        timeout: Timeout in seconds
        **kwargs: Passed through to requests.request (params, data, json, ...)

    Returns:
        The upstream response, whatever its status code

    Raises:
        UpstreamTimeoutError: If the request timed out
        UpstreamRequestError: On any other connection error
    """
    executor = concurrent.futures.ThreadPoolExecutor(
        max_workers=1, thread_name_prefix="upstream"
    )
    future = executor.submit(requests.request, method, url, timeout=timeout, **kwargs)
    try:
        return future.result(timeout=timeout)
    except concurrent.futures.TimeoutError as e:
        future.cancel()
        logger.warning(f"Abandoning {method} {url} after {timeout}s deadline")
        raise UpstreamTimeoutError(url, timeout) from e
    except requests.Timeout as e:
        raise UpstreamTimeoutError(url, timeout) from e
    except requests.RequestException as e:
        raise UpstreamRequestError(url, str(e)) from e
    finally:
        executor.shutdown(wait=False)


def parse_body(response: requests.Response) -> tuple[Any, bool]:
    """
    Parse an upstream body as JSON, falling back to the raw text.

    Returns:
        Tuple of (parsed_or_text, is_json)
    """
    text = response.text
    try:
        return json.loads(text), True
    except ValueError:
        return text, False


def parse_body_or_raw(response: requests.Response) -> Any:
    """Parse JSON, wrapping unparseable text as ``{"raw": text}``."""
    data, is_json = parse_body(response)
    return data if is_json else {"raw": data}


class UpstreamStatusError(Exception):
    """A vendor API answered with a non-2xx status."""

    def __init__(self, response: requests.Response):
        super().__init__(f"Upstream returned {response.status_code} {response.reason}")
        self.response = response
        self.status_code = response.status_code
        self.reason = response.reason
        self.text = response.text
        self.data = parse_body_or_raw(response)


def raise_for_upstream_status(response: requests.Response) -> None:
    """Raise UpstreamStatusError unless the response is 2xx."""
    if not response.ok:
        raise UpstreamStatusError(response)
