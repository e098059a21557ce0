"""Minimal JSON-over-HTTP transport used by the rundeck action.

send_request() returns an HttpResponse for 2xx answers and raises
HttpRequestError otherwise. The error carries the server response when one
was received; response is None when the host could not be reached
(DNS failure, refused connection, timeout).
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

from django.conf import settings

logger = logging.getLogger(__name__)


@dataclass
class HttpResponse:
    """Status line and decoded body of an HTTP response."""

    status: int
    reason: str = ""
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpRequestError(Exception):
    """A request that did not end with a 2xx response."""

    def __init__(self, message: str, response: HttpResponse | None = None):
        super().__init__(message)
        self.response = response


def _decode_body(raw: bytes) -> Any:
    # Non-UTF-8 bodies (e.g. proxy error pages) are kept with replacement chars
    text = raw.decode("utf-8", errors="replace") if raw else ""
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def _read_error_body(error: urllib.error.HTTPError) -> Any:
    if not error.fp:
        return None
    try:
        return _decode_body(error.read())
    except (OSError, http.client.HTTPException) as e:
        logger.debug(f"Could not read error body for HTTP {error.code}: {e}")
        return None


def get_timeout() -> float:
    return float(getattr(settings, "RUNDECK_ACTION_HTTP_TIMEOUT", 30))


def send_request(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    data: Any = None,
    params: dict[str, Any] | None = None,
    timeout: float | None = None,
) -> HttpResponse:
    """Send a request and decode the JSON (or plain text) response.

    Args:
        method: HTTP method, any case
        url: Request URL without query string
        headers: Extra headers; override the JSON defaults
        data: Body, JSON-encoded when not None
        params: Query string parameters
        timeout: Socket timeout in seconds (defaults to RUNDECK_ACTION_HTTP_TIMEOUT)

    Raises:
        HttpRequestError: on a non-2xx response or when no response was obtained
    """
    if params:
        url = f"{url}?{urlencode(params)}"

    body = json.dumps(data).encode("utf-8") if data is not None else None

    request_headers = {"Accept": "application/json"}
    if body is not None:
        request_headers["Content-Type"] = "application/json"
    request_headers.update(headers or {})

    request = urllib.request.Request(
        url,
        data=body,
        headers=request_headers,
        method=method.upper(),
    )

    try:
        with urllib.request.urlopen(
            request, timeout=timeout if timeout is not None else get_timeout()
        ) as response:
            result = HttpResponse(
                status=response.getcode(),
                reason=str(getattr(response, "reason", "") or ""),
                data=_decode_body(response.read()),
            )
    except urllib.error.HTTPError as e:
        result = HttpResponse(
            status=e.code,
            reason=str(e.reason or ""),
            data=_read_error_body(e),
        )
        raise HttpRequestError(f"HTTP {e.code} from {method.upper()} {url}", response=result) from e
    except urllib.error.URLError as e:
        logger.debug(f"URL error for {method.upper()} {url}: {e.reason}")
        raise HttpRequestError(f"Failed to connect: {e.reason}") from e
    except (OSError, http.client.HTTPException) as e:
        logger.debug(f"Connection error for {method.upper()} {url}: {e}")
        raise HttpRequestError(f"Failed to connect: {e}") from e

    if not result.ok:
        raise HttpRequestError(f"HTTP {result.status} from {method.upper()} {url}", response=result)

    return result
