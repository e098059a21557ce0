"""Outcome classification shared by every HTTP call site.

The same status rule applies to failed Rundeck, PagerDuty and Slack calls
(successful 2xx calls never get here):

- 429 or >= 500    -> RETRYABLE (the caller should try again later)
- any other status -> ERROR (including a 2xx attached to an error)
- no response      -> UNREACHABLE

Call sites differ only in how a response is dug out of their failure
object, so classify_failure() takes that extractor as a parameter.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from apps.rundeck.http import HttpResponse


class Outcome(str, Enum):
    ERROR = "error"
    RETRYABLE = "retryable"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class Classification:
    """Outcome plus the status line it was derived from (if any)."""

    outcome: Outcome
    status: int | None = None
    reason: str = ""

    @property
    def retry(self) -> bool:
        return self.outcome is Outcome.RETRYABLE

    @property
    def status_line(self) -> str:
        if self.status is None:
            return ""
        return f"[{self.status}] {self.reason}".rstrip()


def is_retryable_status(status: int) -> bool:
    return status == 429 or status >= 500


def classify_status(status: int) -> Outcome:
    """Outcome of a failed call that received the given status."""
    if is_retryable_status(status):
        return Outcome.RETRYABLE
    return Outcome.ERROR


def response_of(error: BaseException) -> Optional[HttpResponse]:
    """Default extractor: the response attached to an HttpRequestError."""
    return getattr(error, "response", None)


def classify_failure(
    error: BaseException,
    get_response: Callable[[BaseException], Optional[HttpResponse]] = response_of,
) -> Classification:
    """Classify a failed call.

    Args:
        error: The exception raised by the call
        get_response: Returns the server response carried by error, or None

    Returns:
        Classification with outcome ERROR, RETRYABLE or UNREACHABLE. A 2xx
        response attached to an error (e.g. an unexpected body) is an ERROR.
    """
    response = get_response(error)
    if response is None:
        return Classification(Outcome.UNREACHABLE)

    return Classification(
        classify_status(response.status), status=response.status, reason=response.reason or ""
    )
