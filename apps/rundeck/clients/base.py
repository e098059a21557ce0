"""Base class for the clients that report a Rundeck execution.

Public API:
- BaseProviderClient
"""

from __future__ import annotations

import logging
from abc import ABC
from typing import Callable, Optional

from apps.rundeck.classify import Classification, Outcome, classify_failure, response_of
from apps.rundeck.dtos import ProviderCallResult
from apps.rundeck.http import HttpResponse

logger = logging.getLogger(__name__)


class BaseProviderClient(ABC):
    """Shared failure handling for provider clients.

    Subclasses set the message templates; each template is formatted with
    action_id, status, status_line and detail.
    """

    name: str = "base"

    retry_template: str = "error in calling {name} api step: status {status}, retry later"
    error_template: str = 'error in calling {name} api step "{action_id}": unexpected status {status}'
    unreachable_template: str = 'error in calling {name} api step "{action_id}": {detail}'

    def __init__(self, action_id: str):
        self.action_id = action_id

    def _failure_result(
        self,
        error: BaseException,
        get_response: Callable[[BaseException], Optional[HttpResponse]] = response_of,
    ) -> ProviderCallResult:
        """Translate a failed call into a ProviderCallResult."""
        classification = classify_failure(error, get_response)
        message = self._format(classification, str(error))

        if classification.outcome is Outcome.UNREACHABLE:
            logger.warning(f'{self.name} api unreachable in rundeck action "{self.action_id}": {error}')
        else:
            logger.warning(
                f'response status of calling {self.name} api in rundeck action "{self.action_id}": '
                f"{classification.status}"
            )

        if classification.retry:
            return ProviderCallResult.retry_later(message)
        return ProviderCallResult.error(message)

    def _format(self, classification: Classification, detail: str) -> str:
        if classification.outcome is Outcome.UNREACHABLE:
            template = self.unreachable_template
        elif classification.retry:
            template = self.retry_template
        else:
            template = self.error_template
        return template.format(
            name=self.name,
            action_id=self.action_id,
            status=classification.status,
            status_line=classification.status_line,
            detail=detail,
        )
