"""Slack incoming-webhook client."""

import logging
from typing import Any, Optional

from apps.rundeck.clients.base import BaseProviderClient
from apps.rundeck.dtos import ProviderCallResult
from apps.rundeck.http import HttpRequestError, HttpResponse, send_request

logger = logging.getLogger(__name__)


class SlackWebhookError(Exception):
    """Error raised by IncomingWebhook.send().

    original is the transport error, if the failure came from the transport.
    """

    def __init__(self, message: str, original: Optional[HttpRequestError] = None):
        super().__init__(message)
        self.original = original


class IncomingWebhook:
    """Posts plain-text messages to a Slack incoming webhook URL.

    The URL itself is the credential; no auth header is sent.
    """

    def __init__(self, url: str):
        self.url = url

    def send(self, text: str) -> Any:
        try:
            response = send_request("POST", self.url, data={"text": text})
        except HttpRequestError as e:
            raise SlackWebhookError(f"An HTTP protocol error occurred: {e}", original=e) from e
        return response.data


def nested_response(error: BaseException) -> Optional[HttpResponse]:
    """Response carried by the transport error wrapped in a SlackWebhookError."""
    original = getattr(error, "original", None)
    if original is None:
        return None
    return getattr(original, "response", None)


class SlackClient(BaseProviderClient):
    """Client posting the execution link to Slack."""

    name = "slack"

    retry_template = "an error occurred posting a slack message, retry later: {detail}"
    error_template = "an error occurred posting a slack message: {detail} - {status_line}"
    unreachable_template = "an error occurred posting a slack message: {detail}"

    def post_message(self, webhook_url: str, message: str) -> ProviderCallResult:
        """Post a plain-text message to the webhook URL."""
        try:
            result = IncomingWebhook(webhook_url).send(message)
        except SlackWebhookError as e:
            return self._failure_result(e, nested_response)

        logger.debug(f'slack message posted in rundeck action "{self.action_id}"')
        return ProviderCallResult.ok(result)
