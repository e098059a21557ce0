"""
Rundeck action executor.

One invocation runs a short linear pipeline:

    START → RUNDECK_CALLED → RUNDECK_FAILED (terminal)
                           → RUNDECK_OK → PAGERDUTY (dedup key present)
                                        → SLACK     (no dedup key)

Each reporting flow ends in SUCCESS or aborts at its first failing step.
Nothing is retried here; a retryable failure is only flagged on the result.
"""

from __future__ import annotations

import logging
from typing import Any

from apps.rundeck.classify import Outcome, classify_failure
from apps.rundeck.clients.pagerduty import PagerDutyClient
from apps.rundeck.clients.slack import SlackClient
from apps.rundeck.dtos import ActionExecutorOptions, ExecutionResult, ProviderCallResult
from apps.rundeck.http import HttpRequestError, send_request
from apps.rundeck.templating import render_template

logger = logging.getLogger(__name__)

UNREACHABLE_RUNDECK_MESSAGE = "Unreachable rundeck host, are you sure the address is correct?"


class RundeckActionExecutor:
    """Triggers a Rundeck job and reports the execution link."""

    def __init__(
        self,
        pagerduty_client_class: type[PagerDutyClient] = PagerDutyClient,
        slack_client_class: type[SlackClient] = SlackClient,
    ):
        self.pagerduty_client_class = pagerduty_client_class
        self.slack_client_class = slack_client_class

    def execute(self, options: ActionExecutorOptions) -> ExecutionResult:
        """Run the action once and return its result. Never raises on HTTP failures."""
        action_id = options.action_id
        config = options.config
        params = options.params

        headers = config.build_headers(options.secrets.rundeck_api_token)

        try:
            response = send_request(
                config.method.value,
                config.job_url,
                headers=headers,
                data=params.job_params,
            )
        except HttpRequestError as e:
            return self._rundeck_failure(action_id, e)

        if not isinstance(response.data, dict):
            message = f"unexpected response body from rundeck job: {response.data!r}"
            logger.warning(f"error on {action_id} rundeck action: {message}")
            return _rundeck_error(action_id, message)

        execution_link = response.data.get("permalink")
        if not execution_link:
            logger.warning(f'rundeck response in action "{action_id}" has no execution permalink')

        try:
            note = render_template(
                config.note_template,
                {
                    "execution_link": execution_link or "",
                    "action_id": action_id,
                    "job_id": config.job_id,
                    "dedup_key": params.dedup_key,
                },
            )
        except ValueError as e:
            logger.warning(f"error on {action_id} rundeck action: {e}")
            return _stage_error(action_id, str(e))

        if params.has_dedup_key:
            result = self._report_to_pagerduty(options, headers, note)
        else:
            result = self._report_to_slack(options, note)

        if result is not None:
            return result

        logger.info(
            f'response from rundeck action "{action_id}": [HTTP {response.status}] {response.reason}'
        )
        return ExecutionResult.ok(response.data)

    def _rundeck_failure(self, action_id: str, error: HttpRequestError) -> ExecutionResult:
        classification = classify_failure(error)

        if classification.outcome is Outcome.UNREACHABLE:
            logger.warning(f"error on {action_id} rundeck action: {UNREACHABLE_RUNDECK_MESSAGE}")
            return _rundeck_unreachable(action_id, UNREACHABLE_RUNDECK_MESSAGE)

        message = classification.status_line
        logger.warning(f"error on {action_id} rundeck event: {message}")

        if classification.retry:
            return _rundeck_retry(action_id, message)
        return _rundeck_error(action_id, message)

    def _report_to_pagerduty(
        self, options: ActionExecutorOptions, headers: dict[str, str], note: str
    ) -> ExecutionResult | None:
        """Append the note to the newest incident for the dedup key.

        Returns None on success, or the ExecutionResult to abort with.
        """
        action_id = options.action_id
        dedup_key = options.params.dedup_key
        api_key = options.secrets.pd_api_key

        if not api_key:
            message = "PagerDuty API key (pdApiKey) is not configured but a dedupKey was supplied"
            logger.warning(f"error on {action_id} rundeck action: {message}")
            return _stage_error(action_id, message)

        client = self.pagerduty_client_class(action_id, api_key, headers)

        incident_list = client.list_incidents_by_key(dedup_key)
        if not incident_list.is_ok:
            logger.warning(f"error on {action_id} rundeck action: {incident_list.message}")
            return _stage_error(action_id, incident_list.message, incident_list.retry)

        incidents = _incidents_of(incident_list.data)
        if incidents is None:
            message = f'Pager Duty incident list requested by dedupKey(incident_key), "{dedup_key}", is malformed.'
            logger.warning(f"error on {action_id} rundeck action: {message}")
            return _stage_error(action_id, message)

        if not incidents:
            message = f'Pager Duty incident list requested by dedupKey(incident_key), "{dedup_key}", is empty.'
            logger.warning(f"error on {action_id} rundeck action: {message}")
            return _stage_error(action_id, message)

        # PagerDuty lists incidents oldest first
        incident_id = incidents[-1].get("id")
        if not incident_id:
            message = f'latest Pager Duty incident for dedupKey(incident_key), "{dedup_key}", has no id.'
            logger.warning(f"error on {action_id} rundeck action: {message}")
            return _stage_error(action_id, message)

        note_result = client.append_note(incident_id, note)
        if not note_result.is_ok:
            logger.warning(f"error on {action_id} rundeck action: {note_result.message}")
            return _stage_error(action_id, note_result.message, note_result.retry)

        logger.info(f'Calling pagerduty "create a note API" step succeeded in rundeck action "{action_id}"')
        return None

    def _report_to_slack(self, options: ActionExecutorOptions, message: str) -> ExecutionResult | None:
        """Post the message to Slack. Returns None on success."""
        action_id = options.action_id
        webhook_url = options.secrets.slack_webhook_url

        if not webhook_url:
            error = "Slack webhook URL (slackWebhookUrl) is not configured and no dedupKey was supplied"
            logger.warning(f"error on {action_id} rundeck action: {error}")
            return _stage_error(action_id, error)

        client = self.slack_client_class(action_id)
        slack_result: ProviderCallResult = client.post_message(webhook_url, message)
        if not slack_result.is_ok:
            logger.warning(f"error on {action_id} rundeck action: {slack_result.message}")
            return _stage_error(action_id, slack_result.message, slack_result.retry)

        logger.info(f'Sending message to slack step succeeded in rundeck action "{action_id}"')
        return None


def execute(options: ActionExecutorOptions) -> ExecutionResult:
    """Run the rundeck action with the default clients."""
    return RundeckActionExecutor().execute(options)


def _incidents_of(data: Any) -> list[dict[str, Any]] | None:
    """Incident list from a PagerDuty list response, or None when malformed."""
    if not isinstance(data, dict):
        return None
    incidents = data.get("incidents")
    if not isinstance(incidents, list) or not all(isinstance(i, dict) for i in incidents):
        return None
    return incidents


def _stage_error(action_id: str, message: str | None, retry: bool = False) -> ExecutionResult:
    err_message = f'Invalid Response: an error occurred in rundeck action "{action_id}": {message}'
    if retry:
        return ExecutionResult.retry_later(err_message)
    return ExecutionResult.error(err_message)


def _rundeck_error(action_id: str, message: str) -> ExecutionResult:
    return ExecutionResult.error(
        f'Invalid Response: an error occurred in rundeck action "{action_id}" '
        f"calling a rundeck job: {message}"
    )


def _rundeck_unreachable(action_id: str, message: str) -> ExecutionResult:
    return ExecutionResult.error(
        f'Unreachable Webhook: an error occurred in rundeck action "{action_id}" '
        f"calling a rundeck job: {message}"
    )


def _rundeck_retry(action_id: str, message: str) -> ExecutionResult:
    return ExecutionResult.retry_later(
        f'Invalid Response: an error occurred in rundeck action "{action_id}" '
        f"calling a rundeck job: {message}, retry later"
    )
