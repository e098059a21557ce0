"""PagerDuty REST API client (incident lookup and notes)."""

import logging
from typing import Any

from django.conf import settings

from apps.rundeck.clients.base import BaseProviderClient
from apps.rundeck.dtos import ProviderCallResult, merge_header
from apps.rundeck.http import HttpRequestError, send_request

logger = logging.getLogger(__name__)


class PagerDutyClient(BaseProviderClient):
    """
    Client for the PagerDuty REST API v2.

    Only the two calls the rundeck action needs are implemented:
    - GET  /incidents?incident_key=<dedup key>
    - POST /incidents/<id>/notes

    Authentication uses the "Token token=<api key>" authorization scheme.
    The headers passed in are copied per request and never mutated.
    """

    name = "pagerduty"

    DEFAULT_API_URL = "https://api.pagerduty.com"
    AUTH_HEADER = "Authorization"

    def __init__(self, action_id: str, api_key: str, headers: dict[str, str] | None = None):
        super().__init__(action_id)
        self.api_key = api_key
        self.headers = dict(headers or {})

    @property
    def api_url(self) -> str:
        url = getattr(settings, "RUNDECK_ACTION_PAGERDUTY_API_URL", self.DEFAULT_API_URL)
        return url.rstrip("/")

    def _auth_headers(self) -> dict[str, str]:
        return merge_header(dict(self.headers), self.AUTH_HEADER, f"Token token={self.api_key}")

    def _call(
        self,
        method: str,
        path: str,
        data: Any = None,
        params: dict[str, Any] | None = None,
    ) -> ProviderCallResult:
        try:
            response = send_request(
                method,
                f"{self.api_url}{path}",
                headers=self._auth_headers(),
                data=data,
                params=params,
            )
        except HttpRequestError as e:
            return self._failure_result(e)

        logger.debug(
            f'response status of calling pagerduty api in rundeck action "{self.action_id}": '
            f"{response.status}"
        )
        return ProviderCallResult.ok(response.data)

    def list_incidents_by_key(self, dedup_key: str) -> ProviderCallResult:
        """List incidents matching an incident key (the alert dedup key)."""
        return self._call("GET", "/incidents", params={"incident_key": dedup_key})

    def append_note(self, incident_id: str, content: str) -> ProviderCallResult:
        """Add a note to an incident."""
        return self._call(
            "POST",
            f"/incidents/{incident_id}/notes",
            data={"note": {"content": content}},
        )
