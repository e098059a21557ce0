"""
Data Transfer Objects (DTOs) for the rundeck action.

Config, secrets and params arrive from the host as plain dicts and are
validated into immutable objects here. Results flow back out as
ExecutionResult, the single type returned to the caller whichever
reporting channel was taken.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping
from urllib.parse import urlparse

from django.conf import settings

from apps.rundeck.templating import compile_template

RUNDECK_AUTH_HEADER = "X-Rundeck-Auth-Token"


class ValidationError(ValueError):
    """Raised when action config, secrets or params are invalid."""


class HttpMethod(str, Enum):
    """HTTP methods accepted for triggering a Rundeck job."""

    POST = "post"
    PUT = "put"

    @classmethod
    def parse(cls, value: Any) -> "HttpMethod":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        allowed = ", ".join(m.value for m in cls)
        raise ValidationError(f"[method]: expected one of {allowed}, got {value!r}")


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"[{key}]: expected a non-empty string")
    return value


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"[{key}]: expected a string")
    return value


@dataclass(frozen=True)
class RundeckActionConfig:
    """
    Connector configuration.

    headers is stored as a read-only mapping; callers get a fresh dict from
    build_headers() for every outbound request.
    """

    rundeck_base_url: str
    job_id: str
    method: HttpMethod = HttpMethod.POST
    rundeck_api_version: int = 24
    headers: Mapping[str, str] = field(default_factory=dict)
    note_template: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers or {})))

    @property
    def base_url(self) -> str:
        """Base URL with one trailing slash stripped."""
        url = self.rundeck_base_url
        return url[:-1] if url.endswith("/") else url

    @property
    def job_url(self) -> str:
        return f"{self.base_url}/api/{self.rundeck_api_version}/job/{self.job_id}/executions"

    def build_headers(self, api_token: str) -> dict[str, str]:
        """Return a new header dict with the Rundeck token merged in."""
        return merge_header(dict(self.headers), RUNDECK_AUTH_HEADER, api_token)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "RundeckActionConfig":
        data = data or {}

        base_url = _require_str(data, "rundeckBaseUrl")
        parsed = urlparse(base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationError(f"[rundeckBaseUrl]: expected an http(s) URI, got {base_url!r}")

        version = data.get("rundeckApiVersion")
        if version is None:
            version = getattr(settings, "RUNDECK_ACTION_DEFAULT_API_VERSION", 24)
        if isinstance(version, bool) or not isinstance(version, int):
            raise ValidationError(f"[rundeckApiVersion]: expected a number, got {version!r}")

        headers = data.get("headers") or {}
        if not isinstance(headers, Mapping) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in headers.items()
        ):
            raise ValidationError("[headers]: expected a mapping of strings to strings")

        note_template = _optional_str(data, "noteTemplate")
        if note_template is not None:
            try:
                compile_template(note_template)
            except ValueError as e:
                raise ValidationError(f"[noteTemplate]: {e}") from e

        return cls(
            rundeck_base_url=base_url,
            job_id=_require_str(data, "jobId"),
            method=HttpMethod.parse(data.get("method") or HttpMethod.POST.value),
            rundeck_api_version=version,
            headers=headers,
            note_template=note_template,
        )


@dataclass(frozen=True)
class RundeckActionSecrets:
    """Connector secrets. Values are kept out of repr()."""

    rundeck_api_token: str = field(repr=False)
    pd_api_key: str | None = field(default=None, repr=False)
    slack_webhook_url: str | None = field(default=None, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "RundeckActionSecrets":
        data = data or {}
        return cls(
            rundeck_api_token=_require_str(data, "rundeckApiToken"),
            pd_api_key=_optional_str(data, "pdApiKey") or None,
            slack_webhook_url=_optional_str(data, "slackWebhookUrl") or None,
        )


@dataclass(frozen=True)
class RundeckActionParams:
    """
    Invocation parameters.

    job_params is passed through to the Rundeck API untouched.
    """

    dedup_key: str | None = None
    job_params: dict[str, Any] | None = None

    @property
    def has_dedup_key(self) -> bool:
        return bool(self.dedup_key)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "RundeckActionParams":
        data = data or {}
        job_params = data.get("jobParams")
        if job_params is not None and not isinstance(job_params, Mapping):
            raise ValidationError("[jobParams]: expected an object")
        return cls(
            dedup_key=_optional_str(data, "dedupKey"),
            job_params=dict(job_params) if job_params is not None else None,
        )


@dataclass(frozen=True)
class ActionExecutorOptions:
    """Everything a single invocation of the executor needs."""

    action_id: str
    config: RundeckActionConfig
    secrets: RundeckActionSecrets
    params: RundeckActionParams = field(default_factory=RundeckActionParams)


@dataclass
class _CallResult:
    status: str
    data: Any = None
    message: str | None = None
    retry: bool = False

    @property
    def is_ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def ok(cls, data: Any = None):
        return cls(status="ok", data=data)

    @classmethod
    def error(cls, message: str):
        return cls(status="error", message=message)

    @classmethod
    def retry_later(cls, message: str):
        return cls(status="error", message=message, retry=True)

    def to_dict(self) -> dict[str, Any]:
        if self.is_ok:
            return {"status": "ok", "data": self.data}
        result: dict[str, Any] = {"status": "error", "message": self.message}
        if self.retry:
            result["retry"] = True
        return result


@dataclass
class ProviderCallResult(_CallResult):
    """Result of a single PagerDuty or Slack call."""


@dataclass
class ExecutionResult(_CallResult):
    """Final result of one rundeck action invocation."""


def merge_header(headers: dict[str, str], name: str, value: str) -> dict[str, str]:
    """Set a header in place, replacing any same-named header regardless of case."""
    for key in [k for k in headers if k.lower() == name.lower()]:
        del headers[key]
    headers[name] = value
    return headers
