"""
Clients that report a triggered Rundeck execution to another service.
"""

from apps.rundeck.clients.base import BaseProviderClient
from apps.rundeck.clients.pagerduty import PagerDutyClient
from apps.rundeck.clients.slack import IncomingWebhook, SlackClient, SlackWebhookError

__all__ = [
    "BaseProviderClient",
    "IncomingWebhook",
    "PagerDutyClient",
    "SlackClient",
    "SlackWebhookError",
]
