"""
Rundeck action app.

Triggers a Rundeck job for an alert and reports the execution link back:
rundeck → (pagerduty note | slack message)

Key concepts:
- One linear pipeline per invocation, no internal retries
- Every failure becomes an ExecutionResult; retryability is only signalled
- The dedup key picks the reporting channel (PagerDuty when present, Slack otherwise)
"""

default_app_config = "apps.rundeck.apps.RundeckConfig"
