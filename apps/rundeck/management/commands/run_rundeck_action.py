"""
Management command to run the rundeck action once.

Usage:
    python manage.py run_rundeck_action --base-url https://rundeck.local --job-id 42
    python manage.py run_rundeck_action --base-url https://rundeck.local --job-id 42 --dedup-key abc
    python manage.py run_rundeck_action --json-config '{"rundeckBaseUrl": "...", "jobId": "42"}'

Secrets default to the RUNDECK_API_TOKEN, PAGERDUTY_API_KEY and
SLACK_WEBHOOK_URL environment variables.
"""

import json
import os
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from apps.rundeck.action_type import ACTION_TYPE_REGISTRY


class Command(BaseCommand):
    help = "Trigger a Rundeck job and report the execution to PagerDuty or Slack"

    def add_arguments(self, parser):
        parser.add_argument(
            "--action-id",
            type=str,
            default="cli",
            help="Identifier used in log lines and error messages (default: 'cli')",
        )
        parser.add_argument(
            "--json-config",
            type=str,
            help="Action configuration as JSON string (overrides the options below)",
        )

        # Config options
        parser.add_argument("--base-url", type=str, help="Rundeck base URL")
        parser.add_argument("--job-id", type=str, help="Rundeck job id")
        parser.add_argument(
            "--method",
            type=str,
            choices=["post", "put"],
            default="post",
            help="HTTP method for triggering the job (default: post)",
        )
        parser.add_argument("--api-version", type=int, help="Rundeck API version")
        parser.add_argument(
            "--header",
            action="append",
            default=[],
            metavar="NAME=VALUE",
            help="Extra request header (repeatable)",
        )
        parser.add_argument("--note-template", type=str, help="Jinja2 template for the note")

        # Params
        parser.add_argument("--dedup-key", type=str, help="PagerDuty dedup key (incident_key)")
        parser.add_argument("--job-params", type=str, help="Job parameters as JSON object")

        # Secrets
        parser.add_argument("--rundeck-api-token", type=str, help="Rundeck API token")
        parser.add_argument("--pd-api-key", type=str, help="PagerDuty REST API key")
        parser.add_argument("--slack-webhook-url", type=str, help="Slack incoming webhook URL")

    def handle(self, *args, **options):
        action_type = ACTION_TYPE_REGISTRY[".rundeck"]()

        config = self._build_config(options)
        secrets = self._build_secrets(options)
        params = self._build_params(options)

        self.stdout.write(
            self.style.WARNING(f"Running {action_type.name} action \"{options['action_id']}\"...")
        )

        result = action_type.run(options["action_id"], config, secrets, params)

        if result.is_ok:
            self.stdout.write(self.style.SUCCESS("✓ Rundeck job triggered and reported successfully!"))
            self.stdout.write(f"  Response: {json.dumps(result.data, indent=2, default=str)}")
            return

        self.stdout.write(self.style.ERROR("✗ Rundeck action failed"))
        self.stdout.write(f"  Retryable: {result.retry}")
        raise CommandError(result.message)

    def _build_config(self, options: dict[str, Any]) -> dict[str, Any]:
        """Build action configuration from command options."""
        if options.get("json_config"):
            return self._load_json(options["json_config"], "--json-config")

        config: dict[str, Any] = {"method": options.get("method") or "post"}

        if options.get("base_url"):
            config["rundeckBaseUrl"] = options["base_url"]
        if options.get("job_id"):
            config["jobId"] = options["job_id"]
        if options.get("api_version") is not None:
            config["rundeckApiVersion"] = options["api_version"]
        if options.get("note_template"):
            config["noteTemplate"] = options["note_template"]

        headers = {}
        for item in options.get("header") or []:
            name, sep, value = item.partition("=")
            if not sep or not name.strip():
                raise CommandError(f"Invalid header {item!r}, expected NAME=VALUE")
            headers[name.strip()] = value.strip()
        if headers:
            config["headers"] = headers

        return config

    def _build_secrets(self, options: dict[str, Any]) -> dict[str, Any]:
        """Build secrets from options, falling back to the environment."""
        return {
            "rundeckApiToken": options.get("rundeck_api_token") or os.environ.get("RUNDECK_API_TOKEN"),
            "pdApiKey": options.get("pd_api_key") or os.environ.get("PAGERDUTY_API_KEY"),
            "slackWebhookUrl": options.get("slack_webhook_url") or os.environ.get("SLACK_WEBHOOK_URL"),
        }

    def _build_params(self, options: dict[str, Any]) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if options.get("dedup_key"):
            params["dedupKey"] = options["dedup_key"]
        if options.get("job_params"):
            params["jobParams"] = self._load_json(options["job_params"], "--job-params")
        return params

    def _load_json(self, raw: str, flag: str) -> Any:
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise CommandError(f"Invalid JSON for {flag}: {e}")
