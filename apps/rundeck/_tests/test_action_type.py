"""Tests for the rundeck action type descriptor and registry."""

from unittest.mock import MagicMock

from django.test import SimpleTestCase

from apps.rundeck.action_type import ACTION_TYPE_REGISTRY, get_action_type
from apps.rundeck.dtos import ActionExecutorOptions, ExecutionResult, HttpMethod

CONFIG = {"rundeckBaseUrl": "http://rd.local/", "jobId": "42"}
SECRETS = {"rundeckApiToken": "rd-token", "slackWebhookUrl": "https://hooks.slack.com/x"}


class ActionTypeTests(SimpleTestCase):
    def test_registry_contains_rundeck(self):
        action_type = ACTION_TYPE_REGISTRY[".rundeck"]()
        self.assertEqual(action_type.id, ".rundeck")
        self.assertEqual(action_type.name, "rundeck")

    def test_run_validates_and_executes(self):
        executor = MagicMock()
        executor.execute.return_value = ExecutionResult.ok({"id": 1})
        action_type = get_action_type(executor)

        result = action_type.run("a-1", CONFIG, SECRETS, {"dedupKey": "abc", "jobParams": {"x": 1}})

        self.assertTrue(result.is_ok)
        options = executor.execute.call_args[0][0]
        self.assertIsInstance(options, ActionExecutorOptions)
        self.assertEqual(options.action_id, "a-1")
        self.assertEqual(options.config.method, HttpMethod.POST)
        self.assertEqual(options.config.job_url, "http://rd.local/api/24/job/42/executions")
        self.assertEqual(options.secrets.rundeck_api_token, "rd-token")
        self.assertEqual(options.params.dedup_key, "abc")
        self.assertEqual(options.params.job_params, {"x": 1})

    def test_invalid_config_returns_error_result(self):
        executor = MagicMock()
        action_type = get_action_type(executor)

        result = action_type.run("a-1", {"jobId": "42"}, SECRETS)

        self.assertEqual(result.status, "error")
        self.assertFalse(result.retry)
        self.assertTrue(result.message.startswith("Invalid Configuration:"))
        self.assertIn("rundeckBaseUrl", result.message)
        executor.execute.assert_not_called()

    def test_missing_token_returns_error_result(self):
        executor = MagicMock()

        result = get_action_type(executor).run("a-1", CONFIG, {})

        self.assertEqual(result.status, "error")
        self.assertIn("rundeckApiToken", result.message)
        executor.execute.assert_not_called()
