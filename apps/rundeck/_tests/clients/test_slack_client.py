"""Tests for SlackClient and IncomingWebhook."""

import io
import json
import urllib.error
from unittest.mock import MagicMock, patch

from django.test import SimpleTestCase

from apps.rundeck.clients.slack import (
    IncomingWebhook,
    SlackClient,
    SlackWebhookError,
    nested_response,
)
from apps.rundeck.http import HttpRequestError, HttpResponse

VALID_WEBHOOK = "https://hooks.slack.com/services/T00/B00/xxx"


def _mock_urlopen(response_body="ok", status_code=200, reason="OK"):
    """Create a mock context manager for urllib.request.urlopen."""
    mock_resp = MagicMock()
    mock_resp.read.return_value = response_body.encode("utf-8")
    mock_resp.getcode.return_value = status_code
    mock_resp.reason = reason
    mock_resp.__enter__ = MagicMock(return_value=mock_resp)
    mock_resp.__exit__ = MagicMock(return_value=False)
    return mock_resp


def _http_error(code, reason, body=b""):
    return urllib.error.HTTPError(VALID_WEBHOOK, code, reason, {}, io.BytesIO(body))


class IncomingWebhookTests(SimpleTestCase):
    @patch("apps.rundeck.http.urllib.request.urlopen")
    def test_send_posts_text_payload(self, mock_urlopen):
        mock_urlopen.return_value = _mock_urlopen("ok")

        result = IncomingWebhook(VALID_WEBHOOK).send("hello")

        self.assertEqual(result, "ok")
        request = mock_urlopen.call_args[0][0]
        self.assertEqual(request.full_url, VALID_WEBHOOK)
        self.assertEqual(request.get_method(), "POST")
        self.assertEqual(json.loads(request.data.decode("utf-8")), {"text": "hello"})
        self.assertIsNone(request.get_header("Authorization"))

    @patch("apps.rundeck.http.urllib.request.urlopen")
    def test_send_wraps_transport_error(self, mock_urlopen):
        mock_urlopen.side_effect = _http_error(404, "Not Found", b"no_service")

        with self.assertRaises(SlackWebhookError) as ctx:
            IncomingWebhook(VALID_WEBHOOK).send("hello")

        self.assertIsInstance(ctx.exception.original, HttpRequestError)
        self.assertEqual(ctx.exception.original.response.status, 404)


class NestedResponseTests(SimpleTestCase):
    def test_missing_original(self):
        self.assertIsNone(nested_response(SlackWebhookError("x")))

    def test_original_without_response(self):
        self.assertIsNone(nested_response(SlackWebhookError("x", HttpRequestError("y"))))

    def test_original_with_response(self):
        response = HttpResponse(500, "Internal Server Error")
        error = SlackWebhookError("x", HttpRequestError("y", response=response))
        self.assertIs(nested_response(error), response)


class SlackPostMessageTests(SimpleTestCase):
    def setUp(self):
        self.client = SlackClient("action-1")

    @patch("apps.rundeck.http.urllib.request.urlopen")
    def test_success(self, mock_urlopen):
        mock_urlopen.return_value = _mock_urlopen("ok")

        result = self.client.post_message(VALID_WEBHOOK, "Link: http://rd/execution/1")

        self.assertTrue(result.is_ok)
        self.assertEqual(result.data, "ok")

    @patch("apps.rundeck.http.urllib.request.urlopen")
    def test_rate_limit_is_retryable(self, mock_urlopen):
        mock_urlopen.side_effect = _http_error(429, "Too Many Requests")

        result = self.client.post_message(VALID_WEBHOOK, "x")

        self.assertFalse(result.is_ok)
        self.assertTrue(result.retry)
        self.assertTrue(
            result.message.startswith("an error occurred posting a slack message, retry later: ")
        )

    @patch("apps.rundeck.http.urllib.request.urlopen")
    def test_server_error_is_retryable(self, mock_urlopen):
        mock_urlopen.side_effect = _http_error(500, "Internal Server Error")
        self.assertTrue(self.client.post_message(VALID_WEBHOOK, "x").retry)

    @patch("apps.rundeck.http.urllib.request.urlopen")
    def test_client_error_includes_status(self, mock_urlopen):
        mock_urlopen.side_effect = _http_error(403, "Forbidden", b"invalid_token")

        result = self.client.post_message(VALID_WEBHOOK, "x")

        self.assertFalse(result.retry)
        self.assertTrue(result.message.startswith("an error occurred posting a slack message: "))
        self.assertTrue(result.message.endswith("[403] Forbidden"))

    @patch("apps.rundeck.http.urllib.request.urlopen")
    def test_unreachable_is_not_retryable(self, mock_urlopen):
        mock_urlopen.side_effect = urllib.error.URLError("Name or service not known")

        result = self.client.post_message(VALID_WEBHOOK, "x")

        self.assertFalse(result.is_ok)
        self.assertFalse(result.retry)
        self.assertIn("Name or service not known", result.message)
        self.assertNotIn("retry later", result.message)

    def test_error_without_original_is_unreachable(self):
        with patch.object(IncomingWebhook, "send", side_effect=SlackWebhookError("invalid url")):
            result = self.client.post_message("not-a-url", "x")

        self.assertFalse(result.retry)
        self.assertEqual(result.message, "an error occurred posting a slack message: invalid url")
