"""Tests for the shared outcome classifier."""

from django.test import SimpleTestCase

from apps.rundeck.classify import (
    Classification,
    Outcome,
    classify_failure,
    classify_status,
    is_retryable_status,
)
from apps.rundeck.http import HttpRequestError, HttpResponse


class ClassifyStatusTests(SimpleTestCase):
    def test_2xx_on_a_failed_call_is_error(self):
        for status in (200, 201, 204, 299):
            self.assertEqual(classify_status(status), Outcome.ERROR)

    def test_429_and_5xx_are_retryable(self):
        for status in (429, 500, 502, 503, 504, 599):
            self.assertEqual(classify_status(status), Outcome.RETRYABLE)
            self.assertTrue(is_retryable_status(status))

    def test_other_statuses_are_errors(self):
        for status in (301, 400, 401, 403, 404, 409, 428, 430):
            self.assertEqual(classify_status(status), Outcome.ERROR)
            self.assertFalse(is_retryable_status(status))


class ClassifyFailureTests(SimpleTestCase):
    def test_no_response_is_unreachable(self):
        result = classify_failure(HttpRequestError("Failed to connect: refused"))
        self.assertEqual(result.outcome, Outcome.UNREACHABLE)
        self.assertIsNone(result.status)
        self.assertFalse(result.retry)
        self.assertEqual(result.status_line, "")

    def test_server_error_is_retryable(self):
        error = HttpRequestError("boom", response=HttpResponse(503, "Service Unavailable"))
        result = classify_failure(error)
        self.assertEqual(result.outcome, Outcome.RETRYABLE)
        self.assertTrue(result.retry)
        self.assertEqual(result.status_line, "[503] Service Unavailable")

    def test_rate_limit_is_retryable(self):
        error = HttpRequestError("slow down", response=HttpResponse(429, "Too Many Requests"))
        self.assertTrue(classify_failure(error).retry)

    def test_client_error_is_not_retryable(self):
        error = HttpRequestError("nope", response=HttpResponse(404, "Not Found"))
        result = classify_failure(error)
        self.assertEqual(result.outcome, Outcome.ERROR)
        self.assertEqual(result.status, 404)

    def test_success_status_on_error_is_error(self):
        error = HttpRequestError("odd", response=HttpResponse(200, "OK"))
        self.assertEqual(classify_failure(error).outcome, Outcome.ERROR)

    def test_custom_extractor(self):
        """Nested error shapes are supported through the extractor argument."""

        class Wrapped(Exception):
            def __init__(self, inner):
                super().__init__("wrapped")
                self.inner = inner

        inner = HttpRequestError("x", response=HttpResponse(500, "Internal Server Error"))
        result = classify_failure(Wrapped(inner), lambda e: e.inner.response)
        self.assertEqual(result.outcome, Outcome.RETRYABLE)

    def test_plain_exception_is_unreachable(self):
        self.assertEqual(classify_failure(ValueError("x")).outcome, Outcome.UNREACHABLE)

    def test_status_line_without_reason(self):
        self.assertEqual(Classification(Outcome.ERROR, status=418).status_line, "[418]")
