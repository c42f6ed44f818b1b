"""Tests for the advisory collaborator and its fallbacks."""

import sys
import os
from pathlib import Path
import unittest
from unittest import mock

import requests

# Add the src directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sparkgrid.advisory import (
    AdvisoryClient, AdvisoryService, GeminiAdvisoryClient, StaticAdvisoryClient,
    build_prompt, FALLBACK_ADVICE, EMPTY_RESPONSE_ADVICE, DEFAULT_MODEL
)
from sparkgrid.exceptions import AdvisoryError
from sparkgrid.models import AdvisoryRequest


def make_response(payload=None, status_error=None, json_error=None):
    """Build a mock HTTP response."""
    response = mock.Mock()
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


def gemini_payload(*texts):
    return {"candidates": [{"content": {"parts": [{"text": t} for t in texts]}}]}


class ExplodingClient(AdvisoryClient):
    """Client that fails with an arbitrary exception."""

    def __init__(self):
        super().__init__("exploding")

    def advise(self, request):
        raise RuntimeError("boom")


class TestPrompt(unittest.TestCase):

    def test_prompt_contains_summary(self):
        request = AdvisoryRequest(77.0, 132.0, 55.0, "storm")
        prompt = build_prompt(request)
        self.assertTrue(prompt.startswith("You are SparkGrid AI"))
        self.assertIn("- Total Gen: 77.0MW", prompt)
        self.assertIn("- Total Cons: 132.0MW", prompt)
        self.assertIn("- Net Load: 55.0MW", prompt)
        self.assertIn("- Scenario: storm", prompt)


class TestGeminiClient(unittest.TestCase):
    """Tests for the REST client against a mocked session."""

    def setUp(self):
        self.session = mock.Mock()
        self.client = GeminiAdvisoryClient(api_key="test-key", session=self.session)
        self.request = AdvisoryRequest(77.0, 132.0, 55.0, "general")

    def test_successful_call(self):
        self.session.post.return_value = make_response(
            gemini_payload("Shift EV charging ", "to off-peak hours.")
        )
        text = self.client.advise(self.request)
        self.assertEqual(text, "Shift EV charging to off-peak hours.")

        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], self.client.url)
        self.assertTrue(args[0].endswith(f"/models/{DEFAULT_MODEL}:generateContent"))
        self.assertEqual(kwargs["headers"], {"x-goog-api-key": "test-key"})
        self.assertEqual(kwargs["timeout"], 30.0)
        sent_prompt = kwargs["json"]["contents"][0]["parts"][0]["text"]
        self.assertEqual(sent_prompt, build_prompt(self.request))

    def test_network_error(self):
        self.session.post.side_effect = requests.ConnectionError("unreachable")
        with self.assertRaises(AdvisoryError):
            self.client.advise(self.request)

    def test_http_error(self):
        self.session.post.return_value = make_response(
            status_error=requests.HTTPError("503 Service Unavailable")
        )
        with self.assertRaises(AdvisoryError):
            self.client.advise(self.request)

    def test_invalid_json(self):
        self.session.post.return_value = make_response(json_error=ValueError("not json"))
        with self.assertRaises(AdvisoryError):
            self.client.advise(self.request)

    def test_malformed_body(self):
        self.session.post.return_value = make_response({"promptFeedback": {}})
        with self.assertRaises(AdvisoryError):
            self.client.advise(self.request)

    def test_missing_api_key(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            client = GeminiAdvisoryClient(api_key_env="SPARKGRID_TEST_KEY", session=self.session)
            self.assertFalse(client.is_available())
            with self.assertRaises(AdvisoryError):
                client.advise(self.request)
        self.session.post.assert_not_called()

    def test_api_key_from_environment(self):
        with mock.patch.dict(os.environ, {"SPARKGRID_TEST_KEY": "env-key"}):
            client = GeminiAdvisoryClient(api_key_env="SPARKGRID_TEST_KEY", session=self.session)
            self.assertTrue(client.is_available())
            self.session.post.return_value = make_response(gemini_payload("ok"))
            client.advise(self.request)
        _, kwargs = self.session.post.call_args
        self.assertEqual(kwargs["headers"]["x-goog-api-key"], "env-key")


class TestAdvisoryService(unittest.TestCase):
    """Tests for fallback handling in the service."""

    def setUp(self):
        self.request = AdvisoryRequest(20.0, 0.0, -20.0, "blackout")

    def test_success(self):
        service = AdvisoryService(StaticAdvisoryClient("Discharge storage."))
        advice = service.get_advice(self.request)
        self.assertEqual(advice.text, "Discharge storage.")
        self.assertFalse(advice.fallback_used)
        self.assertEqual(advice.request, self.request)
        self.assertIsNotNone(advice.received_at)

    def test_empty_response_uses_default_text(self):
        service = AdvisoryService(StaticAdvisoryClient(""))
        self.assertEqual(service.get_advice(self.request).text, EMPTY_RESPONSE_ADVICE)

    def test_failures_yield_fallback(self):
        """Every failure mode maps to the literal fallback string."""
        session = mock.Mock()
        failing_clients = [
            ExplodingClient(),
            GeminiAdvisoryClient(api_key="k", session=session),
        ]
        session.post.side_effect = requests.Timeout("timed out")

        for client in failing_clients:
            service = AdvisoryService(client)
            advice = service.get_advice(self.request)
            self.assertEqual(advice.text, FALLBACK_ADVICE)
            self.assertEqual(advice.text, "Manual override suggested.")
            self.assertTrue(advice.fallback_used)
            self.assertEqual(advice.request, self.request)

    def test_metadata_counts(self):
        service = AdvisoryService(ExplodingClient())
        service.get_advice(self.request)
        service.get_advice(self.request)
        metadata = service.get_metadata()
        self.assertEqual(metadata["client"], "exploding")
        self.assertEqual(metadata["request_count"], 2)
        self.assertEqual(metadata["failure_count"], 2)


if __name__ == "__main__":
    unittest.main()
