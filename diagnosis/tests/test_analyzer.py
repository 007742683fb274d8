# diagnosis/tests/test_analyzer.py
"""Tests for the vision model call and reply parsing."""
import asyncio
import json
import os
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from diagnosis.analyzer import build_payload, extract_report, request_completion
from diagnosis.config import MAX_TOKENS, TEMPERATURE
from diagnosis.errors import (
    DiagnosisConfigurationError,
    UpstreamConnectionError,
    UpstreamModelError,
    UpstreamTimeoutError,
)
from diagnosis.models import Level

IMAGE = "data:image/jpeg;base64,/9j/4AAQSkZJRg=="

REPORT = {
    "healthScore": 72,
    "riskLevel": "medium",
    "diagnosis": "Mild ear infection",
    "description": "Redness and discharge visible in the left ear.",
    "diseases": [{"name": "Otitis externa", "probability": 70, "severity": "medium"}],
    "recommendations": [
        {"title": "Vet visit", "description": "Have the ear checked this week", "priority": "high"}
    ],
    "medications": [
        {
            "name": "Ear cleaner",
            "dosage": "A few drops",
            "frequency": "Twice daily",
            "duration": "7 days",
            "purpose": "Keep the ear canal clean",
        }
    ],
}


def _completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _mock_response(status_code=200, body=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.text = text or json.dumps(body)
    response.json.return_value = body
    return response


def _patched_client(mock_client, response=None, side_effect=None):
    post = AsyncMock(return_value=response, side_effect=side_effect)
    mock_client.return_value.__aenter__.return_value.post = post
    return post


class TestBuildPayload:
    def test_payload_shape(self):
        payload = build_payload(IMAGE)

        assert payload["temperature"] == TEMPERATURE == 0.2
        assert payload["max_tokens"] == MAX_TOKENS == 2000
        content = payload["messages"][0]["content"]
        assert content[0]["type"] == "text"
        assert content[1] == {"type": "image_url", "image_url": {"url": IMAGE}}

    def test_symptoms_are_appended_to_prompt(self):
        payload = build_payload(IMAGE, symptoms="  scratching left ear  ")

        prompt = payload["messages"][0]["content"][0]["text"]
        assert prompt.endswith("scratching left ear")

    def test_blank_symptoms_are_ignored(self):
        assert build_payload(IMAGE, "   ") == build_payload(IMAGE)

    def test_model_from_environment(self):
        with patch.dict(os.environ, {"HEALPET_VISION_MODEL": "custom-vision"}):
            assert build_payload(IMAGE)["model"] == "custom-vision"


class TestExtractReport:
    def test_json_with_surrounding_prose(self):
        content = "Here is the assessment:\n```json\n" + json.dumps(REPORT) + "\n```\nTake care!"

        report = extract_report(content)

        assert report is not None
        assert report.health_score == 72
        assert report.risk_level == Level.MEDIUM
        assert report.diseases[0].name == "Otitis externa"
        assert [r.title for r in report.recommendations] == ["Vet visit"]

    def test_round_trips_to_wire_format(self):
        report = extract_report(json.dumps(REPORT))
        assert report.to_dict() == REPORT

    def test_levels_are_normalized(self):
        reply = dict(REPORT, riskLevel="Medium")
        assert extract_report(json.dumps(reply)).risk_level == Level.MEDIUM

    def test_no_json_object(self):
        assert extract_report("I cannot analyze this image.") is None

    def test_empty_reply(self):
        assert extract_report("") is None

    def test_invalid_json(self):
        assert extract_report("{healthScore: 72, riskLevel: medium}") is None

    def test_wrong_shape(self):
        assert extract_report(json.dumps({"healthScore": "great", "riskLevel": "none"})) is None

    def test_score_out_of_range(self):
        assert extract_report(json.dumps(dict(REPORT, healthScore=140))) is None


class TestRequestCompletion:
    def test_missing_api_key(self):
        with patch.dict(os.environ, {"GROQ_API_KEY": ""}):
            with pytest.raises(DiagnosisConfigurationError, match="Required environment variables are missing"):
                asyncio.run(request_completion(IMAGE))

    def test_returns_reply_text(self):
        with patch.dict(os.environ, {"GROQ_API_KEY": "gsk_test"}), \
                patch("diagnosis.analyzer.httpx.AsyncClient") as mock_client:
            post = _patched_client(mock_client, _mock_response(200, _completion("hello")))

            content = asyncio.run(request_completion(IMAGE, "limping"))

        assert content == "hello"
        _, kwargs = post.call_args
        assert kwargs["headers"]["Authorization"] == "Bearer gsk_test"
        assert kwargs["json"]["max_tokens"] == 2000

    def test_upstream_error_status(self):
        response = _mock_response(503, None, text='{"error":"over capacity"}')
        with patch("diagnosis.analyzer.httpx.AsyncClient") as mock_client:
            _patched_client(mock_client, response)

            with pytest.raises(UpstreamModelError) as exc_info:
                asyncio.run(request_completion(IMAGE))

        assert exc_info.value.status_code == 503
        assert "over capacity" in str(exc_info.value)
        assert exc_info.value.kind == "server"

    def test_timeout(self):
        with patch("diagnosis.analyzer.httpx.AsyncClient") as mock_client:
            _patched_client(mock_client, side_effect=httpx.ReadTimeout("slow"))

            with pytest.raises(UpstreamTimeoutError) as exc_info:
                asyncio.run(request_completion(IMAGE))

        assert exc_info.value.kind == "timeout"

    def test_connection_error(self):
        with patch("diagnosis.analyzer.httpx.AsyncClient") as mock_client:
            _patched_client(mock_client, side_effect=httpx.ConnectError("refused"))

            with pytest.raises(UpstreamConnectionError) as exc_info:
                asyncio.run(request_completion(IMAGE))

        assert exc_info.value.kind == "network"

    def test_unexpected_envelope_returns_empty(self):
        with patch("diagnosis.analyzer.httpx.AsyncClient") as mock_client:
            _patched_client(mock_client, _mock_response(200, {"choices": []}))

            assert asyncio.run(request_completion(IMAGE)) == ""
