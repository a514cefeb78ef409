"""Shared fixtures: a fake Gemini endpoint built on httpx.MockTransport."""
from __future__ import annotations

import json

import httpx
import pytest

from truthlens.ai.gemini_client import GeminiClient
from truthlens.db import database

BASE_URL = "https://gemini.test/v1beta"


def gemini_payload(text: str) -> dict:
    """Wrap *text* the way generateContent returns it."""
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


class FakeGemini:
    """Records requests and answers with queued (status, body) pairs."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(500, json={"error": "no response queued"})
        status, body = self.responses.pop(0)
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body)

    def reply_json(self, data, status: int = 200) -> FakeGemini:
        self.responses.append((status, gemini_payload(json.dumps(data))))
        return self

    def reply_text(self, text: str, status: int = 200) -> FakeGemini:
        self.responses.append((status, gemini_payload(text)))
        return self

    def reply_status(self, status: int, body="upstream error") -> FakeGemini:
        self.responses.append((status, body))
        return self

    def client(self, api_key: str = "test-key", max_retries: int = 0) -> GeminiClient:
        return GeminiClient(
            api_key=api_key,
            base_url=BASE_URL,
            max_retries=max_retries,
            retry_delay_seconds=0.0,
            transport=httpx.MockTransport(self.handler),
        )

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def fake_gemini() -> FakeGemini:
    return FakeGemini()


@pytest.fixture(autouse=True)
def _clean_history():
    database._history.clear()
    yield
    database._history.clear()


VALID_ANALYSIS = {
    "classification": "Fake",
    "confidence": 91,
    "summary": "The claim is fabricated.",
    "reasoning": ["No credible outlet reports this.", "Image is recycled."],
    "factChecks": [
        {"claim": "Moon landing staged", "verdict": "False", "source": "NASA"},
    ],
    "emotionalTriggers": ["fear", "outrage"],
    "viralityScore": 77,
    "isAiGenerated": True,
}
