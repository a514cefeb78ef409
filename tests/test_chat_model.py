"""Tests for the verification assistant."""
from __future__ import annotations

from truthlens.ai.chat_model import EMPTY_REPLY, FALLBACK_REPLY, AssistantService


async def test_reply_uses_persona_and_plain_text(fake_gemini):
    fake_gemini.reply_text("  Check the original source first.  ")
    assistant = AssistantService(fake_gemini.client())

    reply = await assistant.reply("How do I spot a deepfake?")

    assert reply == "Check the original source first."
    body = fake_gemini.body()
    assert body["contents"][0]["parts"][0]["text"] == "How do I spot a deepfake?"
    assert "TruthLens Assistant" in body["systemInstruction"]["parts"][0]["text"]
    assert "generationConfig" not in body


async def test_failure_gives_fallback(fake_gemini):
    assistant = AssistantService(fake_gemini.reply_status(503).client())

    assert await assistant.reply("hello") == FALLBACK_REPLY


async def test_unconfigured_gives_fallback(fake_gemini):
    assistant = AssistantService(fake_gemini.client(api_key=""))

    assert await assistant.reply("hello") == FALLBACK_REPLY
    assert fake_gemini.requests == []


async def test_blank_or_empty_answer(fake_gemini):
    assistant = AssistantService(fake_gemini.reply_text("").client())

    assert await assistant.reply("   ") == EMPTY_REPLY
    assert await assistant.reply("question") == EMPTY_REPLY
