"""
truthlens.ai.chat_model – the dashboard's question-and-answer assistant.

Questions go to the text model as plain prose under a fixed persona.  The
assistant never raises: a failed call yields a fixed apology message.
"""
from __future__ import annotations

import logging

from truthlens.ai.gemini_client import GeminiClient
from truthlens.config import get_settings
from truthlens.errors import GeminiError

logger = logging.getLogger(__name__)

MAX_QUESTION_CHARS = 4000

GREETING = (
    "Hello! I am your TruthLens Assistant. Ask me anything about verification, "
    "misinformation, or how to use this dashboard."
)
ASSISTANT_INSTRUCTION = (
    "You are the TruthLens Assistant, an expert in cognitive security, "
    "misinformation detection, and fact-checking. Keep answers concise, "
    "helpful, and focused on truth verification."
)
EMPTY_REPLY = "I couldn't process that request."
FALLBACK_REPLY = "Sorry, I'm having trouble connecting to the TruthLens network."


class AssistantService:
    """Answer free-form verification questions."""

    def __init__(self, client: GeminiClient | None = None) -> None:
        self.client = client or GeminiClient()
        self.model = get_settings().gemini_text_model

    async def reply(self, text: str) -> str:
        question = (text or "").strip()[:MAX_QUESTION_CHARS]
        if not question:
            return EMPTY_REPLY
        try:
            answer = await self.client.generate(
                self.model,
                question,
                system_instruction=ASSISTANT_INSTRUCTION,
                json_mode=False,
            )
        except GeminiError as exc:
            logger.error("Assistant reply failed: %s", exc)
            return FALLBACK_REPLY
        return answer.strip() or EMPTY_REPLY
